"""
Directory walker for treefind.

This module traverses a directory tree looking for entries whose base names
equal one of the requested target names. When the search is recursive every
subdirectory is walked by its own worker thread, and the parent joins that
thread before it moves on, so the walk stays depth-first and the number of
live workers is bounded by the depth of the current path. The fanout strategy
starts a batch of sibling workers before joining them.

A directory that cannot be listed ends the walk of that subtree only. The
failure is logged, counted and passed to the optional error callback; it is
never raised to the caller.
"""

import os
import threading
import time
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union
import logging

from ..errors import SubtreeAccessError
from ..models.config import WalkerConfig
from ..models.search_request import SearchRequest
from ..models.search_results import MatchRecord, WalkSummary
from .name_matcher import matching_targets
from .output import LineWriter, MatchSink


logger = logging.getLogger(__name__)

ErrorCallback = Callable[[SubtreeAccessError], None]


class DirectoryWalker:
    """
    Walks a directory tree and emits a MatchRecord for every name match.

    Args:
        config: Walker settings (strategy and fanout batch size)
        sink: Called with each MatchRecord; prints lines to stdout by default
        on_error: Called with a SubtreeAccessError whenever a subtree is skipped
    """

    def __init__(self, config: Optional[WalkerConfig] = None,
                 sink: Optional[MatchSink] = None,
                 on_error: Optional[ErrorCallback] = None):
        self.config = config if config is not None else WalkerConfig()
        self.sink = sink if sink is not None else LineWriter()
        self.on_error = on_error

    def walk(self, request: SearchRequest) -> WalkSummary:
        """
        Search the tree described by a request.

        The root directory is walked in the calling thread.

        Args:
            request: What to search for and where

        Returns:
            WalkSummary with counters for the whole tree
        """
        summary = WalkSummary()

        if not request.has_targets():
            logger.info("No target names given, nothing to search for")
            return summary

        logger.info(f"Walking directory tree: {request}")
        started = time.monotonic()

        self._walk_directory(request.root_path, request, summary)

        summary.execution_time = time.monotonic() - started
        logger.info(f"Walk finished: {summary}")
        return summary

    def _walk_directory(self, path: str, request: SearchRequest, summary: WalkSummary) -> None:
        """
        Walk one directory in the current unit.

        Args:
            path: Directory to list
            request: The search request, shared by all units
            summary: Counters shared by all units
        """
        summary.record_directory()
        logger.debug(f"Listing {path} in worker {threading.get_native_id()}")

        try:
            entries = os.scandir(path)
        except OSError as e:
            self._handle_error(path, e, summary)
            return

        pending: List[str] = []
        with entries:
            # Only listing errors end the subtree; sink errors propagate
            while True:
                try:
                    entry = next(entries)
                except StopIteration:
                    break
                except OSError as e:
                    self._handle_error(path, e, summary)
                    break

                summary.record_entry()

                if request.recursive and self._is_directory(entry):
                    pending.append(entry.path)
                    if len(pending) >= self._batch_size():
                        self._run_units(pending, request, summary)
                        pending = []
                    continue

                self._compare_entry(entry, request, summary)

        # Subdirectories seen before a listing failure are still walked
        if pending:
            self._run_units(pending, request, summary)

    def _batch_size(self) -> int:
        if self.config.is_fanout():
            return self.config.max_concurrent
        return 1

    def _is_directory(self, entry: os.DirEntry) -> bool:
        """Check if an entry is a directory, following symlinks."""
        try:
            return entry.is_dir()
        except OSError as e:
            logger.debug(f"Cannot stat {entry.path}, comparing it as a file: {e}")
            return False

    def _compare_entry(self, entry: os.DirEntry, request: SearchRequest, summary: WalkSummary) -> None:
        """Emit a record for each target name the entry matches."""
        for _ in matching_targets(entry.name, request.target_names, request.ignore_case):
            record = MatchRecord.from_entry(
                worker_id=threading.get_native_id(),
                matched_name=entry.name,
                full_path=entry.path
            )
            summary.record_match()
            self.sink(record)

    def _run_units(self, paths: List[str], request: SearchRequest, summary: WalkSummary) -> None:
        """
        Walk each path in its own thread and wait for all of them.

        Traversal errors stay inside the unit that hit them. Any other
        exception, such as one raised by the sink, is re-raised here once
        every thread in the batch has been joined.

        A subdirectory whose thread cannot be started is walked in the
        current thread after the batch has been joined.
        """
        failures: List[Exception] = []
        inline: List[str] = []
        started: List[threading.Thread] = []

        def run(subdirectory: str) -> None:
            try:
                self._walk_directory(subdirectory, request, summary)
            except Exception as e:
                failures.append(e)

        try:
            for subdirectory in paths:
                thread = threading.Thread(target=run, args=(subdirectory,),
                                          name=f"treefind:{Path(subdirectory).name}")
                try:
                    thread.start()
                except RuntimeError as e:
                    logger.warning(f"Cannot start worker for {subdirectory}, walking it inline: {e}")
                    inline.append(subdirectory)
                    continue
                started.append(thread)
        finally:
            for thread in started:
                thread.join()

        for subdirectory in inline:
            run(subdirectory)

        if failures:
            raise failures[0]

    def _handle_error(self, path: str, error: OSError, summary: WalkSummary) -> None:
        """Record a skipped subtree and report it through the side channel."""
        access_error = SubtreeAccessError(path, error)
        logger.warning(str(access_error))
        summary.record_error(str(access_error))

        if self.on_error is not None:
            self.on_error(access_error)


def walk(path: Union[str, Path], target_names: Iterable[str],
         recursive: bool = False, ignore_case: bool = False,
         sink: Optional[MatchSink] = None,
         config: Optional[WalkerConfig] = None,
         on_error: Optional[ErrorCallback] = None) -> WalkSummary:
    """
    Search a directory tree for entries named like one of the targets.

    Args:
        path: Directory to search, relative paths are resolved against the cwd
        target_names: File names to look for
        recursive: Descend into subdirectories
        ignore_case: Compare names case-insensitively
        sink: Receives each MatchRecord; prints to stdout by default
        config: Walker settings
        on_error: Receives each SubtreeAccessError

    Returns:
        WalkSummary for the search

    Raises:
        PathResolutionError: If the path is missing or not a directory
    """
    request = SearchRequest.create(path, target_names, recursive=recursive, ignore_case=ignore_case)
    walker = DirectoryWalker(config=config, sink=sink, on_error=on_error)
    return walker.walk(request)
