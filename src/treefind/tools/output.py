"""
Match sinks for treefind.

A sink is any callable taking a MatchRecord. Sinks here are called from many
worker threads, so each one serializes its writes with a lock and writes
a whole line per call.
"""

import json
import os
import sys
import threading
from typing import Callable, List, Optional, TextIO

from ..models.config import OutputFormat
from ..models.search_results import MatchRecord


MatchSink = Callable[[MatchRecord], None]


class LineWriter:
    """
    Write each match as ``<workerId> : <matchedName> : <fullPath>``.

    Names that are not valid UTF-8 are written back as the bytes found on
    disk when the stream has an underlying binary buffer.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout
        self._lock = threading.Lock()

    def format(self, record: MatchRecord) -> str:
        return record.format_line()

    def __call__(self, record: MatchRecord) -> None:
        line = self.format(record) + "\n"
        with self._lock:
            buffer = getattr(self.stream, "buffer", None)
            if buffer is None:
                self.stream.write(line)
                self.stream.flush()
                return
            self.stream.flush()
            buffer.write(os.fsencode(line))
            buffer.flush()


class JsonLinesWriter(LineWriter):
    """Write each match as one JSON object per line."""

    def format(self, record: MatchRecord) -> str:
        # ensure_ascii escapes undecodable bytes instead of failing on them
        return json.dumps(record.to_dict())


class MatchCollector:
    """
    Keep matches in memory.

    Useful for callers that want the records rather than printed lines.
    """

    def __init__(self):
        self._records: List[MatchRecord] = []
        self._lock = threading.Lock()

    def __call__(self, record: MatchRecord) -> None:
        with self._lock:
            self._records.append(record)

    @property
    def records(self) -> List[MatchRecord]:
        with self._lock:
            return list(self._records)

    def paths(self) -> List[str]:
        """Get the full paths of all collected matches, sorted."""
        return sorted(record.full_path for record in self.records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def create_sink(output_format: OutputFormat = OutputFormat.TEXT, stream: Optional[TextIO] = None) -> LineWriter:
    """
    Create a writer for the given output format.

    Args:
        output_format: TEXT or JSON
        stream: Stream to write to, stdout by default

    Returns:
        A sink writing one line per match
    """
    if output_format == OutputFormat.JSON:
        return JsonLinesWriter(stream)
    return LineWriter(stream)
