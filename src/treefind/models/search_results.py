"""
Search result data models for treefind.

This module defines the record emitted for every match and the summary
collected over a whole walk.
"""

import threading
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


class MatchRecord(BaseModel):
    """
    A single match, created the moment a name comparison succeeds.

    Attributes:
        worker_id: Native thread id of the unit that found the match
        matched_name: Base name of the entry as found on disk
        full_path: Full path of the matched entry
    """

    model_config = ConfigDict(frozen=True)

    worker_id: int = Field(..., description="Id of the unit that found the match")
    matched_name: str = Field(..., min_length=1, description="Base name of the matched entry")
    full_path: str = Field(..., min_length=1, description="Full path of the matched entry")

    @classmethod
    def from_entry(cls, worker_id: int, matched_name: str, full_path: str) -> 'MatchRecord':
        """
        Build a record for a directory entry without validation.

        Names of entries that are not valid UTF-8 come back from the
        filesystem with surrogate escapes, which str validation rejects.
        """
        return cls.model_construct(worker_id=worker_id, matched_name=matched_name, full_path=full_path)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the record to a dictionary representation."""
        return self.model_dump()

    def format_line(self) -> str:
        """Render the record as ``<workerId> : <matchedName> : <fullPath>``."""
        return f"{self.worker_id} : {self.matched_name} : {self.full_path}"

    def __str__(self) -> str:
        return self.format_line()


class WalkSummary(BaseModel):
    """
    Counters collected while walking a tree.

    Units of work update the summary concurrently, so all mutation goes
    through the ``record_*`` methods, which hold an internal lock.

    Attributes:
        directories_traversed: Directories whose listing was started
        entries_scanned: Directory entries examined
        matches: Match records emitted
        errors: Subtrees abandoned because of access errors
        error_messages: Messages of the abandoned subtrees
        execution_time: Wall time of the walk in seconds
    """

    directories_traversed: int = Field(0, ge=0)
    entries_scanned: int = Field(0, ge=0)
    matches: int = Field(0, ge=0)
    errors: int = Field(0, ge=0)
    error_messages: List[str] = Field(default_factory=list)
    execution_time: float = Field(0.0, ge=0.0)

    _lock: threading.Lock = PrivateAttr(default_factory=threading.Lock)

    def record_directory(self) -> None:
        with self._lock:
            self.directories_traversed += 1

    def record_entry(self) -> None:
        with self._lock:
            self.entries_scanned += 1

    def record_match(self) -> None:
        with self._lock:
            self.matches += 1

    def record_error(self, message: str) -> None:
        with self._lock:
            self.errors += 1
            self.error_messages.append(message)

    def has_errors(self) -> bool:
        """Check if any subtree was skipped."""
        return self.errors > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert the summary to a dictionary representation."""
        data = self.model_dump()
        data['has_errors'] = self.has_errors()
        return data

    def __str__(self) -> str:
        parts = [f"Found {self.matches} matches"]
        parts.append(f"Scanned {self.entries_scanned} entries in {self.directories_traversed} directories")
        parts.append(f"Took {self.execution_time:.2f}s")

        if self.has_errors():
            parts.append(f"Skipped subtrees: {self.errors}")

        return " | ".join(parts)
