"""
Search request data model for treefind.

This module defines the immutable request that is handed unchanged to every
unit of work taking part in one search.
"""

from pathlib import Path
from typing import Any, Dict, Iterable, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import PathResolutionError


def resolve_search_path(raw_path: Union[str, Path]) -> str:
    """
    Turn a user supplied path into an absolute, canonical directory path.

    Relative paths are resolved against the current working directory and a
    leading ``~`` is expanded.

    Args:
        raw_path: Path as given on the command line

    Returns:
        Canonical absolute path string

    Raises:
        PathResolutionError: If the path does not exist or is not a directory
    """
    if raw_path is None or not str(raw_path).strip():
        raise PathResolutionError(str(raw_path), "no path given")

    try:
        resolved = Path(raw_path).expanduser().resolve(strict=True)
    except FileNotFoundError:
        raise PathResolutionError(str(raw_path), "no such file or directory")
    except (OSError, RuntimeError) as e:
        raise PathResolutionError(str(raw_path), str(e)) from e

    if not resolved.is_dir():
        raise PathResolutionError(str(raw_path), "not a directory")

    return str(resolved)


class SearchRequest(BaseModel):
    """
    Parameters of one search.

    The model is frozen and the target names are stored as a tuple, so the
    request cannot change while units of work share it.

    Attributes:
        root_path: Absolute path of the directory to search
        target_names: File names to look for, in the order given
        recursive: Whether to descend into subdirectories
        ignore_case: Whether names are compared case-insensitively
    """

    model_config = ConfigDict(frozen=True)

    root_path: str = Field(..., min_length=1, description="Absolute path of the search root")
    target_names: Tuple[str, ...] = Field(default_factory=tuple, description="File names to look for")
    recursive: bool = Field(False, description="Descend into subdirectories")
    ignore_case: bool = Field(False, description="Compare names case-insensitively")

    @field_validator('root_path')
    @classmethod
    def validate_root_path(cls, v: str) -> str:
        """Require an absolute root path."""
        if not Path(v).is_absolute():
            raise ValueError(f"Search root must be an absolute path: {v}")
        return v

    @field_validator('target_names', mode='before')
    @classmethod
    def validate_target_names(cls, v: Any) -> Tuple[str, ...]:
        """Accept any iterable of names and drop empty strings."""
        if v is None:
            return ()
        if isinstance(v, str):
            v = [v]
        return tuple(name for name in v if name)

    @classmethod
    def create(cls, path: Union[str, Path], target_names: Iterable[str],
               recursive: bool = False, ignore_case: bool = False) -> 'SearchRequest':
        """
        Build a request from a raw, possibly relative, path.

        The path and names come from the command line or the filesystem and
        may carry surrogate escapes for bytes that are not valid UTF-8, which
        str validation rejects. Both are checked here instead.
        """
        return cls.model_construct(
            root_path=resolve_search_path(path),
            target_names=cls.validate_target_names(target_names),
            recursive=recursive,
            ignore_case=ignore_case,
        )

    def has_targets(self) -> bool:
        """Check if there is anything to search for."""
        return len(self.target_names) > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert the request to a dictionary representation."""
        data = self.model_dump()
        data['target_names'] = list(self.target_names)
        return data

    def __str__(self) -> str:
        parts = [f"Root: {self.root_path}"]
        parts.append(f"Targets: {', '.join(self.target_names) or '(none)'}")
        if self.recursive:
            parts.append("recursive")
        if self.ignore_case:
            parts.append("ignore case")
        return " | ".join(parts)
