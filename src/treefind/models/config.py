"""
Configuration data models for treefind.

This module defines the settings that shape a walk without changing what is
searched for: how subdirectories are scheduled, how matches are written and
how much is logged.
"""

import logging
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WalkStrategy(Enum):
    """How subdirectory units are scheduled."""
    SEQUENTIAL = "sequential"
    FANOUT = "fanout"


class OutputFormat(Enum):
    """Supported match output formats."""
    TEXT = "text"
    JSON = "json"


LOG_LEVELS = ['CRITICAL', 'ERROR', 'WARNING', 'INFO', 'DEBUG']


class WalkerConfig(BaseModel):
    """
    Settings for the directory walker and the command line front end.

    Attributes:
        strategy: Spawn-then-join per subdirectory, or spawn a batch then join it
        max_concurrent: Largest batch of sibling units in fanout mode
        output_format: Format of the lines written for each match
        log_level: Level for the stderr log handler
        recursive: Default for the recursive flag
        ignore_case: Default for the ignore-case flag
    """

    model_config = ConfigDict(extra='forbid')

    strategy: WalkStrategy = Field(WalkStrategy.SEQUENTIAL, description="Subdirectory scheduling strategy")
    max_concurrent: int = Field(4, gt=0, description="Sibling units per batch in fanout mode")
    output_format: OutputFormat = Field(OutputFormat.TEXT, description="Match output format")
    log_level: str = Field("WARNING", description="Log level for diagnostics")
    recursive: bool = Field(False, description="Descend into subdirectories by default")
    ignore_case: bool = Field(False, description="Compare names case-insensitively by default")

    @field_validator('strategy', mode='before')
    @classmethod
    def validate_strategy(cls, v) -> WalkStrategy:
        """Validate and convert strategy to enum."""
        if isinstance(v, str):
            try:
                return WalkStrategy(v.lower())
            except ValueError:
                raise ValueError(f"Invalid walk strategy: {v}")
        return v

    @field_validator('output_format', mode='before')
    @classmethod
    def validate_output_format(cls, v) -> OutputFormat:
        """Validate and convert output format to enum."""
        if isinstance(v, str):
            try:
                return OutputFormat(v.lower())
            except ValueError:
                raise ValueError(f"Invalid output format: {v}")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the log level name."""
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {', '.join(LOG_LEVELS)}")
        return level

    def get_log_level(self) -> int:
        """Get the numeric logging level."""
        return getattr(logging, self.log_level)

    def is_fanout(self) -> bool:
        return self.strategy == WalkStrategy.FANOUT

    def validate_configuration(self) -> List[str]:
        """
        Check for settings that are valid but probably unintended.

        Returns:
            List of warning messages
        """
        warnings = []

        default_concurrency = type(self).model_fields['max_concurrent'].default
        if not self.is_fanout() and self.max_concurrent != default_concurrency:
            warnings.append("max_concurrent only applies to the fanout strategy")

        if self.max_concurrent > 256:
            warnings.append(f"Very high max_concurrent ({self.max_concurrent}) may exhaust thread limits")

        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data = self.model_dump()
        data['strategy'] = self.strategy.value
        data['output_format'] = self.output_format.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WalkerConfig':
        """Create a WalkerConfig from a dictionary."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        return (f"WalkerConfig(strategy={self.strategy.value}, "
                f"max_concurrent={self.max_concurrent}, "
                f"output_format={self.output_format.value})")
