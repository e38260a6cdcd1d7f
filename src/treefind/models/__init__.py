"""
Data models for treefind.

This module contains the core data structures used throughout the system.
"""

from .search_request import SearchRequest, resolve_search_path
from .search_results import MatchRecord, WalkSummary
from .config import WalkerConfig, WalkStrategy, OutputFormat

__all__ = [
    'SearchRequest',
    'resolve_search_path',
    'MatchRecord',
    'WalkSummary',
    'WalkerConfig',
    'WalkStrategy',
    'OutputFormat'
]
