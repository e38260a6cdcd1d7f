"""
Search tools for treefind.

This module contains the directory walker, name matching and match output.
"""

from .dir_walker import DirectoryWalker, walk
from .name_matcher import matching_targets, names_match
from .output import LineWriter, JsonLinesWriter, MatchCollector, create_sink

__all__ = [
    'DirectoryWalker',
    'walk',
    'names_match',
    'matching_targets',
    'LineWriter',
    'JsonLinesWriter',
    'MatchCollector',
    'create_sink'
]
