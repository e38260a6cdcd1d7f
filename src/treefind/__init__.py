"""
treefind - Core Package

Searches a directory tree for files whose names match a set of target names,
walking each subdirectory in its own worker thread.
"""

__version__ = "0.1.0"
__author__ = "treefind Team"
