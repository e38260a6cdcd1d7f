"""
File name comparison for treefind.

Case-insensitive comparison is ordinal and per character: two names match
when they have the same length and each pair of characters is equal after
uppercasing. Full Unicode case folding is not applied.
"""

from typing import Iterable, List


def ignore_case_equal(first: str, second: str) -> bool:
    """Compare two names character by character, ignoring case."""
    if len(first) != len(second):
        return False

    for a, b in zip(first, second):
        if a != b and a.upper() != b.upper():
            return False

    return True


def names_match(file_name: str, target_name: str, ignore_case: bool = False) -> bool:
    """
    Compare a file name against a target name.

    Args:
        file_name: Base name of a directory entry
        target_name: Name being searched for
        ignore_case: Whether to ignore case

    Returns:
        True if the names are equal under the chosen rule
    """
    if ignore_case:
        return ignore_case_equal(file_name, target_name)
    return file_name == target_name


def matching_targets(file_name: str, target_names: Iterable[str], ignore_case: bool = False) -> List[str]:
    """
    Get every target that a file name matches.

    A target listed twice is returned twice.
    """
    return [name for name in target_names if names_match(file_name, name, ignore_case)]
