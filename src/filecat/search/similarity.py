"""Levenshtein edit distance and normalized similarity scores."""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein


def edit_distance(first: str, second: str) -> int:
    """Return the Levenshtein distance between two strings.

    The distance is the minimum number of single-character insertions,
    deletions, and substitutions that turn ``first`` into ``second``.

    Args:
        first: Source string.
        second: Target string.

    Returns:
        int: Number of edits separating the strings.
    """

    return Levenshtein.distance(first, second)


def similarity(first: str, second: str) -> float:
    """Return a closeness score in ``[0, 1]`` where 1 means identical.

    Two empty strings are identical. Otherwise the edit distance is scaled by
    the length of the longer string.
    """

    if not first and not second:
        return 1.0
    return Levenshtein.normalized_similarity(first, second)


__all__ = ["edit_distance", "similarity"]
