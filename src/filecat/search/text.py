"""Text normalization utilities for word indexing."""

from __future__ import annotations

import re
from typing import List

_PUNCTUATION = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")

MIN_WORD_LENGTH = 2


def extract_words(text: str) -> List[str]:
    """Return the normalized words of ``text`` in order of appearance.

    Args:
        text: Source text such as a file name, content, or search term.

    Returns:
        List[str]: Lowercased words with punctuation removed, split on
        whitespace runs, keeping only words of at least ``MIN_WORD_LENGTH``
        characters. Repeated words are kept.
    """

    stripped = _PUNCTUATION.sub("", text.lower())
    return [word for word in _WHITESPACE.split(stripped) if len(word) >= MIN_WORD_LENGTH]


__all__ = ["extract_words", "MIN_WORD_LENGTH"]
