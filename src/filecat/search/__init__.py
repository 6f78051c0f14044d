"""Fuzzy search helpers for filecat."""

from .engine import FuzzyCatalog, describe_relevance, format_results
from .index import WordIndex
from .models import FormattedResult, SearchOptions, SearchResult
from .similarity import edit_distance, similarity
from .text import extract_words

__all__ = [
    "FuzzyCatalog",
    "WordIndex",
    "SearchOptions",
    "SearchResult",
    "FormattedResult",
    "describe_relevance",
    "format_results",
    "edit_distance",
    "similarity",
    "extract_words",
]
