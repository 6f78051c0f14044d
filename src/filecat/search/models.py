"""Search result and option models."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel

from filecat.catalog.errors import InvalidArgumentError
from filecat.catalog.models import FileRecord, RecordId

MatchField = Literal["name", "content", "tag"]
MatchType = Literal["exact", "fuzzy"]


def validate_threshold(name: str, value: float) -> float:
    """Return ``value`` when it is a similarity threshold in ``[0, 1]``.

    Raises:
        InvalidArgumentError: If ``value`` is outside the range or NaN.
    """
    if not 0.0 <= value <= 1.0:
        raise InvalidArgumentError(f"{name} must be between 0 and 1, got {value}.")
    return value


class SearchResult(BaseModel):
    """A record paired with how closely it matched a query.

    Attributes:
        record: Matching record (the cataloged instance, not a copy).
        score: Similarity score in ``[0, 1]``.
        match_field: Field that produced the match, when known.
        match_type: ``exact`` for verbatim or perfect matches, otherwise ``fuzzy``.
    """

    record: FileRecord
    score: float
    match_field: Optional[MatchField] = None
    match_type: MatchType = "fuzzy"


class SearchOptions(BaseModel):
    """Options for the combined multi-field search.

    Attributes:
        name_threshold: Minimum score for name and tag matches.
        content_threshold: Minimum score for content matches.
        include_names: Whether to search record names.
        include_content: Whether to search record contents.
        include_tags: Whether to search record tags.
        max_results: Maximum number of results returned.
        exhaustive: Score every record name instead of pruning candidates
            through the word index.
    """

    name_threshold: float = 0.6
    content_threshold: float = 0.4
    include_names: bool = True
    include_content: bool = True
    include_tags: bool = True
    max_results: int = 10
    exhaustive: bool = False


class FormattedResult(BaseModel):
    """Display-ready rendering of a search result."""

    id: RecordId
    name: str
    type: str
    similarity: str
    match_details: str
    relevance: str


__all__ = [
    "MatchField",
    "MatchType",
    "SearchResult",
    "SearchOptions",
    "FormattedResult",
    "validate_threshold",
]
