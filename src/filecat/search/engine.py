"""Fuzzy search over a record store.

:class:`FuzzyCatalog` owns a private :class:`~filecat.catalog.store.RecordStore`
and its own :class:`~filecat.search.index.WordIndex`. Every insert goes through
the catalog, to the store first and only then to the word index, so the index
always covers every stored record and a rejected insert leaves both untouched.
Every search is a read-only pipeline: collect candidates, score them with
:func:`~filecat.search.similarity.similarity`, filter by threshold, and rank
by descending score with ties kept in insertion order.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set

from filecat.catalog.errors import InvalidArgumentError
from filecat.catalog.models import DuplicatePair, FileRecord, RecordId, StorageReport
from filecat.catalog.store import RecordStore

from .index import WordIndex
from .models import (
    FormattedResult,
    MatchType,
    SearchOptions,
    SearchResult,
    validate_threshold,
)
from .similarity import similarity
from .text import extract_words

LOGGER = logging.getLogger(__name__)

DEFAULT_NAME_THRESHOLD = 0.6
DEFAULT_CONTENT_THRESHOLD = 0.4

_RELEVANCE_BANDS = (
    (0.9, "Excellent match"),
    (0.8, "Good match"),
    (0.7, "Fair match"),
    (0.6, "Possible match"),
)


class FuzzyCatalog:
    """Catalog records and answer typo-tolerant queries over names, contents, and tags."""

    def __init__(self, records: Iterable[FileRecord] = ()) -> None:
        """Create a catalog, inserting ``records`` in order.

        Raises:
            DuplicateIdentifierError: If two records share an identifier.
        """
        self._store = RecordStore()
        self.index = WordIndex()
        self.add_many(records)

    def __len__(self) -> int:
        return len(self._store)

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(self._store)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._store

    @property
    def records(self) -> List[FileRecord]:
        """Return a copy of all records in insertion order."""
        return self._store.records

    def add(self, record: FileRecord) -> FileRecord:
        """Insert a record into the store and the word index.

        Raises:
            DuplicateIdentifierError: If the identifier is already cataloged.
        """
        self._store.insert(record)
        self.index.index_record(record)
        return record

    def add_many(self, records: Iterable[FileRecord]) -> List[FileRecord]:
        """Insert several records in order, stopping at the first rejected one."""
        return [self.add(record) for record in records]

    def update_tags(
        self,
        identifiers: Iterable[RecordId],
        tags_to_add: Iterable[str] = (),
        tags_to_remove: Iterable[str] = (),
    ) -> List[FileRecord]:
        """Batch-update tags; names are unchanged so the word index stays valid."""
        return self._store.batch_update_tags(identifiers, tags_to_add, tags_to_remove)

    # ------------------------------------------------------------------ #
    # Read-only lookups                                                  #
    # ------------------------------------------------------------------ #

    def get_by_id(self, identifier: RecordId) -> Optional[FileRecord]:
        return self._store.get_by_id(identifier)

    def find_by_name_substring(self, query: str) -> List[FileRecord]:
        return self._store.find_by_name_substring(query)

    def find_by_exact_name(self, name: str) -> Optional[FileRecord]:
        return self._store.find_by_exact_name(name)

    def find_by_type(self, type_: str) -> List[FileRecord]:
        return self._store.find_by_type(type_)

    def find_by_tag(self, tag: str) -> List[FileRecord]:
        return self._store.find_by_tag(tag)

    def duplicates_by_content(self) -> List[DuplicatePair]:
        return self._store.duplicates_by_content()

    def storage_report(self) -> StorageReport:
        return self._store.storage_report()

    # ------------------------------------------------------------------ #
    # Name search                                                        #
    # ------------------------------------------------------------------ #

    def fuzzy_search_by_name(
        self, term: str, threshold: float = DEFAULT_NAME_THRESHOLD
    ) -> List[SearchResult]:
        """Score every record name against ``term``.

        Args:
            term: Search text, compared case-insensitively.
            threshold: Minimum similarity to keep a record.

        Returns:
            List[SearchResult]: Matches ranked by descending score.

        Raises:
            InvalidArgumentError: If ``threshold`` is outside ``[0, 1]``.
        """
        validate_threshold("threshold", threshold)
        started = time.perf_counter()
        records = self._store.records
        results = _score_names(records, term, threshold)
        _log_search("name", term, len(records), len(results), started)
        return results

    def fuzzy_search_by_name_indexed(
        self,
        term: str,
        threshold: float = DEFAULT_NAME_THRESHOLD,
        *,
        exhaustive: bool = False,
    ) -> List[SearchResult]:
        """Score only the records whose name shares a word with ``term``.

        Each search word selects the records indexed under it. A search word
        with no exact entry selects the records of every indexed word at least
        ``threshold`` similar to it. A term without any indexable word falls
        back to every record. Candidates are then scored on the full name.

        Pruning can miss a record whose full name is similar enough but none
        of whose words is close to a search word; pass ``exhaustive=True`` to
        score every record instead.

        Args:
            term: Search text, compared case-insensitively.
            threshold: Minimum similarity for both word and full-name matches.
            exhaustive: Skip pruning and score every record.

        Returns:
            List[SearchResult]: Matches ranked by descending score.

        Raises:
            InvalidArgumentError: If ``threshold`` is outside ``[0, 1]``.
        """
        if exhaustive:
            return self.fuzzy_search_by_name(term, threshold)

        validate_threshold("threshold", threshold)
        started = time.perf_counter()
        search_words = extract_words(term)
        if search_words:
            candidates = self._candidates_for(search_words, threshold)
        else:
            candidates = self._store.records
        results = _score_names(candidates, term, threshold)
        _log_search("indexed name", term, len(candidates), len(results), started)
        return results

    def _candidates_for(self, search_words: Sequence[str], threshold: float) -> List[FileRecord]:
        identifiers: Set[RecordId] = set()
        for word in search_words:
            if word in self.index:
                identifiers |= self.index.lookup_word(word)
                continue
            for indexed_word, bucket in self.index.all_words():
                if similarity(word, indexed_word) >= threshold:
                    identifiers |= bucket

        ordered = sorted(identifiers, key=self._store.position_of)
        return [self._store.get_by_id(identifier) for identifier in ordered]

    # ------------------------------------------------------------------ #
    # Content search                                                     #
    # ------------------------------------------------------------------ #

    def fuzzy_search_by_content(
        self, term: str, threshold: float = DEFAULT_CONTENT_THRESHOLD
    ) -> List[SearchResult]:
        """Find records whose content contains ``term`` or words close to it.

        Content containing the lowercased term verbatim scores 1.0 as an exact
        match. Otherwise a single-word term is compared with each content
        word, and a multi-word term with each run of the same number of
        consecutive content words; the best score is kept.

        Args:
            term: Search text, compared case-insensitively.
            threshold: Minimum similarity for fuzzy matches.

        Returns:
            List[SearchResult]: Matches ranked by descending score.

        Raises:
            InvalidArgumentError: If ``threshold`` is outside ``[0, 1]``.
        """
        validate_threshold("threshold", threshold)
        started = time.perf_counter()
        needle = term.lower()
        search_words = extract_words(needle)
        search_text = " ".join(search_words)
        width = len(search_words)
        results: List[SearchResult] = []

        for record in self._store.records:
            content = record.content.lower()
            if needle in content:
                results.append(_content_result(record, 1.0, "exact"))
                continue

            content_words = extract_words(content)
            if not search_words or not content_words:
                continue

            if width == 1:
                best = max(similarity(word, search_words[0]) for word in content_words)
            else:
                windows = range(len(content_words) - width + 1)
                best = max(
                    (
                        similarity(" ".join(content_words[i : i + width]), search_text)
                        for i in windows
                    ),
                    default=0.0,
                )

            if best >= threshold:
                results.append(_content_result(record, best, "fuzzy"))

        results.sort(key=lambda result: result.score, reverse=True)
        _log_search("content", term, len(self._store), len(results), started)
        return results

    # ------------------------------------------------------------------ #
    # Combined search                                                    #
    # ------------------------------------------------------------------ #

    def fuzzy_search_combined(
        self, term: str, options: Optional[SearchOptions] = None
    ) -> List[SearchResult]:
        """Search names, contents, and tags, keeping each record's best match.

        Tags are only checked for records not already matched by name or
        content; the first tag reaching ``name_threshold`` contributes.

        Args:
            term: Search text.
            options: Thresholds, enabled fields, and the result limit.

        Returns:
            List[SearchResult]: At most ``max_results`` matches, one per
            record, ranked by descending score.

        Raises:
            InvalidArgumentError: If a threshold is outside ``[0, 1]`` or
                ``max_results`` is negative.
        """
        options = options or SearchOptions()
        validate_threshold("name_threshold", options.name_threshold)
        validate_threshold("content_threshold", options.content_threshold)
        if options.max_results < 0:
            raise InvalidArgumentError(
                f"max_results must be non-negative, got {options.max_results}."
            )

        started = time.perf_counter()
        merged: Dict[RecordId, SearchResult] = {}

        def _merge(result: SearchResult) -> None:
            existing = merged.get(result.record.id)
            if existing is None or result.score > existing.score:
                merged[result.record.id] = result

        if options.include_names:
            for result in self.fuzzy_search_by_name_indexed(
                term, options.name_threshold, exhaustive=options.exhaustive
            ):
                _merge(result)

        if options.include_content:
            for result in self.fuzzy_search_by_content(term, options.content_threshold):
                _merge(result)

        if options.include_tags:
            needle = term.lower()
            for record in self._store.records:
                if record.id in merged:
                    continue
                for tag in record.tags:
                    score = similarity(tag.lower(), needle)
                    if score >= options.name_threshold:
                        merged[record.id] = SearchResult(
                            record=record,
                            score=score,
                            match_field="tag",
                            match_type="exact" if score == 1.0 else "fuzzy",
                        )
                        break

        ranked = sorted(merged.values(), key=lambda result: result.score, reverse=True)
        limited = ranked[: options.max_results]
        _log_search("combined", term, len(self._store), len(limited), started)
        return limited


def describe_relevance(score: float) -> str:
    """Return a qualitative label for a similarity score.

    Each band is exclusive at its lower bound, so 0.9 is a "Good match".
    """

    for floor, label in _RELEVANCE_BANDS:
        if score > floor:
            return label
    return "Weak match"


def format_results(results: Iterable[SearchResult]) -> List[FormattedResult]:
    """Render search results for display."""

    formatted: List[FormattedResult] = []
    for result in results:
        record = result.record
        formatted.append(
            FormattedResult(
                id=record.id,
                name=record.name,
                type=record.type,
                similarity=f"{result.score:.2f}",
                match_details=f"{result.match_field or 'unknown'} ({result.match_type})",
                relevance=describe_relevance(result.score),
            )
        )
    return formatted


def _score_names(records: Iterable[FileRecord], term: str, threshold: float) -> List[SearchResult]:
    needle = term.lower()
    results: List[SearchResult] = []
    for record in records:
        score = similarity(record.name.lower(), needle)
        if score >= threshold:
            results.append(
                SearchResult(
                    record=record,
                    score=score,
                    match_field="name",
                    match_type="exact" if score == 1.0 else "fuzzy",
                )
            )
    results.sort(key=lambda result: result.score, reverse=True)
    return results


def _content_result(record: FileRecord, score: float, match_type: MatchType) -> SearchResult:
    return SearchResult(record=record, score=score, match_field="content", match_type=match_type)


def _log_search(kind: str, term: str, scanned: int, matched: int, started: float) -> None:
    elapsed_ms = (time.perf_counter() - started) * 1000
    LOGGER.debug(
        "Fuzzy %s search for %r scored %d record(s), %d match(es) in %.2f ms.",
        kind,
        term,
        scanned,
        matched,
        elapsed_ms,
    )


__all__ = [
    "FuzzyCatalog",
    "describe_relevance",
    "format_results",
    "DEFAULT_NAME_THRESHOLD",
    "DEFAULT_CONTENT_THRESHOLD",
]
