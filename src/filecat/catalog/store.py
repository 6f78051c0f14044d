"""In-memory record store with identifier, type, and tag indexes."""

from __future__ import annotations

import logging
from bisect import bisect_left
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, Iterator, List, Optional

from .errors import DuplicateIdentifierError, InvalidArgumentError
from .models import DuplicatePair, FileRecord, RecordId, StorageReport, TypeStatistics

LOGGER = logging.getLogger(__name__)

REPORT_SIZE = 5


class RecordStore:
    """Own the canonical sequence of file records and their lookup indexes.

    Records keep their insertion order, which is also the tie-break order for
    every sorted view the store produces.
    """

    def __init__(self) -> None:
        self._records: List[FileRecord] = []
        self._by_id: Dict[RecordId, FileRecord] = {}
        self._positions: Dict[RecordId, int] = {}
        self._by_type: Dict[str, List[FileRecord]] = {}
        self._by_tag: Dict[str, List[FileRecord]] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(list(self._records))

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._by_id

    @property
    def records(self) -> List[FileRecord]:
        """Return a copy of all records in insertion order."""
        return list(self._records)

    def insert(self, record: FileRecord) -> FileRecord:
        """Register a record in the canonical sequence and every index.

        Args:
            record: Record to catalog.

        Returns:
            FileRecord: The inserted record.

        Raises:
            DuplicateIdentifierError: If the identifier is already cataloged.
        """
        if record.id in self._by_id:
            raise DuplicateIdentifierError(record.id)

        self._positions[record.id] = len(self._records)
        self._records.append(record)
        self._by_id[record.id] = record
        self._by_type.setdefault(record.type, []).append(record)
        for tag in dict.fromkeys(record.tags):
            self._by_tag.setdefault(tag, []).append(record)

        LOGGER.debug(
            "Inserted record %r (%s, %d tag(s)).", record.id, record.type, len(record.tags)
        )
        return record

    def get_by_id(self, identifier: RecordId) -> Optional[FileRecord]:
        """Return the record with the given identifier, or None when absent."""
        return self._by_id.get(identifier)

    def position_of(self, identifier: RecordId) -> int:
        """Return the insertion position of a cataloged record.

        Raises:
            KeyError: If the identifier is not cataloged.
        """
        return self._positions[identifier]

    def find_by_name_substring(self, query: str) -> List[FileRecord]:
        """Return records whose name contains ``query``, ignoring case."""
        needle = query.lower()
        return [record for record in self._records if needle in record.name.lower()]

    def find_by_exact_name(self, name: str) -> Optional[FileRecord]:
        """Binary-search the name-sorted view for a record named exactly ``name``.

        Args:
            name: Case-sensitive name to look up.

        Returns:
            Optional[FileRecord]: First matching record in sorted order, if any.
        """
        ordered = self.sorted_by_name()
        keys = [_name_key(record) for record in ordered]
        target = name.casefold()
        index = bisect_left(keys, target)
        while index < len(ordered) and keys[index] == target:
            if ordered[index].name == name:
                return ordered[index]
            index += 1
        return None

    def find_by_type(self, type_: str) -> List[FileRecord]:
        """Return records of the given type (empty when the type is unseen)."""
        return list(self._by_type.get(type_, ()))

    def find_by_tag(self, tag: str) -> List[FileRecord]:
        """Return records carrying the given tag (empty when the tag is unseen)."""
        return list(self._by_tag.get(tag, ()))

    def search_text(self, term: str) -> List[FileRecord]:
        """Return records whose content contains ``term`` verbatim."""
        return [record for record in self._records if term in record.content]

    def any_content_contains(self, term: str) -> bool:
        """Return True when at least one record's content contains ``term``."""
        return any(term in record.content for record in self._records)

    def total_size(self) -> float:
        """Return the sum of all record sizes."""
        return sum(record.size for record in self._records)

    def sorted_by_name(self, ascending: bool = True) -> List[FileRecord]:
        return sorted(self._records, key=_name_key, reverse=not ascending)

    def sorted_by_date(self, ascending: bool = True) -> List[FileRecord]:
        return sorted(self._records, key=lambda record: record.created_at, reverse=not ascending)

    def sorted_by_size(self, ascending: bool = False) -> List[FileRecord]:
        return sorted(self._records, key=lambda record: record.size, reverse=not ascending)

    def find_largest(self, count: int = REPORT_SIZE) -> List[FileRecord]:
        """Return up to ``count`` largest records, ties in insertion order.

        Raises:
            InvalidArgumentError: If ``count`` is negative.
        """
        if count < 0:
            raise InvalidArgumentError(f"count must be non-negative, got {count}.")
        return self.sorted_by_size(ascending=False)[:count]

    def duplicates_by_content(self) -> List[DuplicatePair]:
        """Pair each repeated content with the first record that carried it."""
        first_seen: Dict[str, FileRecord] = {}
        duplicates: List[DuplicatePair] = []
        for record in self._records:
            original = first_seen.get(record.content)
            if original is None:
                first_seen[record.content] = record
            else:
                duplicates.append(DuplicatePair(original=original, duplicate=record))
        return duplicates

    def batch_update_tags(
        self,
        identifiers: Iterable[RecordId],
        tags_to_add: Iterable[str] = (),
        tags_to_remove: Iterable[str] = (),
    ) -> List[FileRecord]:
        """Remove and then add tags on several records, keeping the tag index in sync.

        Unknown identifiers are skipped. Each updated record's ``last_modified``
        moves strictly forward.

        Args:
            identifiers: Identifiers of the records to update.
            tags_to_add: Tags to attach when not already present.
            tags_to_remove: Tags to detach.

        Returns:
            List[FileRecord]: Records that were updated.
        """
        additions = list(dict.fromkeys(tags_to_add))
        removals = set(tags_to_remove)
        updated: List[FileRecord] = []

        for identifier in identifiers:
            record = self._by_id.get(identifier)
            if record is None:
                LOGGER.debug("Skipping tag update for unknown record %r.", identifier)
                continue

            kept: List[str] = []
            for tag in record.tags:
                if tag in removals:
                    self._unindex_tag(tag, record)
                elif tag not in kept:
                    kept.append(tag)
            for tag in additions:
                if tag not in kept:
                    kept.append(tag)
                    self._by_tag.setdefault(tag, []).append(record)

            record.tags = kept
            record.last_modified = _advance(record.last_modified)
            updated.append(record)

        LOGGER.debug(
            "Updated tags on %d record(s): +%s -%s.", len(updated), additions, sorted(removals)
        )
        return updated

    def type_statistics(self) -> Dict[str, TypeStatistics]:
        """Return count, total size, and average size for every record type."""
        statistics: Dict[str, TypeStatistics] = {}
        for type_, bucket in self._by_type.items():
            total = sum(record.size for record in bucket)
            count = len(bucket)
            statistics[type_] = TypeStatistics(
                count=count,
                total_size=total,
                average_size=total / count if count else 0,
            )
        return statistics

    def storage_report(self) -> StorageReport:
        """Return an aggregate snapshot of catalog usage."""
        total_files = len(self._records)
        total_size = self.total_size()
        return StorageReport(
            total_files=total_files,
            total_size=total_size,
            average_size=total_size / total_files if total_files else 0,
            largest=self.find_largest(REPORT_SIZE),
            types=self.type_statistics(),
            recently_added=self.sorted_by_date(ascending=False)[:REPORT_SIZE],
        )

    def _unindex_tag(self, tag: str, record: FileRecord) -> None:
        bucket = self._by_tag.get(tag)
        if bucket is None:
            return
        bucket[:] = [entry for entry in bucket if entry is not record]
        if not bucket:
            del self._by_tag[tag]


def _name_key(record: FileRecord) -> str:
    return record.name.casefold()


def _advance(previous: datetime) -> datetime:
    now = datetime.now(timezone.utc)
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


__all__ = ["RecordStore", "REPORT_SIZE"]
