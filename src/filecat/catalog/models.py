"""Catalog data models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Union

from pydantic import BaseModel, Field, model_validator

RecordId = Union[int, str]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FileRecord(BaseModel):
    """Metadata and content describing a cataloged file.

    Attributes:
        id: Caller-assigned identifier, unique within a store.
        name: Display name of the file.
        size: File size (bytes or KB, at the caller's discretion).
        type: Low-cardinality category such as ``document`` or ``image``.
        content: Raw textual content.
        tags: Tags attached to the file; repeats carry no extra meaning.
        created_at: Creation timestamp.
        last_modified: Timestamp of the most recent tag mutation.
    """

    id: RecordId
    name: str
    size: float = 0
    type: str
    content: str = ""
    tags: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    last_modified: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _normalize_timestamps(self) -> "FileRecord":
        if self.created_at.tzinfo is None:
            self.created_at = self.created_at.replace(tzinfo=timezone.utc)
        if self.last_modified.tzinfo is None:
            self.last_modified = self.last_modified.replace(tzinfo=timezone.utc)
        if self.last_modified < self.created_at:
            self.last_modified = self.created_at
        return self


class TypeStatistics(BaseModel):
    """Aggregate size figures for one record type."""

    count: int = 0
    total_size: float = 0
    average_size: float = 0


class DuplicatePair(BaseModel):
    """A later record whose content repeats an earlier record's content."""

    original: FileRecord
    duplicate: FileRecord


class StorageReport(BaseModel):
    """Snapshot of catalog usage.

    Attributes:
        total_files: Number of cataloged records.
        total_size: Sum of record sizes.
        average_size: Mean record size, 0 for an empty catalog.
        largest: Up to five largest records, largest first.
        types: Per-type statistics keyed by type.
        recently_added: Up to five most recently created records.
    """

    total_files: int
    total_size: float
    average_size: float
    largest: List[FileRecord] = Field(default_factory=list)
    types: Dict[str, TypeStatistics] = Field(default_factory=dict)
    recently_added: List[FileRecord] = Field(default_factory=list)


__all__ = ["RecordId", "FileRecord", "TypeStatistics", "DuplicatePair", "StorageReport"]
