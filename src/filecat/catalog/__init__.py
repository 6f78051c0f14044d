"""In-memory file catalog."""

from .errors import CatalogError, DuplicateIdentifierError, InvalidArgumentError
from .loader import load_records, records_from_data
from .models import DuplicatePair, FileRecord, RecordId, StorageReport, TypeStatistics
from .store import RecordStore

__all__ = [
    "RecordStore",
    "FileRecord",
    "RecordId",
    "TypeStatistics",
    "DuplicatePair",
    "StorageReport",
    "CatalogError",
    "DuplicateIdentifierError",
    "InvalidArgumentError",
    "load_records",
    "records_from_data",
]
