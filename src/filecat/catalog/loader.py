"""Build file records from YAML or JSON catalog documents."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List

import yaml
from pydantic import ValidationError

from .errors import CatalogError
from .models import FileRecord


def records_from_data(data: Any) -> List[FileRecord]:
    """Validate raw catalog data into file records.

    Args:
        data: Either a list of record mappings or a mapping whose ``records``
            key holds such a list.

    Returns:
        List[FileRecord]: Records in document order.

    Raises:
        CatalogError: If the document shape or any entry is invalid.
    """

    if isinstance(data, dict):
        data = data.get("records")
    if not isinstance(data, list):
        raise CatalogError("Catalog data must be a list of records or a mapping with 'records'.")

    records: List[FileRecord] = []
    for position, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise CatalogError(f"Catalog entry {position} must be a mapping.")
        try:
            records.append(FileRecord.model_validate(entry))
        except ValidationError as exc:
            raise CatalogError(f"Invalid catalog entry {position}: {exc}") from exc
    return records


def load_records(path: Path) -> List[FileRecord]:
    """Read records from a YAML (or JSON) catalog file.

    Raises:
        CatalogError: If the file cannot be read or parsed.
    """

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CatalogError(f"Unable to read catalog file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise CatalogError(f"Failed to parse catalog file {path}: {exc}") from exc
    return records_from_data(raw)


__all__ = ["records_from_data", "load_records"]
