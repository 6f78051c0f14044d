"""Catalog errors."""

from __future__ import annotations

from typing import Union


class CatalogError(Exception):
    """Base exception for catalog operations."""


class DuplicateIdentifierError(CatalogError):
    """Raised when inserting a record whose identifier is already cataloged."""

    def __init__(self, identifier: Union[int, str]) -> None:
        super().__init__(f"A record with identifier {identifier!r} already exists.")
        self.identifier = identifier


class InvalidArgumentError(CatalogError, ValueError):
    """Raised when a caller passes an out-of-range argument such as a threshold."""
