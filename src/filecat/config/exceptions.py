"""Errors raised while loading or changing filecat settings."""

from __future__ import annotations


class ConfigError(Exception):
    """Raised when configuration data cannot be parsed, merged, or validated.

    Attributes:
        key: Dotted setting name (``search.max_results``) the error concerns,
            when it can be attributed to one.
    """

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key
