"""Configuration models describing filecat settings."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from filecat.search.models import SearchOptions, validate_threshold


class FilecatBaseModel(BaseModel):
    """Shared configuration for filecat settings models."""

    model_config = ConfigDict(extra="forbid")


class SearchSettings(FilecatBaseModel):
    """Defaults applied to combined fuzzy searches.

    Attributes:
        name_threshold: Minimum similarity for name and tag matches.
        content_threshold: Minimum similarity for content matches.
        include_names: Whether record names are searched.
        include_content: Whether record contents are searched.
        include_tags: Whether record tags are searched.
        max_results: Maximum number of results returned.
        exhaustive: Whether name searches skip word-index pruning.
    """

    name_threshold: float = 0.6
    content_threshold: float = 0.4
    include_names: bool = True
    include_content: bool = True
    include_tags: bool = True
    max_results: int = Field(default=10, ge=0)
    exhaustive: bool = False

    @field_validator("name_threshold", "content_threshold")
    @classmethod
    def check_threshold(cls, value: float, info: ValidationInfo) -> float:
        return validate_threshold(f"search.{info.field_name}", value)

    def to_options(self) -> SearchOptions:
        """Return search options carrying these defaults."""
        return SearchOptions(**self.model_dump())


class LoggingSettings(FilecatBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"


class CLIOptions(FilecatBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class FilecatConfig(FilecatBaseModel):
    """Top-level configuration struct for filecat.

    Attributes:
        search: Fuzzy search defaults.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    search: SearchSettings = Field(default_factory=SearchSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "FilecatBaseModel",
    "SearchSettings",
    "LoggingSettings",
    "CLIOptions",
    "FilecatConfig",
]
