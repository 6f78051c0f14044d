"""Configuration management for filecat."""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import FilecatConfig, SearchSettings
from .resolver import (
    ENV_PREFIX,
    expand_dotted,
    flatten_for_env,
    merge_sections,
    overrides_from_env,
    resolve_with_precedence,
)

DEFAULT_CONFIG_PATH = Path("~/.filecat/config.yaml")
_CONFIG_HEADER = textwrap.dedent(
    """\
    # filecat configuration file
    # Settings are SECTION.KEY pairs; manage via `filecat config set` or `filecat config edit`.
    """
)


class ConfigManager:
    """Read, validate, and persist the filecat configuration file."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> FilecatConfig:
        """Resolve the effective configuration.

        Args:
            cli_overrides: ``SECTION.KEY`` overrides supplied on the command line.
            include_env: Whether ``FILECAT__`` environment variables apply.
            ensure_file: Whether to write a default file when none exists.
            env_overrides: Environment mapping used instead of the process environment.

        Returns:
            FilecatConfig: Validated configuration.

        Raises:
            ConfigError: If any source is malformed or values fail validation.
        """
        if ensure_file:
            self.ensure_exists()

        env_sections = None
        if include_env:
            env_sections = overrides_from_env(
                env_overrides if env_overrides is not None else self._env
            )

        return resolve_with_precedence(
            defaults=FilecatConfig(),
            file_overrides=self._read_file(),
            env_overrides=env_sections,
            cli_overrides=cli_overrides,
        )

    def save(self, config: FilecatConfig | Mapping[str, Any]) -> FilecatConfig:
        """Validate and write settings, returning the configuration they produce.

        A mapping may hold any subset of settings; omitted ones keep their defaults.

        Raises:
            ConfigError: If the settings do not validate; nothing is written.
        """
        if isinstance(config, FilecatConfig):
            self._write_file(config.model_dump(mode="python"))
            return config

        sections = expand_dotted(config, source_name="file")
        resolved = resolve_with_precedence(defaults=FilecatConfig(), file_overrides=sections)
        self._write_file(sections)
        return resolved

    def set_value(self, key: str, value: Any) -> FilecatConfig:
        """Change one ``SECTION.KEY`` setting in the configuration file.

        The file is left untouched when the setting already holds ``value``.

        Raises:
            ConfigError: If ``key`` is malformed or the new value does not validate.
        """
        stored = expand_dotted(self._read_file(), source_name="file")
        updated = merge_sections(stored, expand_dotted({key: value}, source_name="cli"))
        if updated == stored:
            return resolve_with_precedence(defaults=FilecatConfig(), file_overrides=stored)
        return self.save(updated)

    def ensure_exists(self) -> Path:
        """Create a configuration file with defaults if one does not exist."""
        if not self._config_path.exists():
            self._write_file(FilecatConfig().model_dump(mode="python"))
        return self._config_path

    def read_text(self) -> str:
        """Return the current configuration file contents."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    # Internal helpers -------------------------------------------------

    def _read_file(self) -> dict[str, Any]:
        text = self.read_text()
        try:
            raw = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {self._config_path}: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError(f"{self._config_path} must contain a mapping of sections.")
        return raw

    def _write_file(self, sections: Mapping[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        serialized = yaml.safe_dump(dict(sections), sort_keys=False)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        self._config_path.write_text(
            f"{_CONFIG_HEADER}# Last updated: {stamp}\n{serialized}", encoding="utf-8"
        )


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "FilecatConfig",
    "SearchSettings",
    "resolve_with_precedence",
    "flatten_for_env",
    "ConfigError",
]
