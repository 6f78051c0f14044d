"""Merge configuration sources into a validated :class:`FilecatConfig`.

Every filecat setting lives one level deep, addressed as ``SECTION.KEY``
(``search.max_results``) in files and on the command line, or as
``FILECAT__SECTION__KEY`` in the environment. Sources are reduced to the same
``{section: {key: value}}`` shape before they are layered.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping as MappingABC
from typing import Any, Dict, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import FilecatConfig

LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "FILECAT__"

Sections = Dict[str, Dict[str, Any]]


def resolve_with_precedence(
    *,
    defaults: FilecatConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> FilecatConfig:
    """Layer file, environment, and CLI overrides on top of ``defaults``.

    Raises:
        ConfigError: If a source is malformed or the merged values are invalid;
            ``key`` names the first offending setting when one is known.
    """
    merged: Sections = defaults.model_dump(mode="python")
    for name, source in (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    ):
        if source is not None:
            merged = merge_sections(merged, expand_dotted(source, source_name=name))

    try:
        return FilecatConfig.model_validate(merged)
    except ValidationError as exc:
        raise _config_error(exc) from exc


def expand_dotted(source: Mapping[str, Any], *, source_name: str) -> Sections:
    """Normalize ``SECTION.KEY`` and ``{SECTION: {KEY: ...}}`` entries to nested sections.

    Raises:
        ConfigError: If a key is not a string, addresses anything other than
            one setting inside one section, or conflicts with another entry.
    """
    label = source_name.capitalize()
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{label} overrides must be a mapping.")

    sections: Sections = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{label} override keys must be strings.")
        section, _, setting = key.partition(".")
        if setting:
            _put(sections, section, setting, value, label=label)
            continue
        if not isinstance(value, MappingABC):
            raise ConfigError(
                f"{label} override for {section!r} must be a mapping of settings.", key=section
            )
        for child_key, child_value in value.items():
            _put(sections, section, str(child_key), child_value, label=label)
    return sections


def merge_sections(base: Mapping[str, Mapping[str, Any]], overrides: Sections) -> Sections:
    """Return ``base`` with each overridden setting replaced, leaving inputs untouched."""
    merged: Sections = {section: dict(values) for section, values in base.items()}
    for section, values in overrides.items():
        merged.setdefault(section, {}).update(values)
    return merged


def overrides_from_env(env: Mapping[str, str]) -> Sections:
    """Collect ``FILECAT__SECTION__KEY`` variables, parsing values as YAML scalars."""
    overrides: Sections = {}
    for name, raw_value in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        parts = [part.lower() for part in name[len(ENV_PREFIX) :].split("__")]
        if len(parts) != 2 or not all(parts):
            LOGGER.warning("Ignoring %s; expected %sSECTION__KEY.", name, ENV_PREFIX)
            continue
        try:
            value: Any = yaml.safe_load(raw_value)
        except yaml.YAMLError:
            value = raw_value
        overrides.setdefault(parts[0], {})[parts[1]] = value
    return overrides


def env_key(section: str, setting: str) -> str:
    return f"{ENV_PREFIX}{section.upper()}__{setting.upper()}"


def flatten_for_env(config: FilecatConfig) -> Dict[str, str]:
    """Render every setting as the environment variable that would override it."""
    flat: Dict[str, str] = {}
    for section, values in config.model_dump(mode="python").items():
        for setting, value in values.items():
            if isinstance(value, bool):
                rendered = "true" if value else "false"
            else:
                rendered = "null" if value is None else str(value)
            flat[env_key(section, setting)] = rendered
    return flat


def _put(sections: Sections, section: str, setting: str, value: Any, *, label: str) -> None:
    dotted = f"{section}.{setting}"
    if not section or not setting or "." in setting:
        raise ConfigError(
            f"{label} override {dotted!r} must look like 'search.name_threshold'.", key=dotted
        )
    values = sections.setdefault(section, {})
    if setting in values and values[setting] != value:
        raise ConfigError(f"{label} override for {dotted} is given twice.", key=dotted)
    values[setting] = value


def _config_error(exc: ValidationError) -> ConfigError:
    located = [
        (".".join(str(part) for part in error["loc"]), error["msg"]) for error in exc.errors()
    ]
    problems = "; ".join(f"{dotted}: {message}" for dotted, message in located)
    return ConfigError(
        f"Invalid configuration values: {problems}",
        key=located[0][0] if located else None,
    )


__all__ = [
    "resolve_with_precedence",
    "expand_dotted",
    "merge_sections",
    "overrides_from_env",
    "flatten_for_env",
    "env_key",
    "ENV_PREFIX",
]
