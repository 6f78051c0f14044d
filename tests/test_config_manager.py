"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from filecat.config import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    ConfigManager,
    FilecatConfig,
    SearchSettings,
    flatten_for_env,
    resolve_with_precedence,
)
from filecat.config.resolver import expand_dotted, overrides_from_env
from filecat.search import SearchOptions


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager()


def test_default_path_lives_under_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    assert manager.config_path == DEFAULT_CONFIG_PATH.expanduser()
    assert manager.config_path == tmp_path / ".filecat" / "config.yaml"


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path.exists()
    text = path.read_text(encoding="utf-8")
    assert "filecat configuration file" in text
    assert "Last updated:" in text

    config = manager.load(include_env=False)
    assert isinstance(config, FilecatConfig)
    assert config.search.name_threshold == pytest.approx(0.6)


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.save({"search": {"max_results": 25, "name_threshold": 0.8}})

    env = {"FILECAT__SEARCH__NAME_THRESHOLD": "0.7", "FILECAT__SEARCH__EXHAUSTIVE": "true"}
    cli = {"search.name_threshold": 0.5}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.search.max_results == 25
    assert config.search.exhaustive is True
    # CLI overrides take precedence over environment
    assert config.search.name_threshold == pytest.approx(0.5)


def test_environment_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.save({"logging": {"level": "INFO"}})

    config = manager.load(env_overrides={"FILECAT__LOGGING__LEVEL": "DEBUG"})

    assert config.logging.level == "DEBUG"


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_flatten_for_env_round_trips_defaults() -> None:
    flat = flatten_for_env(FilecatConfig())

    assert flat["FILECAT__SEARCH__NAME_THRESHOLD"] == "0.6"
    assert flat["FILECAT__SEARCH__INCLUDE_TAGS"] == "true"
    assert flat["FILECAT__LOGGING__LEVEL"] == "WARNING"


@pytest.mark.parametrize(
    "overrides",
    [
        {"search": {"name_threshold": 1.5}},
        {"search": {"content_threshold": -0.2}},
        {"search": {"max_results": "many"}},
        {"search": {"unknown": True}},
    ],
)
def test_resolve_with_precedence_invalid_value_raises(overrides: dict) -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(defaults=FilecatConfig(), file_overrides=overrides)


def test_conflicting_dotted_override_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=FilecatConfig(),
            cli_overrides={"search": 1, "search.max_results": 3},
        )


def test_search_settings_convert_to_options() -> None:
    options = SearchSettings(name_threshold=0.7, max_results=3, include_tags=False).to_options()

    assert isinstance(options, SearchOptions)
    assert options.name_threshold == pytest.approx(0.7)
    assert options.content_threshold == pytest.approx(0.4)
    assert options.max_results == 3
    assert options.include_tags is False


def test_expand_dotted_accepts_dotted_and_nested_keys() -> None:
    sections = expand_dotted(
        {"search.max_results": 3, "logging": {"level": "INFO"}},
        source_name="cli",
    )

    assert sections == {"search": {"max_results": 3}, "logging": {"level": "INFO"}}


@pytest.mark.parametrize(
    "overrides",
    [
        {"search.limits.max": 3},
        {".max_results": 3},
        {"search.max_results": 3, "search": {"max_results": 4}},
    ],
)
def test_expand_dotted_rejects_malformed_keys(overrides: dict) -> None:
    with pytest.raises(ConfigError):
        expand_dotted(overrides, source_name="cli")


def test_validation_error_names_the_offending_setting() -> None:
    with pytest.raises(ConfigError) as excinfo:
        resolve_with_precedence(
            defaults=FilecatConfig(),
            cli_overrides={"search.name_threshold": 1.5},
        )

    assert excinfo.value.key == "search.name_threshold"
    assert "search.name_threshold" in str(excinfo.value)


def test_search_settings_share_the_engine_threshold_rule() -> None:
    with pytest.raises(ValueError):
        SearchSettings(content_threshold=float("nan"))

    assert SearchSettings(name_threshold=0.0, content_threshold=1.0).name_threshold == 0.0


def test_overrides_from_env_ignores_malformed_names() -> None:
    env = {
        "FILECAT__SEARCH__MAX_RESULTS": "4",
        "FILECAT__SEARCH": "oops",
        "FILECAT__SEARCH__LIMITS__MAX": "1",
        "HOME": "/tmp",
    }

    assert overrides_from_env(env) == {"search": {"max_results": 4}}


def test_set_value_validates_before_writing(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()
    original = manager.read_text()

    with pytest.raises(ConfigError):
        manager.set_value("search.max_results", -1)
    assert manager.read_text() == original

    config = manager.set_value("search.max_results", 4)
    assert config.search.max_results == 4
    assert manager.load(include_env=False).search.max_results == 4


def test_set_value_leaves_file_untouched_when_unchanged(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()
    original = manager.read_text()

    manager.set_value("search.max_results", 10)

    assert manager.read_text() == original


def test_save_rejects_invalid_mapping(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    with pytest.raises(ConfigError):
        manager.save({"search": {"unknown": True}})
    assert not manager.config_path.exists()
