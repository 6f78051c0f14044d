"""Command line interface for the filecat project."""

from __future__ import annotations

import difflib
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from filecat.catalog import (
    CatalogError,
    DuplicateIdentifierError,
    FileRecord,
    InvalidArgumentError,
    load_records,
)
from filecat.catalog.samples import sample_records
from filecat.config import ConfigError, ConfigManager, FilecatConfig
from filecat.search import FuzzyCatalog, SearchResult, format_results

console = Console()
LOGGER = logging.getLogger(__name__)


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return
    if summary_only and mode not in {"summary", "warning", "error"}:
        return
    console.print(message)


def _format_summary_line(command: str, subject: str, metrics: dict[str, Any]) -> str:
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {subject}: {parts}.[/green]"


def _configure_logging(level: str) -> None:
    """Route library logging through rich on stderr at the configured level."""

    root = logging.getLogger()
    if not any(isinstance(handler, RichHandler) for handler in root.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.setLevel(level)


def _load_config(
    json_output: bool, cli_overrides: dict[str, Any] | None = None
) -> FilecatConfig:
    try:
        config = ConfigManager().load(cli_overrides=cli_overrides)
    except ConfigError as exc:
        _handle_cli_error(
            str(exc),
            code="config_error",
            json_output=json_output,
            details={"key": exc.key} if exc.key else None,
            original=exc,
        )
    _configure_logging(config.logging.level)
    return config


def _build_catalog(catalog_path: Optional[str], *, json_output: bool) -> FuzzyCatalog:
    """Return a fuzzy catalog populated from a file or the built-in samples."""

    try:
        records = load_records(Path(catalog_path)) if catalog_path else sample_records()
        catalog = FuzzyCatalog(records)
    except DuplicateIdentifierError as exc:
        _handle_cli_error(
            str(exc),
            code="duplicate_identifier",
            json_output=json_output,
            details={"identifier": exc.identifier},
            original=exc,
        )
    except CatalogError as exc:
        _handle_cli_error(str(exc), code="catalog_error", json_output=json_output, original=exc)
    LOGGER.debug("Loaded %d record(s) from %s.", len(catalog), catalog_path or "sample catalog")
    return catalog


def _resolve_modes(config: FilecatConfig, quiet: bool, summary_mode: bool) -> tuple[bool, bool]:
    return quiet or config.cli.quiet_default, summary_mode or config.cli.summary_default


def _record_row(record: FileRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "name": record.name,
        "type": record.type,
        "size": record.size,
        "tags": list(record.tags),
    }


def _results_table(title: str, results: list[SearchResult]) -> Table:
    table = Table(title=title)
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Score", justify="right")
    table.add_column("Match")
    table.add_column("Relevance")
    for row in format_results(results):
        table.add_row(
            str(row.id), row.name, row.type, row.similarity, row.match_details, row.relevance
        )
    return table


def _records_table(title: str, records: Iterable[FileRecord]) -> Table:
    table = Table(title=title)
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Size", justify="right")
    table.add_column("Tags")
    for record in records:
        table.add_row(
            str(record.id), record.name, record.type, f"{record.size:g}", ", ".join(record.tags)
        )
    return table


def _emit_results(
    command: str,
    term: str,
    catalog: FuzzyCatalog,
    results: list[SearchResult],
    *,
    json_output: bool,
    quiet: bool,
    summary_only: bool,
) -> None:
    if json_output:
        payload = {
            "query": term,
            "counts": {"records": len(catalog), "matches": len(results)},
            "results": [row.model_dump(mode="json") for row in format_results(results)],
        }
        console.print_json(data=payload)
        return

    if results:
        _emit_message(
            _results_table(f"{command} results for '{term}'", results),
            mode="detail",
            quiet=quiet,
            summary_only=summary_only,
        )
    else:
        _emit_message(
            f"[yellow]No matches for '{term}'.[/yellow]",
            mode="warning",
            quiet=quiet,
            summary_only=summary_only,
        )
    _emit_message(
        _format_summary_line(
            command, f"'{term}'", {"records": len(catalog), "matches": len(results)}
        ),
        mode="summary",
        quiet=quiet,
        summary_only=summary_only,
    )


def _run_search(search: Callable[[], list[SearchResult]], json_output: bool) -> list[SearchResult]:
    try:
        return search()
    except InvalidArgumentError as exc:
        _handle_cli_error(str(exc), code="invalid_argument", json_output=json_output, original=exc)
    return []


def _catalog_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by every catalog command."""

    options = (
        click.option(
            "--catalog",
            "catalog_path",
            type=click.Path(exists=True, dir_okay=False, path_type=str),
            help="YAML or JSON catalog file; defaults to the built-in sample catalog.",
        ),
        click.option("--json", "json_output", is_flag=True, help="Emit JSON output."),
        click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines."),
        click.option("--quiet", is_flag=True, help="Suppress non-error output."),
    )
    for option in reversed(options):
        func = option(func)
    return func


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="filecat")
def cli() -> None:
    """filecat catalogs files in memory and finds them despite typos."""


@cli.command()
@click.argument("term")
@click.option("--name-threshold", type=float, help="Minimum score for name and tag matches.")
@click.option("--content-threshold", type=float, help="Minimum score for content matches.")
@click.option("--no-names", is_flag=True, help="Skip record names.")
@click.option("--no-content", is_flag=True, help="Skip record contents.")
@click.option("--no-tags", is_flag=True, help="Skip record tags.")
@click.option("--limit", type=int, help="Maximum number of results.")
@click.option("--exhaustive", is_flag=True, help="Score every name instead of pruning by words.")
@_catalog_options
def search(
    term: str,
    name_threshold: float | None,
    content_threshold: float | None,
    no_names: bool,
    no_content: bool,
    no_tags: bool,
    limit: int | None,
    exhaustive: bool,
    catalog_path: str | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Search names, contents, and tags for TERM."""

    overrides: dict[str, Any] = {}
    if name_threshold is not None:
        overrides["search.name_threshold"] = name_threshold
    if content_threshold is not None:
        overrides["search.content_threshold"] = content_threshold
    if limit is not None:
        overrides["search.max_results"] = limit
    if no_names:
        overrides["search.include_names"] = False
    if no_content:
        overrides["search.include_content"] = False
    if no_tags:
        overrides["search.include_tags"] = False
    if exhaustive:
        overrides["search.exhaustive"] = True

    config = _load_config(json_output, overrides)
    quiet, summary_only = _resolve_modes(config, quiet, summary_mode)
    catalog = _build_catalog(catalog_path, json_output=json_output)
    options = config.search.to_options()
    results = _run_search(lambda: catalog.fuzzy_search_combined(term, options), json_output)
    _emit_results(
        "Search",
        term,
        catalog,
        results,
        json_output=json_output,
        quiet=quiet,
        summary_only=summary_only,
    )


@cli.command()
@click.argument("term")
@click.option("--threshold", type=float, help="Minimum name similarity.")
@click.option("--basic", is_flag=True, help="Score every record name without word pruning.")
@_catalog_options
def names(
    term: str,
    threshold: float | None,
    basic: bool,
    catalog_path: str | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Fuzzy-search record names for TERM."""

    config = _load_config(json_output)
    quiet, summary_only = _resolve_modes(config, quiet, summary_mode)
    catalog = _build_catalog(catalog_path, json_output=json_output)
    cutoff = config.search.name_threshold if threshold is None else threshold
    if basic:
        results = _run_search(lambda: catalog.fuzzy_search_by_name(term, cutoff), json_output)
    else:
        results = _run_search(
            lambda: catalog.fuzzy_search_by_name_indexed(
                term, cutoff, exhaustive=config.search.exhaustive
            ),
            json_output,
        )
    _emit_results(
        "Name search",
        term,
        catalog,
        results,
        json_output=json_output,
        quiet=quiet,
        summary_only=summary_only,
    )


@cli.command()
@click.argument("term")
@click.option("--threshold", type=float, help="Minimum content similarity.")
@_catalog_options
def content(
    term: str,
    threshold: float | None,
    catalog_path: str | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Fuzzy-search record contents for TERM."""

    config = _load_config(json_output)
    quiet, summary_only = _resolve_modes(config, quiet, summary_mode)
    catalog = _build_catalog(catalog_path, json_output=json_output)
    limit = config.search.content_threshold if threshold is None else threshold
    results = _run_search(lambda: catalog.fuzzy_search_by_content(term, limit), json_output)
    _emit_results(
        "Content search",
        term,
        catalog,
        results,
        json_output=json_output,
        quiet=quiet,
        summary_only=summary_only,
    )


@cli.command()
@click.option("--id", "identifier", type=str, help="Exact record identifier.")
@click.option("--name", "name_query", type=str, help="Case-insensitive name substring.")
@click.option("--type", "type_", type=str, help="Record type.")
@click.option("--tag", type=str, help="Record tag.")
@_catalog_options
def find(
    identifier: str | None,
    name_query: str | None,
    type_: str | None,
    tag: str | None,
    catalog_path: str | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """List records matching every given exact filter."""

    config = _load_config(json_output)
    quiet, summary_only = _resolve_modes(config, quiet, summary_mode)
    catalog = _build_catalog(catalog_path, json_output=json_output)

    matches = catalog.records
    if identifier is not None:
        record = catalog.get_by_id(identifier)
        if record is None and identifier.lstrip("-").isdigit():
            record = catalog.get_by_id(int(identifier))
        matches = [record] if record is not None else []
    if name_query is not None:
        allowed = {record.id for record in catalog.find_by_name_substring(name_query)}
        matches = [record for record in matches if record.id in allowed]
    if type_ is not None:
        allowed = {record.id for record in catalog.find_by_type(type_)}
        matches = [record for record in matches if record.id in allowed]
    if tag is not None:
        allowed = {record.id for record in catalog.find_by_tag(tag)}
        matches = [record for record in matches if record.id in allowed]

    if json_output:
        console.print_json(
            data={
                "counts": {"records": len(catalog), "matches": len(matches)},
                "results": [_record_row(record) for record in matches],
            }
        )
        return

    if matches:
        _emit_message(
            _records_table("Matching records", matches),
            mode="detail",
            quiet=quiet,
            summary_only=summary_only,
        )
    _emit_message(
        _format_summary_line("Find", "catalog", {"records": len(catalog), "matches": len(matches)}),
        mode="summary",
        quiet=quiet,
        summary_only=summary_only,
    )


@cli.command()
@_catalog_options
def report(
    catalog_path: str | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Show storage usage, per-type statistics, and the largest and newest records."""

    config = _load_config(json_output)
    quiet, summary_only = _resolve_modes(config, quiet, summary_mode)
    catalog = _build_catalog(catalog_path, json_output=json_output)
    snapshot = catalog.storage_report()

    if json_output:
        console.print_json(
            data={
                "total_files": snapshot.total_files,
                "total_size": snapshot.total_size,
                "average_size": snapshot.average_size,
                "largest": [_record_row(record) for record in snapshot.largest],
                "types": {
                    name: stats.model_dump(mode="json") for name, stats in snapshot.types.items()
                },
                "recently_added": [_record_row(record) for record in snapshot.recently_added],
            }
        )
        return

    types_table = Table(title="Record types")
    types_table.add_column("Type")
    types_table.add_column("Count", justify="right")
    types_table.add_column("Total size", justify="right")
    types_table.add_column("Average size", justify="right")
    for name, stats in snapshot.types.items():
        types_table.add_row(
            name, str(stats.count), f"{stats.total_size:g}", f"{stats.average_size:.2f}"
        )

    for renderable in (
        types_table,
        _records_table("Largest records", snapshot.largest),
        _records_table("Recently added", snapshot.recently_added),
    ):
        _emit_message(renderable, mode="detail", quiet=quiet, summary_only=summary_only)

    _emit_message(
        _format_summary_line(
            "Report",
            "catalog",
            {
                "files": snapshot.total_files,
                "total_size": f"{snapshot.total_size:g}",
                "average_size": f"{snapshot.average_size:.2f}",
                "types": len(snapshot.types),
            },
        ),
        mode="summary",
        quiet=quiet,
        summary_only=summary_only,
    )


@cli.command()
@_catalog_options
def duplicates(
    catalog_path: str | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """List records whose content repeats an earlier record's content."""

    config = _load_config(json_output)
    quiet, summary_only = _resolve_modes(config, quiet, summary_mode)
    catalog = _build_catalog(catalog_path, json_output=json_output)
    pairs = catalog.duplicates_by_content()

    if json_output:
        console.print_json(
            data={
                "count": len(pairs),
                "duplicates": [
                    {
                        "original": _record_row(pair.original),
                        "duplicate": _record_row(pair.duplicate),
                    }
                    for pair in pairs
                ],
            }
        )
        return

    if pairs:
        table = Table(title="Duplicate content")
        table.add_column("Original")
        table.add_column("Duplicate")
        for pair in pairs:
            table.add_row(
                f"{pair.original.name} ({pair.original.id})",
                f"{pair.duplicate.name} ({pair.duplicate.id})",
            )
        _emit_message(table, mode="detail", quiet=quiet, summary_only=summary_only)
    _emit_message(
        _format_summary_line("Duplicates", "catalog", {"pairs": len(pairs)}),
        mode="summary",
        quiet=quiet,
        summary_only=summary_only,
    )


@cli.group()
def config() -> None:
    """Manage filecat configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        manager.set_value(key, parsed_value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    after = manager.read_text().splitlines()

    diff = list(
        difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    if not diff:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {key}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session.

    Raises:
        click.ClickException: If edited content is invalid or cannot be saved.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        manager.save(parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
