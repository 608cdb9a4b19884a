"""Command line interface for astroschema."""

from __future__ import annotations

import difflib
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from astroschema.config import AstroSchemaConfig, ConfigError, ConfigManager
from astroschema.project import ProjectError, ProjectScanner, inspect_config_file
from astroschema.schema import Collection, SchemaDefinition, SchemaError

console = Console()

_ERROR_CODES = (
    (ConfigError, "config_error"),
    (ProjectError, "project_error"),
    (SchemaError, "schema_error"),
)


def _fail(exc: Exception, *, json_output: bool) -> NoReturn:
    """Report ``exc`` as a JSON error payload or a click error, then exit 1."""
    if not json_output:
        if isinstance(exc, click.ClickException):
            raise exc
        raise click.ClickException(str(exc)) from exc

    code = next((name for kind, name in _ERROR_CODES if isinstance(exc, kind)), "cli_error")
    message = exc.format_message() if isinstance(exc, click.ClickException) else str(exc)
    console.print_json(data={"error": {"code": code, "message": message}})
    raise SystemExit(1)


def _configure_logging(level: str | int) -> None:
    """Route log records through rich at the requested level."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(ctx: click.Context, content_dir: Optional[str] = None) -> AstroSchemaConfig:
    """Resolve settings and apply their logging level unless `--verbose` was given."""
    manager = ConfigManager()
    manager.ensure_exists()
    config = manager.load({"project.content_directory": content_dir})

    verbose = bool(ctx.find_root().params.get("verbose"))
    _configure_logging(logging.DEBUG if verbose else config.logging.level)
    return config


def _field_count(collection: Collection) -> int | None:
    if collection.complete_schema is None:
        return None
    return len(SchemaDefinition.model_validate_json(collection.complete_schema).fields)


def _collection_payload(collection: Collection) -> dict[str, Any]:
    return {
        "name": collection.name,
        "path": str(collection.path),
        "hasJsonSchema": collection.json_schema is not None,
        "hasHeuristicSchema": collection.heuristic_schema is not None,
        "completeSchema": (
            json.loads(collection.complete_schema) if collection.complete_schema else None
        ),
    }


def _collections_table(collections: List[Collection]) -> Table:
    table = Table(title="Collections")
    table.add_column("Collection", style="cyan")
    table.add_column("Path")
    table.add_column("Fields", justify="right")
    table.add_column("Sources")
    for collection in collections:
        count = _field_count(collection)
        sources = [
            label
            for label, present in (
                ("json", collection.json_schema is not None),
                ("heuristic", collection.heuristic_schema is not None),
            )
            if present
        ]
        table.add_row(
            collection.name,
            str(collection.path),
            "-" if count is None else str(count),
            ", ".join(sources) or "-",
        )
    return table


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="astroschema")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """astroschema resolves content collection schemas for Astro projects."""


@cli.command()
@click.argument("project", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--content-dir", type=str, help="Content directory relative to PROJECT.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the collections.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def scan(
    ctx: click.Context,
    project: Path,
    content_dir: str | None,
    json_output: bool,
    quiet: bool,
) -> None:
    """Scan PROJECT and report its collections with their resolved schemas.

    `--json` and `--quiet` fall back to the `cli.json_default` and
    `cli.quiet_default` settings when not given on the command line.
    """
    json_enabled = json_output
    try:
        config = _load_config(ctx, content_dir)

        if ctx.get_parameter_source("json_output") != ParameterSource.COMMANDLINE:
            json_enabled = config.cli.json_default
        quiet_given = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
        if json_enabled and quiet_given and quiet:
            raise click.UsageError("--json cannot be combined with --quiet.")
        quiet_enabled = (quiet if quiet_given else config.cli.quiet_default) and not json_enabled

        root = project.expanduser().resolve()
        scanner = ProjectScanner(config.project)
        collections = scanner.scan(root)
        file_collections = scanner.file_based_collections(root) if json_enabled else {}
    except (ConfigError, ProjectError, click.ClickException) as exc:
        _fail(exc, json_output=json_enabled)

    if json_enabled:
        console.print_json(
            data={
                "collections": [_collection_payload(item) for item in collections],
                "fileCollections": {
                    name: None if path is None else str(path)
                    for name, path in file_collections.items()
                },
            }
        )
    elif quiet_enabled:
        return
    elif not collections:
        console.print("[yellow]No collections found.[/yellow]")
    else:
        console.print(_collections_table(collections))
        console.print(f"[green]Scan summary for {project}: collections={len(collections)}.[/green]")


@cli.command()
@click.argument("project", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("collection")
@click.option("--content-dir", type=str, help="Content directory relative to PROJECT.")
@click.pass_context
def schema(ctx: click.Context, project: Path, collection: str, content_dir: str | None) -> None:
    """Print the merged schema definition for COLLECTION in PROJECT."""
    try:
        config = _load_config(ctx, content_dir)
        definition = ProjectScanner(config.project).collection_schema(
            project.expanduser().resolve(), collection
        )
    except (ConfigError, ProjectError, SchemaError) as exc:
        _fail(exc, json_output=False)

    console.print_json(definition.to_json())


@cli.command()
@click.argument("project", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("collection")
@click.pass_context
def entries(ctx: click.Context, project: Path, collection: str) -> None:
    """Print the entries of the file-based COLLECTION in PROJECT.

    These are the records reference fields pointing at COLLECTION can select.
    """
    try:
        config = _load_config(ctx)
        found = ProjectScanner(config.project).collection_entries(
            project.expanduser().resolve(), collection
        )
    except (ConfigError, ProjectError) as exc:
        _fail(exc, json_output=False)

    payload: List[Dict[str, Any]] = [
        entry.model_dump(mode="json", by_alias=True) for entry in found
    ]
    console.print_json(data=payload)


@cli.command()
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("collections", nargs=-1)
@click.pass_context
def inspect(ctx: click.Context, config_file: Path, collections: tuple[str, ...]) -> None:
    """Print heuristic findings for collections declared in CONFIG_FILE.

    Only the config source is read; content directories are not consulted.
    Optional COLLECTIONS restrict the output to the named collections.
    """
    try:
        _load_config(ctx)
        found = inspect_config_file(config_file, collections)
    except (ConfigError, ProjectError) as exc:
        _fail(exc, json_output=False)

    console.print_json(
        data={
            item.name: json.loads(item.heuristic_schema) if item.heuristic_schema else None
            for item in found
        }
    )


@cli.group()
def config() -> None:
    """Show or change settings stored in ~/.astroschema/config.yaml."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore ASTROSCHEMA__* environment variables.")
def config_view(no_env: bool) -> None:
    """Display the resolved settings as YAML."""
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        settings = manager.load(include_env=not no_env)
    except ConfigError as exc:
        _fail(exc, json_output=False)

    rendered = yaml.safe_dump(settings.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(rendered, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Store VALUE (a YAML literal) under KEY, e.g. `project.content_directory docs`."""
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        before = manager.read_text().splitlines()
        manager.set_value(key, yaml.safe_load(value))
    except yaml.YAMLError as exc:
        raise click.BadParameter(f"Unable to parse value: {exc}", param_hint="VALUE") from exc
    except ConfigError as exc:
        _fail(exc, json_output=False)

    changed = [
        line
        for line in difflib.unified_diff(
            before, manager.read_text().splitlines(), "before", "after", lineterm=""
        )
        if not line[1:].startswith("# Last updated:")
    ]
    if not any(line[:1] in "+-" and line[:3] not in ("+++", "---") for line in changed):
        console.print(f"[yellow]{key} already set; nothing changed.[/yellow]")
        return

    console.print(Syntax("\n".join(changed), "diff"))
    console.print(f"[green]Updated {key}.[/green]")


def main() -> None:
    """Run the astroschema command group."""
    cli()


if __name__ == "__main__":
    main()
