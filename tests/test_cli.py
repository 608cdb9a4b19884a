"""Tests for the command line interface."""

import json
import os
from pathlib import Path
from typing import Any

from click.testing import CliRunner

from astroschema.cli import cli
from astroschema.config import ConfigManager

CONFIG_SOURCE = """\
const blog = defineCollection({
  schema: ({ image }) => z.object({
    title: z.string(),
    cover: image(),
    author: reference('authors'),
  }),
});

const authors = defineCollection({ loader: file("./src/data/authors.json") });

export const collections = { blog, authors };
"""


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = dict(os.environ)
    env["HOME"] = str(tmp_path / "home")
    return env


def _config_path(tmp_path: Path) -> Path:
    return tmp_path / "home" / ".astroschema" / "config.yaml"


def _make_project(tmp_path: Path) -> Path:
    project = tmp_path / "site"
    config_path = project / "src" / "content.config.ts"
    config_path.parent.mkdir(parents=True)
    config_path.write_text(CONFIG_SOURCE, encoding="utf-8")
    (project / "src" / "content" / "blog").mkdir(parents=True)
    data_file = project / "src" / "data" / "authors.json"
    data_file.parent.mkdir(parents=True)
    data_file.write_text(
        json.dumps([{"id": "ada", "name": "Ada"}, {"slug": "grace", "name": "Grace"}]),
        encoding="utf-8",
    )
    return project


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "resolves content collection schemas" in result.output
    for command in ("scan", "schema", "inspect", "config"):
        assert command in result.output


def test_scan_json_reports_collections(tmp_path: Path) -> None:
    runner = CliRunner()
    project = _make_project(tmp_path)

    result = runner.invoke(cli, ["scan", str(project), "--json"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    (collection,) = payload["collections"]
    assert collection["name"] == "blog"
    assert collection["hasJsonSchema"] is False
    assert collection["hasHeuristicSchema"] is True
    field_types = {
        field["name"]: field["fieldType"] for field in collection["completeSchema"]["fields"]
    }
    assert field_types == {"cover": "image", "author": "reference"}


def test_scan_table_lists_collection(tmp_path: Path) -> None:
    runner = CliRunner()
    project = _make_project(tmp_path)

    result = runner.invoke(cli, ["scan", str(project)], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    assert "blog" in result.output
    assert "collections=1" in result.output


def test_scan_quiet_suppresses_output(tmp_path: Path) -> None:
    runner = CliRunner()
    project = _make_project(tmp_path)

    result = runner.invoke(cli, ["scan", str(project), "--quiet"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0
    assert result.output == ""


def test_scan_rejects_json_with_quiet(tmp_path: Path) -> None:
    runner = CliRunner()
    project = _make_project(tmp_path)

    result = runner.invoke(
        cli, ["scan", str(project), "--json", "--quiet"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 1
    payload = json.loads(result.output)
    assert payload["error"]["code"] == "cli_error"


def test_scan_uses_json_default_from_config(tmp_path: Path) -> None:
    runner = CliRunner()
    project = _make_project(tmp_path)
    manager = ConfigManager(config_path=_config_path(tmp_path))
    manager.save({"cli": {"json_default": True}})

    result = runner.invoke(cli, ["scan", str(project)], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["collections"][0]["name"] == "blog"


def test_schema_prints_definition(tmp_path: Path) -> None:
    runner = CliRunner()
    project = _make_project(tmp_path)

    result = runner.invoke(cli, ["schema", str(project), "blog"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["collectionName"] == "blog"
    assert payload["fields"][1]["referenceCollection"] == "authors"


def test_schema_for_unknown_collection_fails(tmp_path: Path) -> None:
    runner = CliRunner()
    project = _make_project(tmp_path)

    result = runner.invoke(cli, ["schema", str(project), "missing"], env=_env_with_home(tmp_path))

    assert result.exit_code != 0
    assert "No schema available" in result.output


def test_inspect_prints_heuristic_findings(tmp_path: Path) -> None:
    runner = CliRunner()
    project = _make_project(tmp_path)
    config_file = project / "src" / "content.config.ts"

    result = runner.invoke(cli, ["inspect", str(config_file)], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert [field["name"] for field in payload["blog"]["fields"]] == ["cover", "author"]


def test_config_view_creates_and_displays_config(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["config", "view"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0
    assert "project:" in result.output
    assert _config_path(tmp_path).exists()


def test_config_set_updates_value_and_writes_diff(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(
        cli, ["config", "set", "project.content_directory", "docs"], env=env
    )

    assert result.exit_code == 0, result.output
    assert "docs" in result.output

    config = ConfigManager(config_path=_config_path(tmp_path)).load(include_env=False)
    assert config.project.content_directory == "docs"


def test_config_set_rejects_invalid_value(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "set", "cli.quiet_default", "maybe"], env=env)

    assert result.exit_code != 0
    assert "Invalid configuration values" in result.output



def test_scan_json_lists_file_based_collections(tmp_path: Path) -> None:
    runner = CliRunner()
    project = _make_project(tmp_path)

    result = runner.invoke(cli, ["scan", str(project), "--json"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    file_collections = json.loads(result.output)["fileCollections"]
    assert list(file_collections) == ["authors"]
    assert file_collections["authors"].endswith("authors.json")


def test_scan_content_dir_option_overrides_config(tmp_path: Path) -> None:
    runner = CliRunner()
    project = _make_project(tmp_path)
    (project / "docs" / "blog").mkdir(parents=True)
    ConfigManager(config_path=_config_path(tmp_path)).save(
        {"project": {"content_directory": "missing"}}
    )

    result = runner.invoke(
        cli,
        ["scan", str(project), "--json", "--content-dir", "docs"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    (collection,) = json.loads(result.output)["collections"]
    assert collection["path"].endswith("docs/blog")


def test_entries_prints_file_based_collection(tmp_path: Path) -> None:
    runner = CliRunner()
    project = _make_project(tmp_path)

    result = runner.invoke(cli, ["entries", str(project), "authors"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert [entry["id"] for entry in payload] == ["ada", "grace"]
    assert payload[0]["collection"] == "authors"
    assert payload[1]["data"] == {"slug": "grace", "name": "Grace"}


def test_entries_for_directory_collection_fails(tmp_path: Path) -> None:
    runner = CliRunner()
    project = _make_project(tmp_path)

    result = runner.invoke(cli, ["entries", str(project), "blog"], env=_env_with_home(tmp_path))

    assert result.exit_code != 0
    assert "not found in the content config" in result.output
