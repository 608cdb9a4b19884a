"""Tests for project-level collection discovery."""

import json
import logging
from pathlib import Path

import pytest

from astroschema.config.models import ProjectSettings
from astroschema.project import (
    ProjectError,
    ProjectScanner,
    inspect_config_file,
    list_file_based_collections,
    load_file_based_collection,
    load_json_schema,
    parse_astro_config,
    scan_content_directories,
    scan_project,
)
from astroschema.schema import FieldType, SchemaDefinition, SchemaUnavailableError

CONFIG_SOURCE = """\
import { defineCollection, reference, z } from 'astro:content';
import { file } from 'astro/loaders';

const blog = defineCollection({
  schema: ({ image }) => z.object({
    title: z.string(),
    cover: image(),
    author: reference('authors'),
  }),
});

const authors = defineCollection({ loader: file('src/data/authors.json') });

export const collections = { blog, authors };
"""

BLOG_JSON_SCHEMA = {
    "$ref": "#/definitions/blog",
    "definitions": {
        "blog": {
            "type": "object",
            "properties": {
                "title": {"type": "string"},
                "cover": {"type": "string"},
                "author": {
                    "anyOf": [
                        {"type": "string"},
                        {
                            "type": "object",
                            "properties": {
                                "id": {"type": "string"},
                                "collection": {"type": "string"},
                            },
                        },
                    ]
                },
            },
            "required": ["title", "cover"],
            "additionalProperties": False,
        }
    },
}


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _make_project(root: Path, *, config_name: str = "src/content.config.ts") -> Path:
    _write(root / config_name, CONFIG_SOURCE)
    (root / "src" / "content" / "blog").mkdir(parents=True, exist_ok=True)
    (root / "src" / "content" / "authors").mkdir(parents=True, exist_ok=True)
    _write(root / ".astro" / "collections" / "blog.schema.json", json.dumps(BLOG_JSON_SCHEMA))
    return root


def test_scan_project_merges_both_schema_sources(tmp_path: Path) -> None:
    project = _make_project(tmp_path)

    collections = scan_project(project)

    assert [collection.name for collection in collections] == ["blog"]
    blog = collections[0]
    assert blog.path == project / "src" / "content" / "blog"
    assert blog.json_schema is not None
    assert blog.heuristic_schema is not None
    assert blog.complete_schema is not None

    definition = SchemaDefinition.model_validate_json(blog.complete_schema)
    fields = {field.name: field for field in definition.fields}
    assert fields["cover"].field_type is FieldType.IMAGE
    assert fields["cover"].required is True
    assert fields["author"].reference_collection == "authors"


def test_legacy_config_location_is_supported(tmp_path: Path) -> None:
    project = _make_project(tmp_path, config_name="src/content/config.ts")

    collections = parse_astro_config(project)

    assert [collection.name for collection in collections] == ["blog"]


def test_parse_astro_config_without_config_file_returns_empty(tmp_path: Path) -> None:
    assert parse_astro_config(tmp_path) == []


def test_directory_scan_fallback_lists_subdirectories(tmp_path: Path) -> None:
    content_dir = tmp_path / "src" / "content"
    (content_dir / "posts").mkdir(parents=True)
    (content_dir / "docs").mkdir()
    _write(content_dir / "README.md", "not a collection")

    collections = scan_project(tmp_path)

    assert [collection.name for collection in collections] == ["docs", "posts"]
    assert all(collection.complete_schema is None for collection in collections)


def test_config_without_usable_collections_falls_back_to_directories(tmp_path: Path) -> None:
    _write(tmp_path / "src" / "content.config.ts", "export const collections = {};")
    (tmp_path / "src" / "content" / "notes").mkdir(parents=True)

    collections = scan_project(tmp_path)

    assert [collection.name for collection in collections] == ["notes"]


def test_missing_content_directory_yields_empty_list(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.ERROR):
        collections = scan_content_directories(tmp_path)

    assert collections == []
    assert "Content directory does not exist" in caplog.text


def test_content_directory_override_is_relative_to_project(tmp_path: Path) -> None:
    _write(tmp_path / "src" / "content.config.ts", CONFIG_SOURCE)
    (tmp_path / "docs" / "blog").mkdir(parents=True)

    collections = scan_project(tmp_path, "docs")

    assert [collection.path for collection in collections] == [tmp_path / "docs" / "blog"]
    assert collections[0].heuristic_schema is not None
    assert collections[0].json_schema is None


def test_settings_control_layout(tmp_path: Path) -> None:
    _write(tmp_path / "config" / "collections.ts", CONFIG_SOURCE)
    (tmp_path / "pages" / "blog").mkdir(parents=True)
    _write(tmp_path / "schemas" / "blog.schema.json", json.dumps(BLOG_JSON_SCHEMA))
    settings = ProjectSettings(
        content_directory="pages",
        config_files=["config/collections.ts"],
        schema_directory="schemas",
    )

    collections = ProjectScanner(settings).scan(tmp_path)

    assert [collection.name for collection in collections] == ["blog"]
    assert collections[0].json_schema is not None


def test_load_json_schema_returns_none_when_missing(tmp_path: Path) -> None:
    assert load_json_schema(tmp_path, "blog") is None


def test_collection_schema_returns_definition(tmp_path: Path) -> None:
    project = _make_project(tmp_path)

    definition = ProjectScanner().collection_schema(project, "blog")

    assert definition.collection_name == "blog"
    assert [field.name for field in definition.fields] == ["title", "cover", "author"]


def test_collection_schema_raises_for_unknown_collection(tmp_path: Path) -> None:
    project = _make_project(tmp_path)

    with pytest.raises(SchemaUnavailableError):
        ProjectScanner().collection_schema(project, "missing")


def test_inspect_config_file_ignores_content_directories(tmp_path: Path) -> None:
    config_path = _write(tmp_path / "content.config.ts", CONFIG_SOURCE)

    collections = inspect_config_file(config_path)

    assert [collection.name for collection in collections] == ["blog"]
    payload = json.loads(collections[0].heuristic_schema or "{}")
    assert [field["name"] for field in payload["fields"]] == ["cover", "author"]


def _write_authors(root: Path, payload: object) -> Path:
    return _write(root / "src" / "data" / "authors.json", json.dumps(payload))


def test_list_file_based_collections_maps_data_files(tmp_path: Path) -> None:
    project = _make_project(tmp_path)

    assert list_file_based_collections(project) == {
        "authors": project / "src" / "data" / "authors.json"
    }


def test_load_file_based_collection_keys_entries_by_id_or_slug(tmp_path: Path) -> None:
    project = _make_project(tmp_path)
    data_file = _write_authors(
        project,
        [{"id": "ada", "name": "Ada Lovelace"}, "stray", {"slug": "grace", "name": "Grace"}],
    )

    entries = load_file_based_collection(project, "authors")

    assert [entry.id for entry in entries] == ["ada", "grace"]
    assert all(entry.collection == "authors" for entry in entries)
    assert entries[0].path == data_file
    assert entries[0].data == {"id": "ada", "name": "Ada Lovelace"}


def test_load_file_based_collection_strips_leading_dot_slash(tmp_path: Path) -> None:
    _write(
        tmp_path / "src" / "content.config.ts",
        "export const team = defineCollection({ loader: file(\"./data/team.json\") });\n"
        "export const collections = { team };\n",
    )
    _write(tmp_path / "data" / "team.json", json.dumps([{"id": "lin"}]))

    (entry,) = ProjectScanner().collection_entries(tmp_path, "team")

    assert entry.id == "lin"
    assert entry.path == tmp_path / "data" / "team.json"


def test_load_file_based_collection_requires_identifier(tmp_path: Path) -> None:
    project = _make_project(tmp_path)
    _write_authors(project, [{"id": "ada"}, {"name": "Anonymous"}])

    with pytest.raises(ProjectError, match="no 'id' or 'slug'"):
        load_file_based_collection(project, "authors")


def test_load_file_based_collection_requires_json_array(tmp_path: Path) -> None:
    project = _make_project(tmp_path)
    _write_authors(project, {"ada": {"name": "Ada"}})

    with pytest.raises(ProjectError, match="JSON array"):
        load_file_based_collection(project, "authors")


def test_load_file_based_collection_rejects_invalid_json(tmp_path: Path) -> None:
    project = _make_project(tmp_path)
    _write(project / "src" / "data" / "authors.json", "[{")

    with pytest.raises(ProjectError, match="Failed to parse"):
        load_file_based_collection(project, "authors")


def test_load_file_based_collection_unknown_name_raises(tmp_path: Path) -> None:
    project = _make_project(tmp_path)

    with pytest.raises(ProjectError, match="not found"):
        load_file_based_collection(project, "blog")


def test_load_file_based_collection_missing_data_file_raises(tmp_path: Path) -> None:
    project = _make_project(tmp_path)

    with pytest.raises(ProjectError, match="Failed to read collection file"):
        load_file_based_collection(project, "authors")
