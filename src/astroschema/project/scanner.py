"""Discover a project's collections and attach their schemas."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from astroschema.config.models import (
    DEFAULT_CONFIG_FILES,
    DEFAULT_CONTENT_DIRECTORY,
    DEFAULT_SCHEMA_DIRECTORY,
    ProjectSettings,
)
from astroschema.parsing import (
    find_file_based_collections,
    find_file_loader_path,
    parse_collections_from_content,
    strip_comments,
)
from astroschema.schema import (
    Collection,
    CollectionEntry,
    SchemaDefinition,
    SchemaError,
    SchemaUnavailableError,
    create_complete_schema,
)

from .errors import ProjectError

LOGGER = logging.getLogger(__name__)


def resolve_content_directory(project_path: Path, content_directory: Optional[str] = None) -> Path:
    """Return the content directory, honoring a project-relative override."""
    return project_path / (content_directory or DEFAULT_CONTENT_DIRECTORY)


def find_config_file(
    project_path: Path, config_files: Iterable[str] = DEFAULT_CONFIG_FILES
) -> Optional[Path]:
    """Return the first existing content config file, if any."""
    for candidate in config_files:
        config_path = project_path / candidate
        if config_path.is_file():
            return config_path
    return None


def _read_text(path: Path, what: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ProjectError(f"Failed to read {what} {path}: {exc}") from exc


def parse_astro_config(
    project_path: Path,
    content_directory: Optional[str] = None,
    config_files: Iterable[str] = DEFAULT_CONFIG_FILES,
) -> List[Collection]:
    """Parse the project's content config into collections.

    Args:
        project_path: Project root.
        content_directory: Optional content directory relative to the project.
        config_files: Candidate config files relative to the project, tried in order.

    Returns:
        List[Collection]: Declared, directory-backed collections; empty when no
        config file exists.

    Raises:
        ProjectError: If the config file exists but cannot be read.
    """
    config_path = find_config_file(project_path, config_files)
    if config_path is None:
        LOGGER.debug("No content config found in %s", project_path)
        return []

    LOGGER.debug("Parsing content config %s", config_path)
    source = _read_text(config_path, "config file")
    content_dir = resolve_content_directory(project_path, content_directory)
    return parse_collections_from_content(source, content_dir)


def scan_content_directories(
    project_path: Path, content_directory: Optional[str] = None
) -> List[Collection]:
    """Treat every immediate subdirectory of the content directory as a collection.

    Raises:
        ProjectError: If the content directory exists but cannot be listed.
    """
    content_dir = resolve_content_directory(project_path, content_directory)
    if not content_dir.is_dir():
        LOGGER.error("Content directory does not exist: %s", content_dir)
        return []

    try:
        entries = sorted(content_dir.iterdir())
    except OSError as exc:
        raise ProjectError(f"Failed to read content directory {content_dir}: {exc}") from exc

    collections = [Collection(name=entry.name, path=entry) for entry in entries if entry.is_dir()]
    LOGGER.debug("Found %d collection(s) via directory scan", len(collections))
    return collections


def load_json_schema(
    project_path: Path,
    collection_name: str,
    schema_directory: str = DEFAULT_SCHEMA_DIRECTORY,
) -> Optional[str]:
    """Return the generated JSON Schema text for a collection, if present."""
    schema_path = project_path / schema_directory / f"{collection_name}.schema.json"
    if not schema_path.is_file():
        LOGGER.debug("JSON schema not found: %s", schema_path)
        return None

    try:
        return schema_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        LOGGER.warning("Failed to read JSON schema %s: %s", schema_path, exc)
        return None


def list_file_based_collections(
    project_path: Path, config_files: Iterable[str] = DEFAULT_CONFIG_FILES
) -> Dict[str, Optional[Path]]:
    """Return file-based collections of a project mapped to their data files.

    These collections never show up in :func:`parse_astro_config`; they exist
    so reference fields can point at their entries.

    Raises:
        ProjectError: If the config file exists but cannot be read.
    """
    config_path = find_config_file(project_path, config_files)
    if config_path is None:
        return {}

    source = _read_text(config_path, "config file")
    return {
        name: None if data_file is None else project_path / data_file
        for name, data_file in find_file_based_collections(source).items()
    }


def _entry_id(item: Dict[str, Any]) -> Optional[str]:
    for key in ("id", "slug"):
        value = item.get(key)
        if isinstance(value, str):
            return value
    return None


def load_file_based_collection(
    project_path: Path,
    collection_name: str,
    config_files: Iterable[str] = DEFAULT_CONFIG_FILES,
) -> List[CollectionEntry]:
    """Load the entries of a collection declared with `loader: file(...)`.

    Args:
        project_path: Project root.
        collection_name: Name of the file-based collection.
        config_files: Candidate config files relative to the project, tried in order.

    Returns:
        List[CollectionEntry]: Entries in file order, keyed by `id` (or `slug`).

    Raises:
        ProjectError: If the collection is not declared with a file loader, the
            data file cannot be read, is not a JSON array, or an entry lacks a
            string `id`/`slug`.
    """
    data_file: Optional[str] = None
    for candidate in config_files:
        config_path = project_path / candidate
        if not config_path.is_file():
            continue
        source = strip_comments(_read_text(config_path, "config file"))
        data_file = find_file_loader_path(source, collection_name)
        if data_file is not None:
            LOGGER.debug("File-based collection %s reads %s", collection_name, data_file)
            break

    if data_file is None:
        raise ProjectError(
            f"File-based collection '{collection_name}' not found in the content config"
        )

    data_path = project_path / data_file
    try:
        items = json.loads(_read_text(data_path, "collection file"))
    except json.JSONDecodeError as exc:
        raise ProjectError(f"Failed to parse collection file {data_path}: {exc}") from exc

    if not isinstance(items, list):
        raise ProjectError(f"Collection file {data_path} must contain a JSON array")

    entries: List[CollectionEntry] = []
    for item in items:
        if not isinstance(item, dict):
            LOGGER.debug("Skipping non-object entry in %s", data_path)
            continue
        entry_id = _entry_id(item)
        if entry_id is None:
            raise ProjectError(
                f"Entry in {data_path} has no 'id' or 'slug'; "
                "file-based collection entries must be identifiable"
            )
        entries.append(
            CollectionEntry(id=entry_id, collection=collection_name, path=data_path, data=item)
        )

    LOGGER.debug("Loaded %d entries for collection %s", len(entries), collection_name)
    return entries


def generate_complete_schema(collection: Collection) -> Collection:
    """Return a copy of ``collection`` with ``complete_schema`` filled in when possible."""
    try:
        definition = create_complete_schema(
            collection.name, collection.json_schema, collection.heuristic_schema
        )
    except SchemaError as exc:
        LOGGER.warning("Failed to create complete schema for %s: %s", collection.name, exc)
        return collection

    LOGGER.debug("Generated complete schema for collection %s", collection.name)
    return collection.model_copy(update={"complete_schema": definition.to_json()})


class ProjectScanner:
    """Scan Astro-style projects using configured layout settings."""

    def __init__(self, settings: ProjectSettings | None = None) -> None:
        self.settings = settings or ProjectSettings()

    def scan(self, project_path: Path, content_directory: Optional[str] = None) -> List[Collection]:
        """Discover collections and attach heuristic, JSON, and merged schemas.

        The content config is consulted first; when it is missing, unreadable,
        or declares nothing usable, the content directory's subdirectories are
        used instead.

        Args:
            project_path: Project root.
            content_directory: Override for the configured content directory.

        Returns:
            List[Collection]: Collections with every available schema attached.

        Raises:
            ProjectError: If the fallback content directory cannot be listed.
        """
        project_path = project_path.expanduser()
        content_directory = content_directory or self.settings.content_directory
        LOGGER.debug(
            "Scanning project %s (content directory: %s)",
            project_path,
            content_directory or DEFAULT_CONTENT_DIRECTORY,
        )

        try:
            collections = parse_astro_config(
                project_path, content_directory, self.settings.config_files
            )
        except ProjectError as exc:
            LOGGER.debug("Content config unusable (%s); falling back to directory scan", exc)
            collections = []

        if collections:
            LOGGER.debug("Found %d collection(s) from content config", len(collections))
        else:
            collections = scan_content_directories(project_path, content_directory)

        return [self._complete(project_path, collection) for collection in collections]

    def collection_schema(
        self,
        project_path: Path,
        collection_name: str,
        content_directory: Optional[str] = None,
    ) -> SchemaDefinition:
        """Return the merged schema definition for one collection.

        Raises:
            SchemaUnavailableError: If the collection is unknown or has no usable schema.
        """
        for collection in self.scan(project_path, content_directory):
            if collection.name != collection_name:
                continue
            if collection.complete_schema is None:
                break
            return SchemaDefinition.model_validate_json(collection.complete_schema)

        raise SchemaUnavailableError(f"No schema available for collection {collection_name}")

    def file_based_collections(self, project_path: Path) -> Dict[str, Optional[Path]]:
        """Return the project's file-based collections and their data files."""
        return list_file_based_collections(project_path.expanduser(), self.settings.config_files)

    def collection_entries(self, project_path: Path, collection_name: str) -> List[CollectionEntry]:
        """Return the entries of a file-based collection.

        Raises:
            ProjectError: If the collection or its data file cannot be loaded.
        """
        return load_file_based_collection(
            project_path.expanduser(), collection_name, self.settings.config_files
        )

    def _complete(self, project_path: Path, collection: Collection) -> Collection:
        json_schema = load_json_schema(
            project_path, collection.name, self.settings.schema_directory
        )
        if json_schema is not None:
            LOGGER.debug("Loaded JSON schema for collection %s", collection.name)
            collection = collection.model_copy(update={"json_schema": json_schema})
        return generate_complete_schema(collection)


def scan_project(
    project_path: Path,
    content_directory: Optional[str] = None,
    *,
    settings: ProjectSettings | None = None,
) -> List[Collection]:
    """Scan a project with default (or supplied) layout settings."""
    return ProjectScanner(settings).scan(project_path, content_directory)


def inspect_config_file(
    config_path: Path, collection_names: Sequence[str] = ()
) -> List[Collection]:
    """Return heuristic findings for collections declared in a config file.

    Directory existence is not checked, so collections are reported relative to
    the conventional content directory next to the config.

    Args:
        config_path: Path to a content config file.
        collection_names: Restrict the report to these names when non-empty.

    Raises:
        ProjectError: If the file cannot be read.
    """
    source = _read_text(config_path, "config file")
    collections = parse_collections_from_content(
        source, Path(DEFAULT_CONTENT_DIRECTORY), directory_exists=lambda _path: True
    )
    if collection_names:
        wanted = set(collection_names)
        collections = [collection for collection in collections if collection.name in wanted]
    return collections


__all__ = [
    "ProjectScanner",
    "find_config_file",
    "generate_complete_schema",
    "inspect_config_file",
    "list_file_based_collections",
    "load_file_based_collection",
    "load_json_schema",
    "parse_astro_config",
    "resolve_content_directory",
    "scan_content_directories",
    "scan_project",
]
