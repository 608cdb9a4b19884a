"""Filesystem-facing project scanning."""

from .errors import ProjectError
from .scanner import (
    ProjectScanner,
    find_config_file,
    generate_complete_schema,
    inspect_config_file,
    list_file_based_collections,
    load_file_based_collection,
    load_json_schema,
    parse_astro_config,
    resolve_content_directory,
    scan_content_directories,
    scan_project,
)

__all__ = [
    "ProjectError",
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
