"""Heuristic scanning of content-collection config sources."""

from .comments import strip_comments
from .definitions import (
    extract_collection_schema,
    find_file_based_collections,
    find_file_loader_path,
    is_file_based_collection,
    parse_collections_from_content,
)
from .delimiters import find_matching_close
from .errors import FieldPathError, ParseError, UnclosedDelimiterError
from .helpers import HelperKind, HelperMatch, find_helper_calls
from .heuristic import build_heuristic_schema, extract_special_fields
from .locator import extract_collections_block
from .paths import is_inside_array, resolve_field_path

__all__ = [
    "strip_comments",
    "find_matching_close",
    "extract_collections_block",
    "is_file_based_collection",
    "find_file_loader_path",
    "find_file_based_collections",
    "extract_collection_schema",
    "parse_collections_from_content",
    "HelperKind",
    "HelperMatch",
    "find_helper_calls",
    "resolve_field_path",
    "is_inside_array",
    "build_heuristic_schema",
    "extract_special_fields",
    "ParseError",
    "UnclosedDelimiterError",
    "FieldPathError",
]
