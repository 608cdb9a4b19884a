"""Discover collection definitions inside a content config source."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional

from astroschema.schema.models import Collection

from .comments import strip_comments
from .delimiters import find_matching_close
from .errors import UnclosedDelimiterError
from .heuristic import extract_special_fields
from .locator import extract_collections_block

LOGGER = logging.getLogger(__name__)

_IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_]*"
_NAME_LIST_RE = re.compile(
    rf"\{{\s*({_IDENTIFIER}(?:\s*,\s*{_IDENTIFIER})*)\s*,?\s*\}}"
)
_INLINE_DEFINITION_RE = re.compile(r"(\w+)\s*:\s*defineCollection\s*\(")
_SCHEMA_OBJECT_RE = re.compile(r"z\.object\s*\(\s*\{")

DirectoryCheck = Callable[[Path], bool]


def _file_loader_pattern(collection_name: str) -> re.Pattern[str]:
    return re.compile(
        rf"(?:(?:const|let|var)\s+)?\b{re.escape(collection_name)}\s*[=:]\s*"
        r"defineCollection\s*\(\s*\{\s*loader:\s*file\s*\("
    )


def is_file_based_collection(source: str, collection_name: str) -> bool:
    """Return True when ``collection_name`` is declared with a `loader: file(...)`.

    Such collections are backed by a single data file rather than a directory of
    documents.

    Args:
        source: Full comment-stripped config source.
        collection_name: Name of the collection to check.

    Returns:
        bool: Whether the collection uses the file loader.
    """
    return _file_loader_pattern(collection_name).search(source) is not None


def find_file_loader_path(source: str, collection_name: str) -> Optional[str]:
    """Return the data file passed to `file(...)` for a file-based collection.

    A leading `./` is removed so the result can be joined onto the project root.
    None is returned when the collection is not file-based or its argument is
    not a plain string literal.
    """
    pattern = re.compile(
        _file_loader_pattern(collection_name).pattern + r"\s*['\"]([^'\"]+)['\"]"
    )
    match = pattern.search(source)
    if match is None:
        return None

    path = match.group(1)
    while path.startswith("./"):
        path = path[2:]
    return path


def find_collection_block(source: str, collection_name: str) -> Optional[str]:
    """Return the text of the `defineCollection(...)` call for a collection.

    Raises:
        UnclosedDelimiterError: If the call's parentheses are never closed.
    """
    name = re.escape(collection_name)
    const_re = re.compile(rf"const\s+{name}\s*=\s*defineCollection\s*\(")
    object_re = re.compile(rf"\b{name}\s*:\s*defineCollection\s*\(")

    match = const_re.search(source) or object_re.search(source)
    if match is None:
        return None

    end = find_matching_close(source, match.end() - 1, "(", ")")
    return source[match.start() : end]


def find_schema_body(collection_block: str) -> Optional[str]:
    """Return the trimmed body of the first `z.object({...})` in a collection block.

    Raises:
        UnclosedDelimiterError: If the object literal is never closed.
    """
    match = _SCHEMA_OBJECT_RE.search(collection_block)
    if match is None:
        return None

    start = match.end() - 1
    end = find_matching_close(collection_block, start, "{", "}")
    return collection_block[start + 1 : end - 1].strip()


def extract_collection_schema(source: str, collection_name: str) -> Optional[str]:
    """Return the serialized heuristic schema for one collection.

    Args:
        source: Text that contains the collection's `defineCollection` call.
        collection_name: Name of the collection.

    Returns:
        Optional[str]: Heuristic schema JSON, or None when the definition is
        missing, malformed, or has no helper calls.
    """
    try:
        collection_block = find_collection_block(source, collection_name)
        if collection_block is None:
            return None
        schema_body = find_schema_body(collection_block)
    except UnclosedDelimiterError as exc:
        LOGGER.debug("Schema for collection %s is unreadable: %s", collection_name, exc)
        return None

    if schema_body is None:
        return None
    return extract_special_fields(schema_body)


def iter_collection_names(collections_block: str) -> Iterator[tuple[str, bool]]:
    """Yield collection names declared in a collections block.

    Each item pairs the name with a flag that is True for names taken from a
    bare identifier list (`{ blog, notes }`) and False for inline
    `name: defineCollection(...)` entries.
    """
    name_list = _NAME_LIST_RE.fullmatch(collections_block.strip())
    if name_list is not None:
        for name in name_list.group(1).split(","):
            yield name.strip(), True

    for match in _INLINE_DEFINITION_RE.finditer(collections_block):
        yield match.group(1), False


def parse_collections_from_content(
    source: str,
    content_dir: Path,
    *,
    directory_exists: DirectoryCheck | None = None,
) -> List[Collection]:
    """Return directory-backed collections declared in a config source.

    File-based collections are skipped, as are names with no matching
    directory under ``content_dir``.

    Args:
        source: Raw config source text.
        content_dir: Resolved content directory of the project.
        directory_exists: Predicate deciding whether a collection directory exists.

    Returns:
        List[Collection]: Discovered collections with heuristic schemas attached.
    """
    is_dir = directory_exists or Path.is_dir
    clean_source = strip_comments(source)

    collections_block = extract_collections_block(clean_source)
    if collections_block is None:
        LOGGER.debug("No collections block found in config source")
        return []

    collections: List[Collection] = []
    for name, from_name_list in iter_collection_names(collections_block):
        if is_file_based_collection(clean_source, name):
            LOGGER.debug("Skipping file-based collection %s", name)
            continue

        collection_path = content_dir / name
        if not is_dir(collection_path):
            LOGGER.debug("Skipping collection %s; %s is not a directory", name, collection_path)
            continue

        schema_source = clean_source if from_name_list else collections_block
        collections.append(
            Collection(
                name=name,
                path=collection_path,
                heuristic_schema=extract_collection_schema(schema_source, name),
            )
        )

    LOGGER.debug("Discovered %d collection(s) from config source", len(collections))
    return collections


def find_file_based_collections(source: str) -> Dict[str, Optional[str]]:
    """Map each file-based collection declared in a config source to its data file.

    The value is None when the `file(...)` argument is not a string literal.
    """
    clean_source = strip_comments(source)
    collections_block = extract_collections_block(clean_source)
    if collections_block is None:
        return {}

    found: Dict[str, Optional[str]] = {}
    for name, _ in iter_collection_names(collections_block):
        if is_file_based_collection(clean_source, name):
            found[name] = find_file_loader_path(clean_source, name)
    return found


__all__ = [
    "extract_collection_schema",
    "find_collection_block",
    "find_file_based_collections",
    "find_file_loader_path",
    "find_schema_body",
    "is_file_based_collection",
    "iter_collection_names",
    "parse_collections_from_content",
]
