"""Locate the `collections` block inside a content config source."""

from __future__ import annotations

import logging
import re
from typing import Optional

from .delimiters import find_matching_close
from .errors import UnclosedDelimiterError

LOGGER = logging.getLogger(__name__)

_EXPORT_COLLECTIONS_RE = re.compile(r"export\s+const\s+collections\s*=\s*\{")
_LEGACY_COLLECTIONS_RE = re.compile(r"collections\s*:\s*\{")


def extract_collections_block(source: str) -> Optional[str]:
    """Return the brace-delimited `collections` object literal, if present.

    `export const collections = { ... }` is tried first, then the legacy
    `collections: { ... }` entry of a `defineConfig` call.

    Args:
        source: Comment-stripped config source.

    Returns:
        Optional[str]: Block text including its braces, or None when no shape matches.
    """
    for shape, pattern in (
        ("export", _EXPORT_COLLECTIONS_RE),
        ("legacy", _LEGACY_COLLECTIONS_RE),
    ):
        match = pattern.search(source)
        if match is None:
            continue
        start = match.end() - 1
        try:
            end = find_matching_close(source, start, "{", "}")
        except UnclosedDelimiterError as exc:
            LOGGER.debug("Ignoring %s collections block: %s", shape, exc)
            continue
        LOGGER.debug("Located %s collections block at offset %d", shape, start)
        return source[start:end]

    return None


__all__ = ["extract_collections_block"]
