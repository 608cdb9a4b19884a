"""Recover dotted field paths for helper calls by scanning backwards.

The scanners here never recurse on brace depth: each walks the text once with
an explicit depth counter so malformed input cannot blow the stack.
"""

from __future__ import annotations

import re
from typing import List, Optional

from .errors import FieldPathError

_ARRAY_CALL_RE = re.compile(r"z\.array\s*\(")


def _is_identifier_char(char: str) -> bool:
    return char.isalnum() or char in ("_", "$")


def find_field_name_backwards(text: str, start: int) -> Optional[str]:
    """Return the identifier preceding the nearest colon at or before ``start``.

    Only the nearest colon is considered. When no identifier sits directly in
    front of it (a quoted key, for instance) the result is None.

    Args:
        text: Schema body text.
        start: Offset to start scanning from.

    Returns:
        Optional[str]: Field name, or None when no ``name:`` precedes ``start``.
    """
    position = min(start, len(text) - 1)
    while position > 0:
        if text[position] == ":":
            name_end = position
            while name_end > 0 and text[name_end - 1].isspace():
                name_end -= 1
            name_start = name_end
            while name_start > 0 and _is_identifier_char(text[name_start - 1]):
                name_start -= 1
            if name_start < name_end:
                return text[name_start:name_end]
            return None
        position -= 1
    return None


def build_parent_path(text: str, start: int) -> List[str]:
    """Return enclosing object field names, innermost first.

    Walking backwards, every `{` that closes a level we have not entered marks
    an enclosing object literal; the field name in front of it becomes the next
    path segment. The walk stops at the first such brace with no field name,
    which is the schema root.
    """
    segments: List[str] = []
    depth = 0
    position = start

    while position > 0:
        position -= 1
        char = text[position]
        if char == "}":
            depth += 1
        elif char == "{":
            depth -= 1
            if depth < 0:
                parent = find_field_name_backwards(text, position)
                if parent is None:
                    break
                if not segments or segments[-1] != parent:
                    segments.append(parent)
                depth = 0

    return segments


def resolve_field_path(text: str, position: int) -> str:
    """Return the dotted path of the field a helper call at ``position`` belongs to.

    Args:
        text: Schema body text.
        position: Offset of the helper call.

    Returns:
        str: Dotted path such as ``metadata.author.avatar``.

    Raises:
        FieldPathError: If no field name precedes the helper call.
    """
    field_name = find_field_name_backwards(text, position)
    if field_name is None:
        raise FieldPathError(f"Could not find field name for helper at position {position}")

    components = [field_name, *build_parent_path(text, position)]
    components.reverse()
    return ".".join(components)


def is_inside_array(text: str, position: int) -> bool:
    """Return True when a `z.array(` call sits between the field colon and the helper."""
    scan = min(position, len(text) - 1)
    while scan > 0:
        if text[scan] == ":":
            return _ARRAY_CALL_RE.search(text, scan, position) is not None
        scan -= 1
    return False


__all__ = [
    "build_parent_path",
    "find_field_name_backwards",
    "is_inside_array",
    "resolve_field_path",
]
