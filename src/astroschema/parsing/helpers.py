"""Detection of `image()` and `reference()` helper calls in schema bodies."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

_IMAGE_RE = re.compile(r"image\s*\(\s*\)")
_REFERENCE_RE = re.compile(r"reference\s*\(\s*['\"]([^'\"]+)['\"]\s*\)")


class HelperKind(str, Enum):
    """Schema-builder helpers that a generated JSON Schema cannot express."""

    IMAGE = "image"
    REFERENCE = "reference"


@dataclass(frozen=True)
class HelperMatch:
    """A helper call found in a schema body.

    Attributes:
        kind: Which helper was called.
        position: Offset of the call within the schema body.
        collection_name: Target collection for `reference()` calls.
    """

    kind: HelperKind
    position: int
    collection_name: Optional[str] = None


def find_helper_calls(schema_text: str) -> List[HelperMatch]:
    """Return every helper call in ``schema_text`` ordered by position.

    Args:
        schema_text: Body of a `z.object({...})` schema.

    Returns:
        List[HelperMatch]: Helper calls in source order.
    """
    matches = [
        HelperMatch(kind=HelperKind.IMAGE, position=match.start())
        for match in _IMAGE_RE.finditer(schema_text)
    ]
    matches.extend(
        HelperMatch(
            kind=HelperKind.REFERENCE,
            position=match.start(),
            collection_name=match.group(1),
        )
        for match in _REFERENCE_RE.finditer(schema_text)
    )
    matches.sort(key=lambda helper: helper.position)
    return matches


__all__ = ["HelperKind", "HelperMatch", "find_helper_calls"]
