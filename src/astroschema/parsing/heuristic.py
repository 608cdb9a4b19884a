"""Assemble helper findings into a heuristic schema."""

from __future__ import annotations

import logging
from typing import List, Optional

from astroschema.schema.models import HeuristicField, HeuristicSchema, HeuristicType

from .errors import FieldPathError
from .helpers import HelperKind, HelperMatch, find_helper_calls
from .paths import is_inside_array, resolve_field_path

LOGGER = logging.getLogger(__name__)


def _build_field(helper: HelperMatch, field_path: str, in_array: bool) -> HeuristicField:
    if helper.kind is HelperKind.IMAGE:
        if in_array:
            return HeuristicField(
                name=field_path, field_type=HeuristicType.ARRAY, array_type=HeuristicType.IMAGE
            )
        return HeuristicField(name=field_path, field_type=HeuristicType.IMAGE)

    collection = helper.collection_name or ""
    if in_array:
        return HeuristicField(
            name=field_path,
            field_type=HeuristicType.ARRAY,
            array_type=HeuristicType.REFERENCE,
            array_reference_collection=collection,
        )
    return HeuristicField(
        name=field_path,
        field_type=HeuristicType.REFERENCE,
        referenced_collection=collection,
    )


def build_heuristic_schema(schema_text: str) -> Optional[HeuristicSchema]:
    """Build a heuristic schema from the helper calls in a schema body.

    Helpers whose field cannot be determined are skipped; the remaining ones
    are still reported.

    Args:
        schema_text: Body of a `z.object({...})` schema.

    Returns:
        Optional[HeuristicSchema]: Schema describing image and reference fields,
        or None when nothing could be extracted.
    """
    helpers = find_helper_calls(schema_text)
    if not helpers:
        return None

    fields: List[HeuristicField] = []
    for helper in helpers:
        try:
            field_path = resolve_field_path(schema_text, helper.position)
        except FieldPathError as exc:
            LOGGER.debug("Skipping %s helper: %s", helper.kind.value, exc)
            continue
        in_array = is_inside_array(schema_text, helper.position)
        fields.append(_build_field(helper, field_path, in_array))

    if not fields:
        return None

    LOGGER.debug("Extracted %d helper field(s) from schema body", len(fields))
    return HeuristicSchema(fields=fields)


def extract_special_fields(schema_text: str) -> Optional[str]:
    """Return the serialized heuristic schema for ``schema_text``, if any."""
    schema = build_heuristic_schema(schema_text)
    return schema.to_json() if schema is not None else None


__all__ = ["build_heuristic_schema", "extract_special_fields"]
