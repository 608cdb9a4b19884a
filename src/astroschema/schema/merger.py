"""Merge generated JSON Schema and heuristic findings into one schema definition."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Set, Tuple

from pydantic import ValidationError

from .errors import HeuristicSchemaError, JsonSchemaError, SchemaUnavailableError
from .json_schema import parse_json_schema
from .labels import camel_case_to_title_case
from .models import (
    FieldConstraints,
    FieldType,
    HeuristicField,
    HeuristicSchema,
    HeuristicType,
    SchemaDefinition,
    SchemaField,
)

LOGGER = logging.getLogger(__name__)

_HEURISTIC_FIELD_TYPES = {
    HeuristicType.STRING: FieldType.STRING,
    HeuristicType.NUMBER: FieldType.NUMBER,
    HeuristicType.BOOLEAN: FieldType.BOOLEAN,
    HeuristicType.DATE: FieldType.DATE,
    HeuristicType.ARRAY: FieldType.ARRAY,
    HeuristicType.ENUM: FieldType.ENUM,
    HeuristicType.REFERENCE: FieldType.REFERENCE,
    HeuristicType.IMAGE: FieldType.IMAGE,
}


def create_complete_schema(
    collection_name: str,
    json_schema: Optional[str],
    heuristic_schema: Optional[str],
) -> SchemaDefinition:
    """Build the final schema definition for a collection.

    The JSON Schema supplies structure, required-ness and constraints; the
    heuristic schema supplies reference targets and image fields. When the JSON
    Schema is missing or unusable the heuristic schema is used on its own.

    Args:
        collection_name: Name of the collection.
        json_schema: Raw generated JSON Schema text, if any.
        heuristic_schema: Serialized heuristic schema, if any.

    Returns:
        SchemaDefinition: Merged schema definition.

    Raises:
        SchemaUnavailableError: If neither source yields a schema.
    """
    LOGGER.debug(
        "Creating complete schema for %s (json: %s, heuristic: %s)",
        collection_name,
        json_schema is not None,
        heuristic_schema is not None,
    )

    if json_schema is not None:
        try:
            schema = parse_json_schema(collection_name, json_schema)
        except JsonSchemaError as exc:
            LOGGER.warning("Failed to parse JSON schema for %s: %s", collection_name, exc)
        else:
            if heuristic_schema is not None:
                try:
                    schema = enhance_schema(schema, heuristic_schema)
                except HeuristicSchemaError as exc:
                    LOGGER.warning(
                        "Failed to enhance schema with heuristic data for %s: %s",
                        collection_name,
                        exc,
                    )
            return schema

    if heuristic_schema is not None:
        LOGGER.debug("Falling back to heuristic-only schema for %s", collection_name)
        try:
            return parse_heuristic_schema(collection_name, heuristic_schema)
        except HeuristicSchemaError as exc:
            raise SchemaUnavailableError(
                f"No schema available for collection {collection_name}: {exc}"
            ) from exc

    raise SchemaUnavailableError(f"No schema available for collection {collection_name}")


def load_heuristic_schema(text: str) -> HeuristicSchema:
    """Decode serialized heuristic schema text.

    Raises:
        HeuristicSchemaError: If the text is not a valid heuristic schema.
    """
    try:
        return HeuristicSchema.model_validate_json(text)
    except ValidationError as exc:
        raise HeuristicSchemaError(f"Failed to parse heuristic schema: {exc}") from exc


def _collect_enhancements(heuristic: HeuristicSchema) -> Tuple[Dict[str, str], Set[str]]:
    references: Dict[str, str] = {}
    images: Set[str] = set()
    for field in heuristic.fields:
        if field.referenced_collection is not None:
            references[field.name] = field.referenced_collection
        elif field.array_reference_collection is not None:
            references[field.name] = field.array_reference_collection

        if field.field_type is HeuristicType.IMAGE or (
            field.field_type is HeuristicType.ARRAY and field.array_type is HeuristicType.IMAGE
        ):
            images.add(field.name)
    return references, images


def _enhance_field(field: SchemaField, references: Dict[str, str], images: Set[str]) -> SchemaField:
    updates: Dict[str, Any] = {}

    collection = references.get(field.name)
    if collection is not None:
        if field.field_type is FieldType.REFERENCE:
            updates["reference_collection"] = collection
        elif field.field_type is FieldType.ARRAY and field.sub_type is FieldType.REFERENCE:
            updates["array_reference_collection"] = collection

    if field.name in images:
        if field.field_type is FieldType.STRING:
            updates["field_type"] = FieldType.IMAGE
        elif field.field_type is FieldType.ARRAY and field.sub_type is FieldType.STRING:
            updates["sub_type"] = FieldType.IMAGE

    return field.model_copy(update=updates) if updates else field


def enhance_schema(schema: SchemaDefinition, heuristic_schema: str) -> SchemaDefinition:
    """Overlay reference targets and image types onto a JSON-Schema-derived definition.

    Args:
        schema: Definition parsed from the generated JSON Schema.
        heuristic_schema: Serialized heuristic schema.

    Returns:
        SchemaDefinition: New definition with matching fields upgraded.

    Raises:
        HeuristicSchemaError: If the heuristic schema cannot be decoded.
    """
    references, images = _collect_enhancements(load_heuristic_schema(heuristic_schema))
    fields = [_enhance_field(field, references, images) for field in schema.fields]
    return schema.model_copy(update={"fields": fields})


def _heuristic_constraints(raw: Mapping[str, Any]) -> Optional[FieldConstraints]:
    def number(key: str) -> Optional[float]:
        value = raw.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)

    def count(key: str) -> Optional[int]:
        value = raw.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            return None
        return value

    schema_format: Optional[str] = None
    if raw.get("email") is True:
        schema_format = "email"
    elif raw.get("url") is True:
        schema_format = "uri"

    pattern = raw.get("regex")
    constraints = FieldConstraints(
        min=number("min"),
        max=number("max"),
        min_length=count("minLength"),
        max_length=count("maxLength"),
        pattern=pattern if isinstance(pattern, str) else None,
        format=schema_format,
    )
    return None if constraints.is_empty() else constraints


def _heuristic_field(field: HeuristicField) -> SchemaField:
    sub_type = None
    if field.array_type is not None:
        sub_type = _HEURISTIC_FIELD_TYPES.get(field.array_type, FieldType.UNKNOWN)

    return SchemaField(
        name=field.name,
        label=camel_case_to_title_case(field.name),
        field_type=_HEURISTIC_FIELD_TYPES.get(field.field_type, FieldType.UNKNOWN),
        sub_type=sub_type,
        required=not field.optional,
        constraints=_heuristic_constraints(field.constraints or {}),
        default=field.default,
        enum_values=field.options,
        reference_collection=field.referenced_collection,
        array_reference_collection=field.array_reference_collection,
    )


def parse_heuristic_schema(collection_name: str, heuristic_schema: str) -> SchemaDefinition:
    """Interpret a heuristic schema as the complete field list.

    Raises:
        HeuristicSchemaError: If the heuristic schema cannot be decoded.
    """
    heuristic = load_heuristic_schema(heuristic_schema)
    return SchemaDefinition(
        collection_name=collection_name,
        fields=[_heuristic_field(field) for field in heuristic.fields],
    )


__all__ = [
    "create_complete_schema",
    "enhance_schema",
    "load_heuristic_schema",
    "parse_heuristic_schema",
]
