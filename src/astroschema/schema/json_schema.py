"""Interpretation of generated collection JSON Schema documents."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import JsonSchemaError
from .labels import camel_case_to_title_case
from .models import FieldConstraints, FieldType, SchemaDefinition, SchemaField

LOGGER = logging.getLogger(__name__)

_DATE_FORMATS = frozenset({"date-time", "date", "unix-time"})
_CONSTRAINT_FORMATS = frozenset({"email", "uri", "date-time", "date"})
_PRIMITIVE_TYPES = {
    "string": FieldType.STRING,
    "integer": FieldType.INTEGER,
    "number": FieldType.NUMBER,
    "boolean": FieldType.BOOLEAN,
}
_STRING_FORMATS = {
    "email": FieldType.EMAIL,
    "uri": FieldType.URL,
}


class JsonSchemaDocument(BaseModel):
    """Envelope of a generated collection schema: a root `$ref` plus definitions."""

    model_config = ConfigDict(populate_by_name=True)

    ref: str = Field(alias="$ref")
    definitions: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


@dataclass(frozen=True)
class FieldTypeInfo:
    """Classification result for a single JSON Schema property."""

    field_type: FieldType
    sub_type: Optional[FieldType] = None
    enum_values: Optional[List[str]] = None
    reference_collection: Optional[str] = None
    array_reference_collection: Optional[str] = None


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _enum_values(values: List[Any]) -> List[str]:
    return [value if isinstance(value, str) else json.dumps(value) for value in values]


def _format(schema: Mapping[str, Any]) -> Optional[str]:
    value = schema.get("format")
    return value if isinstance(value, str) else None


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _count(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def parse_json_schema(collection_name: str, text: str) -> SchemaDefinition:
    """Parse a generated JSON Schema into a schema definition.

    Args:
        collection_name: Name of the collection the schema describes.
        text: Raw JSON Schema document.

    Returns:
        SchemaDefinition: Flattened field list.

    Raises:
        JsonSchemaError: If the document is malformed, its `$ref` target is
            missing, or the entry schema has no properties.
    """
    LOGGER.debug("Parsing JSON schema for collection %s", collection_name)
    try:
        document = JsonSchemaDocument.model_validate_json(text)
    except ValidationError as exc:
        raise JsonSchemaError(f"Failed to parse JSON schema: {exc}") from exc

    definition_name = document.ref.replace("#/definitions/", "")
    definition = document.definitions.get(definition_name)
    if definition is None:
        raise JsonSchemaError(f"Collection definition not found: {collection_name}")

    entry_schema = definition.get("additionalProperties")
    if isinstance(entry_schema, Mapping):
        LOGGER.debug("File-based collection schema detected for %s", collection_name)
        return parse_entry_schema(collection_name, entry_schema)

    return parse_entry_schema(collection_name, definition)


def parse_entry_schema(collection_name: str, entry_schema: Mapping[str, Any]) -> SchemaDefinition:
    """Flatten the properties of a single entry schema.

    Raises:
        JsonSchemaError: If the entry schema has no properties.
    """
    properties = entry_schema.get("properties")
    if not isinstance(properties, Mapping):
        raise JsonSchemaError(f"No properties found for collection {collection_name}")

    required = set(_string_list(entry_schema.get("required")))
    fields: List[SchemaField] = []
    for field_name, field_schema in properties.items():
        if field_name == "$schema":
            continue
        fields.extend(parse_field(field_name, field_schema, field_name in required))

    LOGGER.debug("Extracted %d field(s) for collection %s", len(fields), collection_name)
    return SchemaDefinition(collection_name=collection_name, fields=fields)


def parse_field(
    field_name: str,
    field_schema: Any,
    is_required: bool,
    parent_path: str = "",
) -> List[SchemaField]:
    """Convert one property into fields; nested objects yield one field per leaf.

    Args:
        field_name: Property name.
        field_schema: Property schema.
        is_required: Whether the enclosing schema lists the property as required.
        parent_path: Dotted path of the enclosing object, empty at the root.

    Returns:
        List[SchemaField]: A single field, or the flattened fields of a nested object.
    """
    schema = _as_mapping(field_schema)
    full_path = f"{parent_path}.{field_name}" if parent_path else field_name
    info = determine_field_type(schema)

    properties = schema.get("properties")
    if (
        info.field_type is FieldType.UNKNOWN
        and schema.get("type") == "object"
        and isinstance(properties, Mapping)
    ):
        nested_required = set(_string_list(schema.get("required")))
        nested: List[SchemaField] = []
        for nested_name, nested_schema in properties.items():
            nested.extend(
                parse_field(nested_name, nested_schema, nested_name in nested_required, full_path)
            )
        return nested

    description = schema.get("description")
    if not isinstance(description, str):
        description = schema.get("markdownDescription")
    default = schema.get("default")

    return [
        SchemaField(
            name=full_path,
            label=camel_case_to_title_case(field_name),
            field_type=info.field_type,
            sub_type=info.sub_type,
            required=is_required and default is None,
            constraints=extract_constraints(schema, info.field_type),
            description=description if isinstance(description, str) else None,
            default=default,
            enum_values=info.enum_values,
            reference_collection=info.reference_collection,
            array_reference_collection=info.array_reference_collection,
            is_nested=True if parent_path else None,
            parent_path=parent_path or None,
        )
    ]


def determine_field_type(schema: Mapping[str, Any]) -> FieldTypeInfo:
    """Classify a JSON Schema property into the field-type taxonomy."""
    any_of = schema.get("anyOf")
    if isinstance(any_of, list):
        return _classify_any_of([_as_mapping(branch) for branch in any_of])

    enum = schema.get("enum")
    if isinstance(enum, list):
        return FieldTypeInfo(FieldType.ENUM, enum_values=_enum_values(enum))

    if schema.get("const") is not None:
        return FieldTypeInfo(FieldType.STRING)

    schema_type = schema.get("type")
    if schema_type == "array":
        return _classify_array(schema)
    if schema_type == "object":
        return _classify_object(schema)
    if isinstance(schema_type, str):
        string_format = _format(schema)
        if schema_type == "string" and string_format in _STRING_FORMATS:
            return FieldTypeInfo(_STRING_FORMATS[string_format])
        return FieldTypeInfo(_PRIMITIVE_TYPES.get(schema_type, FieldType.UNKNOWN))
    if isinstance(schema_type, list):
        return FieldTypeInfo(FieldType.STRING)

    return FieldTypeInfo(FieldType.UNKNOWN)


def _classify_array(schema: Mapping[str, Any]) -> FieldTypeInfo:
    items = schema.get("items")
    if isinstance(items, list):
        return FieldTypeInfo(FieldType.STRING)
    if isinstance(items, Mapping):
        item_info = determine_field_type(items)
        return FieldTypeInfo(FieldType.ARRAY, sub_type=item_info.field_type)
    return FieldTypeInfo(FieldType.ARRAY, sub_type=FieldType.STRING)


def _classify_object(schema: Mapping[str, Any]) -> FieldTypeInfo:
    # additionalProperties: false marks a strict object, not a record
    additional = schema.get("additionalProperties")
    if additional is True or isinstance(additional, Mapping):
        return FieldTypeInfo(FieldType.STRING)
    return FieldTypeInfo(FieldType.UNKNOWN)


def _classify_any_of(branches: List[Mapping[str, Any]]) -> FieldTypeInfo:
    if any(_format(branch) in _DATE_FORMATS for branch in branches):
        return FieldTypeInfo(FieldType.DATE)
    if any(_is_reference_branch(branch) for branch in branches):
        return FieldTypeInfo(FieldType.REFERENCE)

    primitive = _nullable_primitive(branches)
    if primitive is not None:
        return FieldTypeInfo(primitive)

    array_info = _nullable_array(branches)
    if array_info is not None:
        return array_info

    enum_info = _nullable_enum(branches)
    if enum_info is not None:
        return enum_info

    return FieldTypeInfo(FieldType.STRING)


def _is_reference_branch(branch: Mapping[str, Any]) -> bool:
    if branch.get("type") != "object":
        return False
    properties = branch.get("properties")
    if not isinstance(properties, Mapping):
        return False
    return "collection" in properties and ("id" in properties or "slug" in properties)


def _nullable_primitive(branches: List[Mapping[str, Any]]) -> Optional[FieldType]:
    if len(branches) != 2:
        return None

    primitive: Optional[FieldType] = None
    has_null = False
    for branch in branches:
        branch_type = branch.get("type")
        if branch_type == "null":
            has_null = True
        elif branch_type in ("number", "integer", "boolean"):
            primitive = _PRIMITIVE_TYPES[branch_type]
        elif branch_type == "string":
            if branch.get("enum") is not None:
                return None
            primitive = FieldType.STRING
        else:
            return None

    return primitive if has_null else None


def _nullable_array(branches: List[Mapping[str, Any]]) -> Optional[FieldTypeInfo]:
    if len(branches) != 2:
        return None

    array_branch: Optional[Mapping[str, Any]] = None
    has_null = False
    for branch in branches:
        branch_type = branch.get("type")
        if branch_type == "null":
            has_null = True
        elif branch_type == "array":
            array_branch = branch
        else:
            return None

    if has_null and array_branch is not None:
        return _classify_array(array_branch)
    return None


def _nullable_enum(branches: List[Mapping[str, Any]]) -> Optional[FieldTypeInfo]:
    if len(branches) != 2:
        return None

    enum_values: Optional[List[str]] = None
    has_null = False
    for branch in branches:
        branch_type = branch.get("type")
        if branch_type == "null":
            has_null = True
        elif branch_type == "string" and isinstance(branch.get("enum"), list):
            enum_values = _enum_values(branch["enum"])

    if has_null and enum_values is not None:
        return FieldTypeInfo(FieldType.ENUM, enum_values=enum_values)
    return None


def extract_constraints(
    schema: Mapping[str, Any], field_type: FieldType
) -> Optional[FieldConstraints]:
    """Collect validation constraints for a property.

    Exclusive bounds are converted to inclusive ones by one unit; for arrays the
    item-count bounds are reported as length constraints.

    Args:
        schema: Property schema.
        field_type: Classified type of the property.

    Returns:
        Optional[FieldConstraints]: Constraints, or None when none are present.
    """
    values: Dict[str, Any] = {}

    minimum = _number(schema.get("minimum"))
    if minimum is not None:
        values["min"] = minimum
    maximum = _number(schema.get("maximum"))
    if maximum is not None:
        values["max"] = maximum
    exclusive_minimum = _number(schema.get("exclusiveMinimum"))
    if exclusive_minimum is not None:
        values["min"] = exclusive_minimum + 1
    exclusive_maximum = _number(schema.get("exclusiveMaximum"))
    if exclusive_maximum is not None:
        values["max"] = exclusive_maximum - 1

    min_length = _count(schema.get("minLength"))
    if min_length is not None:
        values["min_length"] = min_length
    max_length = _count(schema.get("maxLength"))
    if max_length is not None:
        values["max_length"] = max_length
    pattern = schema.get("pattern")
    if isinstance(pattern, str):
        values["pattern"] = pattern

    schema_format = _format(schema)
    if schema_format in _CONSTRAINT_FORMATS:
        values["format"] = schema_format

    if field_type is FieldType.ARRAY:
        min_items = _count(schema.get("minItems"))
        if min_items is not None:
            values["min_length"] = min_items
        max_items = _count(schema.get("maxItems"))
        if max_items is not None:
            values["max_length"] = max_items

    if not values:
        return None
    return FieldConstraints(**values)


__all__ = [
    "FieldTypeInfo",
    "JsonSchemaDocument",
    "determine_field_type",
    "extract_constraints",
    "parse_entry_schema",
    "parse_field",
    "parse_json_schema",
]
