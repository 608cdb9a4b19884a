"""Schema data models shared by the parsing and merging pipeline."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class FieldType(str, Enum):
    """Field-type taxonomy understood by the form-rendering layer."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DATE = "date"
    ENUM = "enum"
    REFERENCE = "reference"
    ARRAY = "array"
    IMAGE = "image"
    EMAIL = "email"
    URL = "url"
    UNKNOWN = "unknown"


class HeuristicType(str, Enum):
    """Type tags emitted by the config-source scanner."""

    STRING = "String"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    DATE = "Date"
    ARRAY = "Array"
    ENUM = "Enum"
    REFERENCE = "Reference"
    IMAGE = "Image"
    UNKNOWN = "Unknown"


class SchemaBaseModel(BaseModel):
    """Shared configuration for models serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldConstraints(SchemaBaseModel):
    """Validation constraints attached to a field.

    Attributes:
        min: Inclusive numeric minimum.
        max: Inclusive numeric maximum.
        min_length: Minimum string length (or array item count).
        max_length: Maximum string length (or array item count).
        pattern: Regular expression the value must match.
        format: Recognized format tag (`email`, `uri`, `date-time`, `date`).
    """

    model_config = ConfigDict(frozen=True)

    min: Optional[float] = None
    max: Optional[float] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    format: Optional[str] = None

    def is_empty(self) -> bool:
        """Return True when no constraint value is set."""
        return all(value is None for value in self.model_dump().values())


class SchemaField(SchemaBaseModel):
    """A single (possibly flattened) field of a collection schema.

    Attributes:
        name: Dotted field path, unique within a definition.
        label: Human readable label.
        field_type: Field-type tag.
        sub_type: Item type for array fields.
        required: Whether the editor must demand a value.
        constraints: Validation constraints, absent when none apply.
        description: Field description from the schema source.
        default: Default value from the schema source.
        enum_values: Allowed values for enum fields.
        reference_collection: Target collection of a reference field.
        array_reference_collection: Target collection of an array of references.
        is_nested: Set when the field came from flattening a nested object.
        parent_path: Dotted path of the enclosing object for nested fields.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    field_type: FieldType
    sub_type: Optional[FieldType] = None
    required: bool = False
    constraints: Optional[FieldConstraints] = None
    description: Optional[str] = None
    default: Optional[Any] = None
    enum_values: Optional[List[str]] = None
    reference_collection: Optional[str] = None
    array_reference_collection: Optional[str] = None
    is_nested: Optional[bool] = None
    parent_path: Optional[str] = None


class SchemaDefinition(SchemaBaseModel):
    """Unified field description for one collection."""

    model_config = ConfigDict(frozen=True)

    collection_name: str
    fields: List[SchemaField] = Field(default_factory=list)

    def to_json(self) -> str:
        """Serialize the definition into the stable camelCase JSON shape."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


class HeuristicField(SchemaBaseModel):
    """Field metadata recovered from the config source text.

    Attributes:
        name: Dotted field path.
        field_type: Heuristic type tag.
        array_type: Item type when `field_type` is `Array`.
        referenced_collection: Target collection of a reference helper.
        array_reference_collection: Target collection of an array of references.
        optional: Whether the field may be omitted.
        default: Default value, when known.
        options: Enum options, when known.
        constraints: Loosely typed constraint mapping.
    """

    name: str
    field_type: HeuristicType = Field(alias="type")
    array_type: Optional[HeuristicType] = None
    referenced_collection: Optional[str] = None
    array_reference_collection: Optional[str] = None
    optional: bool = True
    default: Optional[Any] = None
    options: Optional[List[str]] = None
    constraints: Optional[Dict[str, Any]] = Field(default_factory=dict)

    @field_validator("field_type", "array_type", mode="before")
    @classmethod
    def _coerce_unknown_type(cls, value: Any) -> Any:
        if isinstance(value, str) and value not in HeuristicType._value2member_map_:
            return HeuristicType.UNKNOWN
        return value


class HeuristicSchema(SchemaBaseModel):
    """Intermediate schema assembled from helper-call findings."""

    kind: str = Field(default="zod", alias="type")
    fields: List[HeuristicField] = Field(default_factory=list)

    def to_json(self) -> str:
        """Serialize the heuristic schema for storage on a collection."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


class Collection(SchemaBaseModel):
    """A named group of content entries discovered during a project scan.

    Attributes:
        name: Collection name.
        path: Directory holding the collection's documents.
        heuristic_schema: Serialized heuristic schema, when helpers were found.
        json_schema: Raw generated JSON Schema text, when available.
        complete_schema: Serialized merged schema definition.
    """

    name: str
    path: Path
    heuristic_schema: Optional[str] = None
    json_schema: Optional[str] = None
    complete_schema: Optional[str] = None


class CollectionEntry(SchemaBaseModel):
    """One record of a file-based collection, addressable by its identifier.

    Attributes:
        id: Entry identifier taken from `id`, else `slug`.
        collection: Name of the owning collection.
        path: Data file the entry was read from.
        data: The entry object exactly as stored in the data file.
    """

    id: str
    collection: str
    path: Path
    data: Dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "FieldType",
    "HeuristicType",
    "SchemaBaseModel",
    "FieldConstraints",
    "SchemaField",
    "SchemaDefinition",
    "HeuristicField",
    "HeuristicSchema",
    "Collection",
    "CollectionEntry",
]
