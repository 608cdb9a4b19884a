"""Schema models, JSON Schema interpretation, and schema merging."""

from .errors import (
    HeuristicSchemaError,
    JsonSchemaError,
    SchemaError,
    SchemaUnavailableError,
)
from .json_schema import determine_field_type, extract_constraints, parse_json_schema
from .labels import camel_case_to_title_case
from .merger import (
    create_complete_schema,
    enhance_schema,
    load_heuristic_schema,
    parse_heuristic_schema,
)
from .models import (
    Collection,
    CollectionEntry,
    FieldConstraints,
    FieldType,
    HeuristicField,
    HeuristicSchema,
    HeuristicType,
    SchemaDefinition,
    SchemaField,
)

__all__ = [
    "Collection",
    "CollectionEntry",
    "FieldConstraints",
    "FieldType",
    "HeuristicField",
    "HeuristicSchema",
    "HeuristicType",
    "SchemaDefinition",
    "SchemaField",
    "camel_case_to_title_case",
    "create_complete_schema",
    "determine_field_type",
    "enhance_schema",
    "extract_constraints",
    "load_heuristic_schema",
    "parse_heuristic_schema",
    "parse_json_schema",
    "SchemaError",
    "JsonSchemaError",
    "HeuristicSchemaError",
    "SchemaUnavailableError",
]
