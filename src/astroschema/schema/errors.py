"""Schema interpretation errors."""


class SchemaError(Exception):
    """Base exception for schema interpretation and merging."""


class JsonSchemaError(SchemaError):
    """Raised when a generated JSON Schema document cannot be interpreted."""


class HeuristicSchemaError(SchemaError):
    """Raised when heuristic schema text cannot be decoded."""


class SchemaUnavailableError(SchemaError):
    """Raised when no schema source is usable for a collection."""
