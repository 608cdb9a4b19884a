"""Errors raised while scanning content-collection config sources."""


class ParseError(Exception):
    """Base exception for config-source scanning."""


class UnclosedDelimiterError(ParseError):
    """Raised when input ends before a delimiter span is closed."""


class FieldPathError(ParseError):
    """Raised when a helper call cannot be attributed to a field."""
