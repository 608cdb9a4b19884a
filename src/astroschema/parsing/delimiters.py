"""Balanced delimiter matching."""

from __future__ import annotations

from .errors import UnclosedDelimiterError


def find_matching_close(text: str, start: int, open_char: str = "{", close_char: str = "}") -> int:
    """Return the offset just past the delimiter closing the one at ``start``.

    Depth is counted naively: delimiters inside string literals are counted
    like any other, so callers strip comments first and accept the approximation.

    Args:
        text: Text to scan.
        start: Offset of the opening delimiter.
        open_char: Opening delimiter character.
        close_char: Closing delimiter character.

    Returns:
        int: Offset one past the matching closing delimiter.

    Raises:
        UnclosedDelimiterError: If the text ends before depth returns to zero.
    """
    depth = 0
    for index in range(start, len(text)):
        char = text[index]
        if char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return index + 1

    raise UnclosedDelimiterError(
        f"Unclosed delimiter: expected closing '{close_char}' but reached end of content"
    )


__all__ = ["find_matching_close"]
