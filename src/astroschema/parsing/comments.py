"""Comment removal for content-collection config sources."""

from __future__ import annotations


def strip_comments(source: str) -> str:
    """Remove line and block comments while leaving string literals intact.

    Newlines inside block comments are kept so line structure survives. Only
    single- and double-quoted strings are recognized; regular-expression and
    template literals are not, so their contents may be mis-stripped.

    Args:
        source: Raw config source text.

    Returns:
        str: Source text without comments.
    """
    result: list[str] = []
    in_string = False
    quote = '"'
    in_block_comment = False
    escape_next = False
    index = 0
    length = len(source)

    while index < length:
        char = source[index]
        following = source[index + 1] if index + 1 < length else ""

        if escape_next:
            result.append(char)
            escape_next = False
            index += 1
            continue

        if in_string:
            if char == "\\":
                escape_next = True
            elif char == quote:
                in_string = False
            result.append(char)
            index += 1
            continue

        if in_block_comment:
            if char == "*" and following == "/":
                in_block_comment = False
                index += 2
                continue
            if char == "\n":
                result.append(char)
            index += 1
            continue

        if char in ("'", '"'):
            in_string = True
            quote = char
            result.append(char)
        elif char == "/" and following == "/":
            newline = source.find("\n", index + 2)
            if newline == -1:
                break
            index = newline
            continue
        elif char == "/" and following == "*":
            in_block_comment = True
            index += 2
            continue
        else:
            result.append(char)
        index += 1

    return "".join(result)


__all__ = ["strip_comments"]
