"""Human readable labels for field names."""

from __future__ import annotations


def camel_case_to_title_case(name: str) -> str:
    """Convert a camelCase identifier into Title Case.

    `helloWorld` becomes `Hello World`; runs of capitals such as `SEO` are kept.
    """
    result: list[str] = []
    previous_was_lower = False

    for index, char in enumerate(name):
        if index == 0:
            result.append(char.upper() if char.isascii() else char)
            previous_was_lower = char.islower()
        elif char.isupper() and previous_was_lower:
            result.append(" ")
            result.append(char)
            previous_was_lower = False
        else:
            result.append(char)
            previous_was_lower = char.islower()

    return "".join(result)


__all__ = ["camel_case_to_title_case"]
