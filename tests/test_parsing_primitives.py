"""Tests for comment stripping, delimiter matching, and collections block lookup."""

import pytest

from astroschema.parsing import (
    UnclosedDelimiterError,
    extract_collections_block,
    find_matching_close,
    strip_comments,
)


def test_strip_comments_removes_line_comments_but_keeps_newline() -> None:
    source = "const a = 1; // first\nconst b = 2;"

    assert strip_comments(source) == "const a = 1; \nconst b = 2;"


def test_strip_comments_keeps_block_comment_newlines() -> None:
    source = "a /* one\ntwo\n*/ b"

    assert strip_comments(source) == "a \n\n b"


def test_strip_comments_leaves_string_literals_intact() -> None:
    source = "const url = 'https://example.com/*path*/'; const q = \"say \\\"//hi\\\"\";"

    assert strip_comments(source) == source


def test_strip_comments_handles_comment_at_end_of_input() -> None:
    assert strip_comments("value // trailing") == "value "
    assert strip_comments("value /* never closed") == "value "


def test_find_matching_close_returns_offset_past_closing_brace() -> None:
    assert find_matching_close("{a{b}c}", 0) == 7
    assert find_matching_close("x {a} y", 2) == 5


def test_find_matching_close_supports_other_delimiters() -> None:
    text = "defineCollection({ schema: z.object({}) }) trailing"

    end = find_matching_close(text, text.index("("), "(", ")")

    assert text[:end] == "defineCollection({ schema: z.object({}) })"


def test_find_matching_close_raises_for_unclosed_input() -> None:
    with pytest.raises(UnclosedDelimiterError) as excinfo:
        find_matching_close("{ { }", 0)

    assert "Unclosed delimiter" in str(excinfo.value)


def test_extract_collections_block_prefers_export_form() -> None:
    source = (
        "export default defineConfig({ collections: { legacy } });\n"
        "export const collections = { blog, notes };\n"
    )

    assert extract_collections_block(source) == "{ blog, notes }"


def test_extract_collections_block_falls_back_to_legacy_form() -> None:
    source = "export default defineConfig({\n  collections: { blog: defineCollection({}) },\n});"

    assert extract_collections_block(source) == "{ blog: defineCollection({}) }"


def test_extract_collections_block_skips_unclosed_export_block() -> None:
    source = "defineConfig({ collections: { docs } });\nexport const collections = { broken"

    assert extract_collections_block(source) == "{ docs }"


def test_extract_collections_block_returns_none_without_collections() -> None:
    assert extract_collections_block("export default {};") is None
