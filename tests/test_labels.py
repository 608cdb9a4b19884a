"""Tests for field label generation."""

import pytest

from astroschema.schema import camel_case_to_title_case


@pytest.mark.parametrize(
    ("name", "label"),
    [
        ("helloWorld", "Hello World"),
        ("pubDate", "Pub Date"),
        ("SEO", "SEO"),
        ("title", "Title"),
        ("ogImageURL", "Og Image URL"),
        ("metadata.authorName", "Metadata.author Name"),
        ("", ""),
    ],
)
def test_camel_case_to_title_case(name: str, label: str) -> None:
    assert camel_case_to_title_case(name) == label
