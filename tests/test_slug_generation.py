from __future__ import annotations

import pytest

from md_directives.slugify import SlugTable, generate_slug, heading_to_title, strip_numbering


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("Hello World", "hello-world"),
        ("## Hello World", "hello-world"),
        ("What's New?", "whats-new"),
        ("Café", "caf"),
        ("snake_case and kebab-case", "snake_case-and-kebab-case"),
        ("  Padded  ", "padded"),
        ("Two  Spaces", "two--spaces"),
    ],
)
def test_generate_slug_expected_examples(title: str, expected: str):
    """Validates slug generation for representative examples."""
    assert generate_slug(title, SlugTable()) == expected


def test_generate_slug_strips_numbering_by_default():
    assert generate_slug("1.2. Usage", SlugTable()) == "usage"


def test_generate_slug_keeps_numbering_digits_when_asked():
    assert generate_slug("1.2. Usage", SlugTable(), strip_numbers=False) == "12-usage"


def test_generate_slug_disambiguates_duplicates():
    table = SlugTable()
    assert [generate_slug("Intro", table) for _ in range(3)] == ["intro", "intro-1", "intro-2"]


def test_generate_slug_avoids_collision_with_disambiguated_slug():
    table = SlugTable()
    slugs = [generate_slug(title, table) for title in ("A", "A", "A 1")]
    assert slugs == ["a", "a-1", "a-1-1"]
    assert len(set(slugs)) == 3


def test_generate_slug_empty_title_yields_empty_then_suffixes():
    table = SlugTable()
    assert generate_slug("!!!", table) == ""
    assert generate_slug("???", table) == "-1"


def test_generate_slug_lowercases_ascii_only():
    assert generate_slug("ÀB", SlugTable()) == "b"


def test_slug_table_tracks_claimed_slugs():
    table = SlugTable()
    table.claim("intro")
    table.claim("intro")
    assert "intro" in table
    assert "intro-1" in table
    assert len(table) == 2


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1. Intro", "Intro"),
        ("1.2.3.   Deep", "Deep"),
        ("1.2 Missing dot", "1.2 Missing dot"),
        ("Intro", "Intro"),
    ],
)
def test_strip_numbering(text: str, expected: str):
    assert strip_numbering(text) == expected


def test_heading_to_title_strips_markers_and_numbering():
    assert heading_to_title("  ## 1.2. Usage  ") == "Usage"
