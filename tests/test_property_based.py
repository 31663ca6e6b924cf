from __future__ import annotations

import string

from hypothesis import assume, given
from hypothesis import strategies as st

from md_directives.categorizer import CategorizerState, categorize
from md_directives.include import find_include_spans
from md_directives.models import CategoryKind, HeadingRecord
from md_directives.slugify import SlugTable, generate_slug
from md_directives.toc import create_tocs, number_headings

line_alphabet = "".join(ch for ch in string.printable if ch not in "\n\r\x0b\x0c")
lines_strategy = st.lists(st.text(alphabet=line_alphabet, max_size=40), max_size=30)

title_strategy = st.text(
    alphabet=string.ascii_letters + string.digits + " _-",
    min_size=1,
    max_size=32,
).filter(lambda title: title.strip())


@given(st.lists(st.text(), max_size=30))
def test_all_generated_slugs_are_unique(titles):
    """Property: slugs handed out by one table never repeat."""
    table = SlugTable()
    slugs = [generate_slug(title, table) for title in titles]
    assert len(slugs) == len(set(slugs))


@given(st.text())
def test_generate_slug_is_ascii_lowercase_without_spaces(title: str):
    slug = generate_slug(title, SlugTable())
    slug.encode("ascii")
    assert " " not in slug
    assert slug == slug.lower()


@given(lines_strategy)
def test_categorize_yields_one_category_per_line(lines):
    assert len(categorize(lines)) == len(lines)


@given(lines_strategy)
def test_fenced_code_hides_headings_links_and_directives(inner):
    assume(not any(line.startswith("```") for line in inner))
    state = CategorizerState().feed_all(["```", *inner, "```"])

    assert all(category.kind is CategoryKind.FENCED_CODE_BLOCK_BACKTICK for category in state.categories)
    assert all(category.directive is None for category in state.categories)
    assert state.headings == []


@given(st.lists(st.integers(min_value=1, max_value=6), max_size=30))
def test_numbers_have_one_component_per_level(levels):
    headings = [HeadingRecord(text="x", level=level, line_index=i) for i, level in enumerate(levels)]
    numbers = number_headings(headings)

    assert [number.count(".") for number in numbers] == levels


@given(st.lists(st.tuples(st.integers(min_value=1, max_value=4), title_strategy), max_size=15))
def test_create_tocs_is_idempotent(data):
    lines = ["<!-- <toc> -->", "<!-- </toc> -->"]
    lines.extend(f"{'#' * level} {title}" for level, title in data)

    once = create_tocs(lines)
    assert create_tocs(once) == once


@given(st.lists(st.booleans(), max_size=20))
def test_include_spans_are_balanced(markers):
    lines = ['<!-- <include file="a.md"> -->' if opening else "<!-- </include> -->" for opening in markers]
    spans = find_include_spans(categorize(lines))

    previous_end = -1
    for start, end in spans:
        assert start > previous_end
        assert markers[start]
        if end is None:
            break
        depth = sum(1 if opening else -1 for opening in markers[start : end + 1])
        assert depth == 0
        previous_end = end
