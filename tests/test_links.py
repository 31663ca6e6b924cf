from __future__ import annotations

import pytest

from md_directives.links import (
    FragmentMapper,
    SectionLinkMapper,
    find_inline_code_spans,
    find_links,
    is_escaped,
    rewrite_links,
)


def test_find_links_reports_spans_and_images():
    line = "See [A](#a) and ![fig](img/a.png)."
    links = find_links(line)

    assert [(link.text, link.target, link.is_image) for link in links] == [
        ("A", "#a", False),
        ("fig", "img/a.png", True),
    ]
    assert line[links[0].start : links[0].end] == "[A](#a)"
    assert line[links[1].start : links[1].end] == "![fig](img/a.png)"


def test_find_links_handles_nested_brackets_and_parentheses():
    links = find_links("[a [b] c](path/(x).md)")
    assert links[0].text == "a [b] c"
    assert links[0].target == "path/(x).md"


def test_find_links_skips_escapes_and_code_spans():
    assert find_links(r"\[not](#a) and `[code](#b)`") == []


def test_find_links_ignores_reference_links():
    assert find_links("[text][ref]") == []


@pytest.mark.parametrize(
    ("target", "path", "fragment"),
    [
        ("#intro", "", "intro"),
        ("other.md#setup", "other.md", "setup"),
        ("other.md", "other.md", None),
        (r"odd\#name.md#x", r"odd\#name.md", "x"),
    ],
)
def test_link_fragment_split(target: str, path: str, fragment: str | None):
    link = find_links(f"[t]({target})")[0]
    assert link.path == path
    assert link.fragment == fragment


def test_is_escaped_counts_backslashes():
    assert is_escaped("\\[", 1)
    assert not is_escaped("\\\\[", 2)


def test_find_inline_code_spans_matches_run_lengths():
    assert find_inline_code_spans("``a ` b`` c `d`") == [(0, 9), (12, 15)]


def test_section_mapper_rewrites_fragment_links():
    mapper = SectionLinkMapper({"sec-a": "chapters/a.md"})
    assert rewrite_links("[See A](#sec-a)", "index.md", mapper) == "[See A](chapters/a.md#sec-a)"


def test_section_mapper_keeps_fragment_within_same_file():
    mapper = SectionLinkMapper({"sec-a": "chapters/a.md"})
    assert rewrite_links("[A](#sec-a)", "chapters/a.md", mapper) == "[A](#sec-a)"


def test_section_mapper_renames_fragment():
    mapper = SectionLinkMapper({"examples-1": "b.md"}, {"examples-1": "examples"})
    assert rewrite_links("[Ex](#examples-1)", "a.md", mapper) == "[Ex](b.md#examples)"


def test_section_mapper_rebases_relative_paths():
    mapper = SectionLinkMapper({})
    line = "![fig](images/fig.png) and [other](notes.md#top)"
    assert rewrite_links(line, "chapters/a.md", mapper) == (
        "![fig](../images/fig.png) and [other](../notes.md#top)"
    )


def test_section_mapper_leaves_unknown_fragments(caplog):
    mapper = SectionLinkMapper({})
    assert rewrite_links("[x](#missing)", "a/b.md", mapper) == "[x](#missing)"
    assert "#missing" in caplog.text


def test_rewrite_links_skips_external_and_scheme_links():
    mapper = SectionLinkMapper({})
    line = "[web](https://example.com/a.md) [mail](mailto:a@b.c)"
    assert rewrite_links(line, "chapters/a.md", mapper) == line


def test_rewrite_links_replaces_only_link_span():
    mapper = SectionLinkMapper({"a": "x/a.md"})
    line = "Text (#a) then [A](#a) then #a"
    assert rewrite_links(line, "index.md", mapper) == "Text (#a) then [A](x/a.md#a) then #a"


def test_fragment_mapper_prefers_numbered_slugs():
    mapper = FragmentMapper({"1-intro": "11-intro"}, {"intro": "11-intro", "setup": "2-setup"})
    line = "[a](#1-intro) [b](#intro) [c](#setup) [d](other.md#intro)"
    assert rewrite_links(line, "", mapper) == (
        "[a](#11-intro) [b](#11-intro) [c](#2-setup) [d](other.md#intro)"
    )


def test_section_mapper_keeps_path_links_to_the_current_file():
    mapper = SectionLinkMapper({})
    assert rewrite_links("[here](docs/a.md)", "docs/a.md", mapper) == "[here](a.md)"
