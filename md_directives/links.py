"""Inline link detection and target rewriting."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping

from .models import LinkReference
from .paths import traverse

logger = logging.getLogger(__name__)

LinkMapper = Callable[[LinkReference, str], "str | None"]

_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")


def is_escaped(text: str, pos: int) -> bool:
    """Determine whether a character is escaped by preceding backslashes.

    Counts consecutive backslashes immediately before `pos`; an odd count marks
    the character as escaped.

    Args:
        text: Text containing the character.
        pos: Zero-based index of the character to inspect.

    Returns:
        bool: True when the character is escaped, otherwise False.

    Examples:
        is_escaped("\\\\[", 2)  # False, two backslashes
        is_escaped("\\[", 1)  # True, one backslash
    """
    backslash_count = 0
    i = pos - 1
    while i >= 0 and text[i] == "\\":
        backslash_count += 1
        i -= 1

    return backslash_count % 2 == 1


def find_inline_code_spans(text: str) -> list[tuple[int, int]]:
    """Locate inline code spans delimited by equal-length backtick runs.

    Args:
        text: The text to scan for inline code spans.

    Returns:
        list[tuple[int, int]]: Start (inclusive) and end (exclusive) positions
            for each inline code span.

    Examples:
        find_inline_code_spans("`code`")  # [(0, 6)]
        find_inline_code_spans("``more`` text")  # [(0, 8)]
    """
    spans = []
    i = 0

    while i < len(text):
        if text[i] == "`" and not is_escaped(text, i):
            start = i
            backtick_count = 0
            while i < len(text) and text[i] == "`":
                backtick_count += 1
                i += 1

            while i < len(text):
                if text[i] == "`" and not is_escaped(text, i):
                    close_count = 0
                    while i < len(text) and text[i] == "`":
                        close_count += 1
                        i += 1

                    if close_count == backtick_count:
                        spans.append((start, i))
                        break
                else:
                    i += 1
        else:
            i += 1

    return spans


def _match_bracket(text: str, start: int) -> int | None:
    """Return the index just past the ``]`` matching the ``[`` at `start`."""
    j = start + 1
    depth = 1
    while j < len(text) and depth > 0:
        if text[j] == "\\" and j + 1 < len(text):
            j += 2
        elif text[j] == "[":
            depth += 1
            j += 1
        elif text[j] == "]":
            depth -= 1
            j += 1
        else:
            j += 1
    return j if depth == 0 else None


def _match_paren(text: str, start: int) -> int | None:
    """Return the index just past the ``)`` matching the ``(`` at `start`."""
    k = start + 1
    depth = 1
    while k < len(text) and depth > 0:
        if text[k] == "\\" and k + 1 < len(text):
            k += 2
        elif text[k] == "(":
            depth += 1
            k += 1
        elif text[k] == ")":
            depth -= 1
            k += 1
        else:
            k += 1
    return k if depth == 0 else None


def find_links(line: str) -> list[LinkReference]:
    """Find inline Markdown links and images in a line.

    Scans left to right for non-overlapping ``[text](target)`` and
    ``![alt](src)`` patterns. Brackets and parentheses are balanced,
    backslash escapes are honored, and inline code spans are skipped.
    Reference-style links are not reported.

    Args:
        line: A single line of Markdown.

    Returns:
        list[LinkReference]: Links in order of appearance.

    Examples:
        find_links("See [A](#a) and `[b](#b)`")  # one link, target "#a"
    """
    code_spans = find_inline_code_spans(line)
    links: list[LinkReference] = []
    i = 0

    while i < len(line):
        span_end = next((end for start, end in code_spans if start == i), None)
        if span_end is not None:
            i = span_end
            continue

        if line[i] != "[" or is_escaped(line, i):
            i += 1
            continue

        closing_bracket = _match_bracket(line, i)
        if closing_bracket is None or closing_bracket >= len(line) or line[closing_bracket] != "(":
            i += 1
            continue

        closing_paren = _match_paren(line, closing_bracket)
        if closing_paren is None:
            i += 1
            continue

        is_image = i > 0 and line[i - 1] == "!" and not is_escaped(line, i - 1)
        links.append(
            LinkReference(
                text=line[i + 1 : closing_bracket - 1],
                target=line[closing_bracket + 1 : closing_paren - 1],
                start=i - 1 if is_image else i,
                end=closing_paren,
                is_image=is_image,
            )
        )
        i = closing_paren

    return links


def contains_link(line: str) -> bool:
    return bool(find_links(line))


def rewrite_links(line: str, current_file: str, mapper: LinkMapper) -> str:
    """Rewrite the targets of the inline links in a line.

    External targets (``http://``, ``https://``) are never passed to the
    mapper. A mapper returning None leaves that link untouched. Only the
    exact span of each rewritten link is replaced, so identical link text
    elsewhere on the line is not affected.

    Args:
        line: Line to rewrite.
        current_file: Path of the file the line will live in.
        mapper: Callable resolving a link to its new target, or None.

    Returns:
        str: The line with rewritten link targets.

    Examples:
        mapper = SectionLinkMapper({"sec-a": "chapters/a.md"})
        rewrite_links("[See A](#sec-a)", "index.md", mapper)
        # "[See A](chapters/a.md#sec-a)"
    """
    parts = []
    offset = 0

    for link in find_links(line):
        if link.is_external:
            continue

        new_target = mapper(link, current_file)
        if new_target is None or new_target == link.target:
            continue

        replacement = LinkReference(
            text=link.text,
            target=new_target,
            start=link.start,
            end=link.end,
            is_image=link.is_image,
        )
        parts.append(line[offset : link.start])
        parts.append(replacement.full_text)
        offset = link.end

    if not parts:
        return line

    parts.append(line[offset:])
    return "".join(parts)


class SectionLinkMapper:
    """Re-target links for content moved into another file.

    Fragment-only targets are resolved through a slug-to-file mapping; path
    targets (with or without a fragment) are interpreted relative to the
    document root and re-based on the file the line moves to.

    Args:
        heading_files: Mapping of heading slugs to the files holding them.
        heading_slugs: Optional mapping of heading slugs to the slugs the
            headings get in their new file.
    """

    def __init__(
        self, heading_files: Mapping[str, str], heading_slugs: Mapping[str, str] | None = None
    ):
        self.heading_files = heading_files
        self.heading_slugs = heading_slugs or {}

    def __call__(self, link: LinkReference, current_file: str) -> str | None:
        fragment = link.fragment
        suffix = "" if fragment is None else f"#{fragment}"

        if link.is_fragment_only:
            target_file = self.heading_files.get(fragment or "")
            if target_file is None:
                logger.warning("No heading found for link target %s", link.target)
                return None
            slug = self.heading_slugs.get(fragment or "", fragment)
            return f"{traverse(current_file, target_file)}#{slug}"

        if not link.path or _SCHEME_PATTERN.match(link.path):
            return None
        path = traverse(current_file, link.path)
        if not path and fragment is None:
            # A link to the file itself keeps naming it
            path = link.path.rsplit("/", 1)[-1]
        return path + suffix


class FragmentMapper:
    """Migrate in-document fragment links after headings were renumbered.

    Args:
        numbered: Old slugs (as computed from the old heading text) mapped to
            new slugs.
        unnumbered: Numbering-stripped old slugs mapped to new slugs.
    """

    def __init__(self, numbered: Mapping[str, str], unnumbered: Mapping[str, str]):
        self.numbered = numbered
        self.unnumbered = unnumbered

    def __call__(self, link: LinkReference, current_file: str) -> str | None:
        if not link.is_fragment_only:
            return None

        old_slug = link.fragment or ""
        new_slug = self.numbered.get(old_slug, self.unnumbered.get(old_slug))
        if new_slug is None:
            logger.warning("No heading found for link target %s", link.target)
            return None
        return f"#{new_slug}"
