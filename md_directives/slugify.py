"""Slug generation for Markdown headings."""

from __future__ import annotations

import re

from .constants import NUMBERING_PATTERN

_DISALLOWED_CHARACTERS = re.compile(r"[^A-Za-z0-9 _-]")
_ASCII_UPPER_TO_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)


class SlugTable:
    """Slugs handed out within one document pass.

    Tracks both the next counter for each base slug and every slug already
    emitted, so that a heading whose base slug happens to equal an earlier
    disambiguated slug (``"A"``, ``"A"``, ``"A 1"``) still gets a unique one.

    Examples:
        table = SlugTable()
        table.claim("intro")  # "intro"
        table.claim("intro")  # "intro-1"
    """

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._used: set[str] = set()

    def __contains__(self, slug: object) -> bool:
        return slug in self._used

    def __len__(self) -> int:
        return len(self._used)

    def claim(self, candidate: str) -> str:
        """Reserve a unique slug derived from `candidate`.

        Args:
            candidate: Base slug.

        Returns:
            str: `candidate` on first use, otherwise ``candidate-N`` with the
                smallest unused N counting from 1.
        """
        if candidate in self._counts:
            count = self._counts[candidate] + 1
        else:
            count = 0
        slug = candidate if count == 0 else f"{candidate}-{count}"

        while slug in self._used:
            count += 1
            slug = f"{candidate}-{count}"

        self._counts[candidate] = count
        self._used.add(slug)
        return slug


def strip_numbering(text: str) -> str:
    """Remove a leading ``1.2.3.``-style numbering token and its spaces."""
    return NUMBERING_PATTERN.sub("", text, count=1)


def heading_to_title(heading: str) -> str:
    """Convert a heading line or heading text into its visible title.

    Strips leading spaces and hashmarks, a numbering token, and trailing
    spaces.

    Examples:
        heading_to_title("## 1.2. Usage ")  # "Usage"
    """
    title = heading.lstrip(" ").lstrip("#").lstrip(" ")
    return strip_numbering(title).rstrip(" ")


def generate_slug(heading_text: str, slug_table: SlugTable, strip_numbers: bool = True) -> str:
    """Generate a unique anchor slug from a heading.

    Removes surrounding whitespace, leading hashmarks and, unless disabled, a
    leading numbering token. Every character other than ASCII letters,
    digits, spaces, ``_`` and ``-`` is dropped (non-ASCII text is removed, not
    transliterated), spaces become hyphens, and the result is lowercased
    using ASCII rules only. The slug is then made unique against
    `slug_table`.

    Args:
        heading_text: Heading line or heading text.
        slug_table: Table of slugs already used in the current document.
        strip_numbers: Drop a leading ``1.2.3.`` numbering token first.

    Returns:
        str: Slug suitable for anchor links. May be empty (or ``-1``, ``-2``,
            ...) when no character survives.

    Examples:
        generate_slug("## Hello World", SlugTable())  # "hello-world"
        generate_slug("1.2. Usage", SlugTable(), strip_numbers=False)  # "12-usage"
    """
    text = heading_text.strip().lstrip("#").lstrip()
    if strip_numbers:
        text = strip_numbering(text)

    candidate = _DISALLOWED_CHARACTERS.sub("", text).strip(" ")
    candidate = candidate.replace(" ", "-").translate(_ASCII_UPPER_TO_LOWER)

    return slug_table.claim(candidate)
