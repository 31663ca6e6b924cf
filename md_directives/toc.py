"""Heading numbering and table of contents generation."""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence

from .categorizer import CategorizerState
from .config import DirectivesConfig
from .constants import BULLET_MARKER, MAX_HEADING_LEVEL, NUMBERED_MARKER
from .document import Document
from .links import FragmentMapper, rewrite_links
from .models import Category, CategoryKind, HeadingRecord, TocBlock, TocEntry
from .slugify import SlugTable, generate_slug, heading_to_title, strip_numbering

logger = logging.getLogger(__name__)


def number_headings(
    headings: Sequence[HeadingRecord], excluded_levels: Collection[int] = ()
) -> list[str]:
    """Compute ``1.2.3.``-style numbers for headings.

    Only included levels contribute a component. Headings on excluded levels
    get an empty number and leave the counters untouched. Moving up to a
    shallower level resets the counters of all deeper levels.

    Args:
        headings: Headings in document order.
        excluded_levels: Heading levels that are not numbered.

    Returns:
        list[str]: One number per heading, ``""`` for excluded levels.

    Examples:
        levels [1, 2, 2, 3, 1, 2] -> ["1.", "1.1.", "1.2.", "1.2.1.", "2.", "2.1."]
    """
    included_levels = [
        level for level in range(1, MAX_HEADING_LEVEL + 1) if level not in excluded_levels
    ]
    counts = [0] * (MAX_HEADING_LEVEL + 1)
    previous_level = 0
    numbers = []

    for heading in headings:
        level = heading.level
        if level in excluded_levels:
            numbers.append("")
            continue

        for deeper in range(level + 1, previous_level + 1):
            counts[deeper] = 0
        counts[level] += 1

        numbers.append(
            "".join(f"{counts[included] or 1}." for included in included_levels if included <= level)
        )
        previous_level = level

    return numbers


def renumber_heading(text: str, number: str) -> str:
    """Replace the numbering token of a heading text.

    Examples:
        renumber_heading("1.3. Usage", "2.1.")  # "2.1. Usage"
        renumber_heading("Usage", "")  # "Usage"
    """
    if not number:
        return text
    return f"{number} {strip_numbering(text)}"


def find_toc_blocks(
    categories: Sequence[Category], headings: Sequence[HeadingRecord]
) -> list[TocBlock]:
    """Locate the ``<toc>`` blocks of a categorized document.

    The level of a block is the level of the heading that most recently
    precedes it, or 0 at document start. Blocks without a closing marker are
    ignored.

    Args:
        categories: Line categories from the categorizer.
        headings: Headings from the same categorizer pass.

    Returns:
        list[TocBlock]: Complete TOC blocks in document order.
    """
    blocks = []
    start: int | None = None
    title: str | None = None

    for index, category in enumerate(categories):
        if category.kind is not CategoryKind.TOC_BLOCK or category.directive is None:
            continue
        if not category.directive.closing:
            start = index
            title = category.directive.get("title")
            continue
        if start is None:
            continue

        level = 0
        for heading in headings:
            if heading.line_index >= start:
                break
            level = heading.level
        blocks.append(TocBlock(start=start, end=index, level=level, title=title))
        start = None

    if start is not None:
        logger.warning("Ignoring table of contents without closing marker at line %d", start + 1)

    return blocks


def toc_titles_for(blocks: Sequence[TocBlock], config: DirectivesConfig) -> list[str]:
    """Pick the title of each TOC block.

    A ``title`` attribute wins; otherwise the configured title at the same
    position is used, falling back to the first configured title.
    """
    titles = []
    for index, block in enumerate(blocks):
        if block.title is not None:
            titles.append(block.title)
        elif index < len(config.toc_titles):
            titles.append(config.toc_titles[index])
        else:
            titles.append(config.toc_titles[0])
    return titles


def toc_title_heading(block: TocBlock, title: str) -> str:
    return f"{'#' * min(block.level + 1, MAX_HEADING_LEVEL)} {title}"


def document_slugs(
    headings: Sequence[HeadingRecord],
    texts: Sequence[str],
    title_headings: Sequence[tuple[int, str]] = (),
    strip_numbers: bool = False,
) -> list[str]:
    """Compute the anchor slug of every heading with one document-wide table.

    Args:
        headings: Headings in document order.
        texts: Heading texts to slugify, parallel to `headings`.
        title_headings: ``(line_index, text)`` of TOC title headings, which
            take part in disambiguation at their position.
        strip_numbers: Drop numbering tokens before slugifying.

    Returns:
        list[str]: One slug per heading.
    """
    table = SlugTable()
    pending = sorted(title_headings)
    next_title = 0
    slugs = []

    for heading, text in zip(headings, texts):
        while next_title < len(pending) and pending[next_title][0] < heading.line_index:
            generate_slug(pending[next_title][1], table, strip_numbers=strip_numbers)
            next_title += 1
        slugs.append(generate_slug(text, table, strip_numbers=strip_numbers))

    return slugs


def build_slug_remap(
    old_slugs: Sequence[str], stripped_old_slugs: Sequence[str], new_slugs: Sequence[str]
) -> tuple[dict[str, str], dict[str, str]]:
    """Map pre-renumbering slugs to post-renumbering slugs.

    Args:
        old_slugs: Slugs of the headings as they were.
        stripped_old_slugs: Slugs of the old headings with numbering removed.
        new_slugs: Slugs of the renumbered headings.

    Returns:
        tuple[dict[str, str], dict[str, str]]: The numbered and the unnumbered
            replacement maps.
    """
    numbered = dict(zip(old_slugs, new_slugs))
    unnumbered = dict(zip(stripped_old_slugs, new_slugs))
    return numbered, unnumbered


def build_toc_entries(
    block: TocBlock,
    headings: Sequence[HeadingRecord],
    texts: Sequence[str],
    slugs: Sequence[str],
    config: DirectivesConfig,
    skipped_titles: Collection[str] = (),
) -> list[TocEntry]:
    """Collect the entries of one table of contents.

    Takes the headings after the block's end marker up to (not including) the
    first heading whose level is at or above the block's level. Excluded
    levels, excluded titles and titles starting with a TOC title are skipped.
    Depths are relative to the shallowest entry.

    Args:
        block: The TOC block.
        headings: All headings of the document.
        texts: Heading texts (renumbered when numbering is enabled).
        slugs: Anchor slugs parallel to `headings`.
        config: Configuration with exclusions and list style.
        skipped_titles: TOC titles; headings starting with one are left out.

    Returns:
        list[TocEntry]: Entries in document order.
    """
    marker = NUMBERED_MARKER if config.number_headings else BULLET_MARKER
    selected: list[tuple[int, str, str]] = []

    for heading, text, slug in zip(headings, texts, slugs):
        if heading.line_index <= block.end:
            continue
        if heading.level <= block.level:
            break
        if heading.level in config.excluded_levels:
            continue

        title = heading_to_title(text)
        if title in config.excluded_headings:
            continue
        if any(skipped and title.startswith(skipped) for skipped in skipped_titles):
            continue
        selected.append((heading.level, title, slug))

    if not selected:
        return []

    shallowest = min(level for level, _, _ in selected)
    return [
        TocEntry(depth=level - shallowest, marker=marker, title=title, slug=slug)
        for level, title, slug in selected
    ]


def assemble_toc(
    block: TocBlock, entries: Sequence[TocEntry], title: str | None = None
) -> list[str]:
    """Render the lines that go between a TOC block's markers.

    Args:
        block: The TOC block.
        entries: Entries from `build_toc_entries`.
        title: Title heading text, or None for no title.

    Returns:
        list[str]: TOC lines without terminators.
    """
    lines = [] if title is None else [toc_title_heading(block, title), ""]
    lines.extend(entry.render() for entry in entries)
    return lines


def create_tocs(lines: Sequence[str], config: DirectivesConfig | None = None) -> list[str]:
    """Number headings and regenerate every table of contents of a document.

    When numbering is enabled, headings get fresh numbers (setext headings are
    rewritten as ATX headings) and in-document fragment links written against
    the old headings are migrated to the new anchors. The interior of each
    ``<toc>`` block is replaced by the generated TOC. Running the function on
    its own output yields the same document.

    Args:
        lines: Document lines without terminators.
        config: Configuration; defaults to `DirectivesConfig()`.

    Returns:
        list[str]: The transformed document lines.

    Examples:
        create_tocs(["<!-- <toc> -->", "<!-- </toc> -->", "# Intro"])
    """
    config = config or DirectivesConfig()
    state = CategorizerState().feed_all(lines)
    categories, headings = state.categories, state.headings

    blocks = find_toc_blocks(categories, headings)
    titles = toc_titles_for(blocks, config)
    title_headings = (
        [(block.start, toc_title_heading(block, title)) for block, title in zip(blocks, titles)]
        if config.add_titles
        else []
    )

    old_texts = [heading.text for heading in headings]
    if config.number_headings:
        numbers = number_headings(headings, config.excluded_levels)
        new_texts = [renumber_heading(text, number) for text, number in zip(old_texts, numbers)]
    else:
        new_texts = old_texts

    new_slugs = document_slugs(headings, new_texts, title_headings)
    document = Document(lines)

    if new_texts != old_texts:
        old_slugs = document_slugs(headings, old_texts, title_headings)
        stripped_old_slugs = document_slugs(headings, old_texts, title_headings, strip_numbers=True)
        numbered, unnumbered = build_slug_remap(old_slugs, stripped_old_slugs, new_slugs)

        for heading, old_text, new_text in zip(headings, old_texts, new_texts):
            if new_text == old_text:
                continue
            document.replace(heading.line_index, f"{'#' * heading.level} {new_text}")
            if heading.setext:
                document.delete(heading.line_index + 1)

        mapper = FragmentMapper(numbered, unnumbered)
        for index, category in enumerate(categories):
            if category.kind is CategoryKind.HYPERLINK:
                document.replace(index, rewrite_links(lines[index], "", mapper))

    for block, title in zip(blocks, titles):
        entries = build_toc_entries(block, headings, new_texts, new_slugs, config, titles)
        for index in range(block.start + 1, block.end):
            document.delete(index)
        document.append(block.start, assemble_toc(block, entries, title if config.add_titles else None))
        logger.debug("Generated table of contents at line %d with %d entries", block.start + 1, len(entries))

    return document.snapshot()
