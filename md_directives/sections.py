"""Splitting a document into files by section."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path, PurePosixPath

from .categorizer import CategorizerState
from .exceptions import SectionError
from .filesystem import write_text
from .links import SectionLinkMapper, rewrite_links
from .models import CategoryKind
from .slugify import SlugTable, generate_slug
from .toc import document_slugs

logger = logging.getLogger(__name__)


def validate_section_path(file: str) -> str:
    """Reject section targets outside the document's directory.

    Raises:
        SectionError: If `file` is empty, absolute, or climbs upwards.
    """
    path = PurePosixPath(file)
    if not file or path.is_absolute() or ".." in path.parts:
        raise SectionError(f"Invalid section file {file!r}: must be a relative path below the document")
    return str(path)


def split_sections(lines: Sequence[str], source_file: str = "") -> dict[str, list[str]]:
    """Collect the content of every section block, keyed by target file.

    Lines between ``<!-- <section file="PATH"> -->`` and
    ``<!-- </section> -->`` go to ``PATH``, relative to the document's
    directory; several blocks may target the same file. Links inside the
    collected lines are re-targeted for their new location: fragments point to
    the file holding the heading (`source_file` for headings outside any
    section) and relative paths are re-based.

    Args:
        lines: Document lines without terminators.
        source_file: Name of the source document relative to its directory.

    Returns:
        dict[str, list[str]]: Section contents by target file, in order of
            first appearance.

    Raises:
        SectionError: If a section targets an invalid path.

    Examples:
        split_sections(['<!-- <section file="a.md"> -->', "# A", "<!-- </section> -->"])
        # {"a.md": ["# A"]}
    """
    state = CategorizerState().feed_all(lines)
    categories, headings = state.categories, state.headings

    line_files: dict[int, str] = {}
    current_file: str | None = None
    for index, category in enumerate(categories):
        directive = category.directive
        if category.kind is CategoryKind.SECTION_BLOCK and directive is not None:
            current_file = None if directive.closing else validate_section_path(directive.get("file", ""))
            continue
        if current_file is not None:
            line_files[index] = current_file

    sections: dict[str, list[str]] = {}
    for index, file in line_files.items():
        sections.setdefault(file, []).append(lines[index])

    # Anchors are computed per file once the document is split
    source_slugs = document_slugs(headings, [heading.text for heading in headings])
    heading_files: dict[str, str] = {}
    heading_slugs: dict[str, str] = {}
    file_tables: dict[str, SlugTable] = {}
    for heading, slug in zip(headings, source_slugs):
        file = line_files.get(heading.line_index)
        if file is None:
            if source_file:
                heading_files[slug] = source_file
            continue
        heading_files[slug] = file
        heading_slugs[slug] = generate_slug(
            heading.text, file_tables.setdefault(file, SlugTable()), strip_numbers=False
        )

    mapper = SectionLinkMapper(heading_files, heading_slugs)
    for file in sections:
        indices = [index for index, line_file in line_files.items() if line_file == file]
        sections[file] = [
            rewrite_links(lines[index], file, mapper)
            if categories[index].kind is CategoryKind.HYPERLINK
            else lines[index]
            for index in indices
        ]

    return sections


def write_sections(sections: Mapping[str, Sequence[str]], output_dir: Path) -> list[Path]:
    """Write section contents to their files, replacing earlier contents.

    Args:
        sections: Section contents by target file, as from `split_sections`.
        output_dir: Directory the target files are relative to.

    Returns:
        list[Path]: Paths of the written files.
    """
    written = []
    for file, section_lines in sections.items():
        target = output_dir / validate_section_path(file)
        target.parent.mkdir(parents=True, exist_ok=True)
        write_text(target, "\n".join(section_lines) + "\n")
        logger.debug("Wrote section %s", target)
        written.append(target)
    return written
