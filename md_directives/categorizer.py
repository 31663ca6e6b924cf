"""Line categorization for Markdown documents with directive comments."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .constants import (
    ATX_HEADING_PATTERN,
    BACKTICK_FENCE,
    COMMENT_CLOSE,
    COMMENT_OPEN,
    FIGURE_PATTERN,
    INCLUDE_END_PATTERN,
    INCLUDE_START_PATTERN,
    INDENTED_CODE_PREFIX,
    LIST_MARKERS,
    SECTION_END_PATTERN,
    SECTION_START_PATTERN,
    SETEXT_UNDERLINE_PATTERNS,
    TABLE_PATTERN,
    TILDE_FENCE,
    TOC_END_PATTERN,
    TOC_START_PATTERN,
)
from .links import contains_link
from .models import BlockState, Category, CategoryKind, Directive, HeadingRecord

_FENCES = {
    BlockState.FENCED_BACKTICK: (BACKTICK_FENCE, CategoryKind.FENCED_CODE_BLOCK_BACKTICK),
    BlockState.FENCED_TILDE: (TILDE_FENCE, CategoryKind.FENCED_CODE_BLOCK_TILDE),
}

_SETEXT_PARAGRAPH_KINDS = (CategoryKind.OTHER, CategoryKind.HYPERLINK)


def parse_directive(line: str) -> Directive | None:
    """Parse a directive comment occupying a whole line.

    Args:
        line: Line to inspect, without its line terminator.

    Returns:
        Directive | None: The parsed directive, or None when the line is not a
            well-formed directive.

    Examples:
        parse_directive('<!-- <include file="a.py" lang="python"> -->')
        parse_directive("<!-- </toc> -->")  # Directive("toc", closing=True)
    """
    match = INCLUDE_START_PATTERN.match(line)
    if match:
        attributes = {match.group("source"): match.group("target")}
        if match.group("lang") is not None:
            attributes["lang"] = match.group("lang")
        if match.group("md_file") is not None:
            attributes["md-file"] = match.group("md_file")
        return Directive("include", attributes)
    if INCLUDE_END_PATTERN.match(line):
        return Directive("include", closing=True)

    match = TOC_START_PATTERN.match(line)
    if match:
        title = match.group("title")
        return Directive("toc", {} if title is None else {"title": title})
    if TOC_END_PATTERN.match(line):
        return Directive("toc", closing=True)

    match = SECTION_START_PATTERN.match(line)
    if match:
        return Directive("section", {"file": match.group("file")})
    if SECTION_END_PATTERN.match(line):
        return Directive("section", closing=True)

    match = FIGURE_PATTERN.match(line)
    if match:
        return Directive("figure", {"file": match.group("file"), "caption": match.group("caption")})

    match = TABLE_PATTERN.match(line)
    if match:
        return Directive("table", {"caption": match.group("caption")})

    return None


def _is_blank(line: str) -> bool:
    return not line.strip()


@dataclass
class CategorizerState:
    """Single-pass categorizer keeping block state between lines.

    Feed lines one at a time with `feed`; categories and headings found so far
    accumulate in `categories` and `headings`. A setext underline relabels
    the previous entry of `categories` after the fact.

    Attributes:
        block: Currently open block.
        include_depth: Include nesting depth inside a verbatim include block.
        previous_line: Raw text of the previous line (blank at document start).
        categories: Category of every line fed so far.
        headings: Headings recognized so far, in document order.
    """

    block: BlockState = BlockState.NONE
    include_depth: int = 0
    previous_line: str = ""
    categories: list[Category] = field(default_factory=list)
    headings: list[HeadingRecord] = field(default_factory=list)

    def feed(self, line: str) -> Category:
        """Categorize the next line of the document.

        Args:
            line: Next line, without its line terminator.

        Returns:
            Category: Category of `line`.
        """
        category = self._categorize(line)
        self.categories.append(category)
        self.previous_line = line
        return category

    def feed_all(self, lines: Iterable[str]) -> CategorizerState:
        for line in lines:
            self.feed(line)
        return self

    def _categorize(self, line: str) -> Category:
        if self.block in _FENCES:
            return _continue_fence(self, line)

        if self.block is BlockState.INDENTED_CODE:
            if _try_stay_in_indented_code(self, line):
                return Category(CategoryKind.INDENTED_CODE_BLOCK)

        if self.block is BlockState.COMMENT:
            if COMMENT_CLOSE in line:
                self.block = BlockState.NONE
            return Category(CategoryKind.COMMENT_BLOCK)

        if self.block is BlockState.VERBATIM_INCLUDE:
            return _continue_verbatim_include(self, line)

        if self.block is BlockState.TOC:
            return _continue_toc(self, line)

        category = (
            _try_open_fence(self, line)
            or _try_enter_indented_code(self, line)
            or _try_comment(self, line)
            or _try_atx_heading(self, line)
            or _try_setext_underline(self, line)
        )
        if category is not None:
            return category

        if contains_link(line):
            return Category(CategoryKind.HYPERLINK)
        return Category(CategoryKind.OTHER)


def _continue_fence(state: CategorizerState, line: str) -> Category:
    fence, kind = _FENCES[state.block]
    if line.startswith(fence):
        state.block = BlockState.NONE
    return Category(kind)


def _try_open_fence(state: CategorizerState, line: str) -> Category | None:
    """Detect the start of a fenced code block.

    Examples:
        _try_open_fence(CategorizerState(), "```python")
    """
    for block, (fence, kind) in _FENCES.items():
        if line.startswith(fence):
            state.block = block
            return Category(kind)
    return None


def _try_enter_indented_code(state: CategorizerState, line: str) -> Category | None:
    """Detect entry into an indented code block.

    Requires four leading spaces followed by a character that cannot start a
    list item, right after a blank line.

    Examples:
        _try_enter_indented_code(CategorizerState(), "    code()")
    """
    if not line.startswith(INDENTED_CODE_PREFIX) or len(line) <= len(INDENTED_CODE_PREFIX):
        return None
    if line[len(INDENTED_CODE_PREFIX)] in LIST_MARKERS:
        return None
    if not _is_blank(state.previous_line):
        return None

    state.block = BlockState.INDENTED_CODE
    return Category(CategoryKind.INDENTED_CODE_BLOCK)


def _try_stay_in_indented_code(state: CategorizerState, line: str) -> bool:
    """Determine whether a line continues the open indented code block.

    Returns:
        bool: True when the line is still indented; False when the block ends
            and the line must be categorized normally.
    """
    if line.startswith(INDENTED_CODE_PREFIX):
        return True

    state.block = BlockState.NONE
    return False


def _try_comment(state: CategorizerState, line: str) -> Category | None:
    """Categorize a line that opens an HTML comment.

    A comment left open on the line starts a comment block. A comment closed
    on the same line is matched against the directive grammar; anything that
    is not a well-formed directive is plain text.
    """
    stripped = line.lstrip()
    if not stripped.startswith(COMMENT_OPEN):
        return None

    if COMMENT_CLOSE not in stripped[len(COMMENT_OPEN) :]:
        state.block = BlockState.COMMENT
        return Category(CategoryKind.COMMENT_BLOCK)

    directive = parse_directive(line)
    if directive is None:
        return Category(CategoryKind.OTHER)

    if directive.name == "include":
        if directive.is_verbatim:
            state.block = BlockState.VERBATIM_INCLUDE
            state.include_depth = 1
            return Category(CategoryKind.VERBATIM_INCLUDE_BLOCK, directive=directive)
        return Category(CategoryKind.NORMAL_INCLUDE_BLOCK, directive=directive)

    if directive.name == "toc":
        if directive.closing:
            return Category(CategoryKind.OTHER)
        state.block = BlockState.TOC
        return Category(CategoryKind.TOC_BLOCK, directive=directive)

    kinds = {
        "section": CategoryKind.SECTION_BLOCK,
        "figure": CategoryKind.FIGURE,
        "table": CategoryKind.TABLE,
    }
    return Category(kinds[directive.name], directive=directive)


def _continue_verbatim_include(state: CategorizerState, line: str) -> Category:
    """Track include nesting inside a verbatim include block.

    Inner include markers only move the nesting depth; the block closes on
    the ``</include>`` marker that brings the depth back to zero.
    """
    directive = parse_directive(line)
    if directive is None or directive.name != "include":
        return Category(CategoryKind.VERBATIM_INCLUDE_BLOCK)

    if not directive.closing:
        state.include_depth += 1
        return Category(CategoryKind.VERBATIM_INCLUDE_BLOCK)

    state.include_depth -= 1
    if state.include_depth > 0:
        return Category(CategoryKind.VERBATIM_INCLUDE_BLOCK)

    state.block = BlockState.NONE
    state.include_depth = 0
    return Category(CategoryKind.VERBATIM_INCLUDE_BLOCK, directive=directive)


def _continue_toc(state: CategorizerState, line: str) -> Category:
    if TOC_END_PATTERN.match(line):
        state.block = BlockState.NONE
        return Category(CategoryKind.TOC_BLOCK, directive=Directive("toc", closing=True))
    return Category(CategoryKind.TOC_BLOCK)


def _try_atx_heading(state: CategorizerState, line: str) -> Category | None:
    match = ATX_HEADING_PATTERN.match(line)
    if not match:
        return None

    level = len(match.group("marks"))
    state.headings.append(
        HeadingRecord(text=match.group("text").strip(), level=level, line_index=len(state.categories))
    )
    return Category(CategoryKind.HEADING, level=level)


def _try_setext_underline(state: CategorizerState, line: str) -> Category | None:
    """Recognize a setext underline and relabel the previous line.

    The previous line must be non-blank paragraph text that is not itself an
    underline-looking line, so consecutive underlines never turn into headings.
    """
    if not state.categories or _is_blank(state.previous_line):
        return None
    if state.categories[-1].kind not in _SETEXT_PARAGRAPH_KINDS:
        return None
    if any(pattern.match(state.previous_line) for pattern in SETEXT_UNDERLINE_PATTERNS.values()):
        return None

    previous = state.previous_line.strip()
    for level, pattern in SETEXT_UNDERLINE_PATTERNS.items():
        if not pattern.match(line):
            continue

        heading_index = len(state.categories) - 1
        state.categories[-1] = Category(CategoryKind.HEADING, level=level)
        state.headings.append(
            HeadingRecord(text=previous, level=level, line_index=heading_index, setext=True)
        )
        return Category(CategoryKind.OTHER)

    return None


def categorize(lines: Iterable[str]) -> list[Category]:
    """Categorize every line of a document.

    Args:
        lines: Document lines, without line terminators.

    Returns:
        list[Category]: One category per line.

    Examples:
        categorize(["Title", "=====", "```", "# not a heading", "```"])
    """
    return CategorizerState().feed_all(lines).categories
