"""Data models for md-directives."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class CategoryKind(Enum):
    """Kinds of lines recognized by the categorizer.

    Attributes:
        HEADING: ATX or setext heading.
        FENCED_CODE_BLOCK_BACKTICK: Inside (or delimiting) a backtick fence.
        FENCED_CODE_BLOCK_TILDE: Inside (or delimiting) a tilde fence.
        INDENTED_CODE_BLOCK: Inside an indented code block.
        COMMENT_BLOCK: Inside a multi-line HTML comment.
        TOC_BLOCK: Inside a ``<toc>`` directive block, markers included.
        SECTION_BLOCK: A ``<section>`` open or close marker.
        VERBATIM_INCLUDE_BLOCK: Inside an ``<include ... lang="...">`` block.
        NORMAL_INCLUDE_BLOCK: A normal ``<include>`` open or close marker.
        FIGURE: A ``<figure>`` caption directive.
        TABLE: A ``<table>`` caption directive.
        HYPERLINK: A line containing at least one inline link.
        OTHER: Anything else.
    """

    HEADING = "heading"
    FENCED_CODE_BLOCK_BACKTICK = "fenced code block backtick"
    FENCED_CODE_BLOCK_TILDE = "fenced code block tilde"
    INDENTED_CODE_BLOCK = "indented code block"
    COMMENT_BLOCK = "comment block"
    TOC_BLOCK = "toc block"
    SECTION_BLOCK = "section block"
    VERBATIM_INCLUDE_BLOCK = "verbatim include block"
    NORMAL_INCLUDE_BLOCK = "normal include block"
    FIGURE = "figure"
    TABLE = "table"
    HYPERLINK = "hyperlink"
    OTHER = "other"


CODE_BLOCK_KINDS = frozenset(
    {
        CategoryKind.FENCED_CODE_BLOCK_BACKTICK,
        CategoryKind.FENCED_CODE_BLOCK_TILDE,
        CategoryKind.INDENTED_CODE_BLOCK,
    }
)


class BlockState(Enum):
    """Open block tracked by the categorizer; at most one at a time."""

    NONE = auto()
    FENCED_BACKTICK = auto()
    FENCED_TILDE = auto()
    INDENTED_CODE = auto()
    COMMENT = auto()
    VERBATIM_INCLUDE = auto()
    TOC = auto()


@dataclass(frozen=True)
class Directive:
    """A parsed directive comment.

    Attributes:
        name: Tag name (``toc``, ``section``, ``figure``, ``table``, ``include``).
        attributes: Attribute values keyed by attribute name.
        closing: True for closing markers such as ``<!-- </toc> -->``.
    """

    name: str
    attributes: dict[str, str] = field(default_factory=dict, hash=False)
    closing: bool = False

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.attributes.get(key, default)

    @property
    def is_verbatim(self) -> bool:
        """Whether an include directive wraps its content in a code fence."""
        return self.name == "include" and "lang" in self.attributes


@dataclass(frozen=True)
class Category:
    """Category assigned to a single line.

    Attributes:
        kind: The line kind.
        level: Heading level (1-6) for headings, otherwise None.
        directive: Parsed directive for directive marker lines, otherwise None.
    """

    kind: CategoryKind
    level: int | None = None
    directive: Directive | None = None

    @property
    def label(self) -> str:
        if self.kind is CategoryKind.HEADING:
            return f"{self.kind.value} {self.level}"
        return self.kind.value

    @property
    def is_code(self) -> bool:
        return self.kind in CODE_BLOCK_KINDS


@dataclass
class HeadingRecord:
    """A heading recognized while categorizing.

    Attributes:
        text: Heading text without markers.
        level: Heading level (1-6).
        line_index: Zero-based index of the heading text line.
        setext: True when the heading is underlined rather than hashmarked.
    """

    text: str
    level: int
    line_index: int
    setext: bool = False


@dataclass(frozen=True)
class TocEntry:
    """One list item of a generated table of contents."""

    depth: int
    marker: str
    title: str
    slug: str

    def render(self) -> str:
        width = len(self.marker) + 1
        return f"{' ' * (self.depth * width)}{self.marker} [{self.title}](#{self.slug})"


@dataclass(frozen=True)
class TocBlock:
    """A ``<toc>`` directive block.

    Attributes:
        start: Index of the opening marker.
        end: Index of the closing marker.
        level: Level of the heading preceding the block, 0 at document start.
        title: Title given in the opening marker, if any.
    """

    start: int
    end: int
    level: int
    title: str | None = None


@dataclass(frozen=True)
class LinkReference:
    """An inline Markdown link (or image) found in a line.

    Attributes:
        text: Link text between the brackets.
        target: Raw target between the parentheses.
        start: Index of the opening bracket (or ``!`` for images).
        end: Index just past the closing parenthesis.
        is_image: True for ``![alt](src)``.
    """

    text: str
    target: str
    start: int
    end: int
    is_image: bool = False

    @property
    def full_text(self) -> str:
        prefix = "!" if self.is_image else ""
        return f"{prefix}[{self.text}]({self.target})"

    @property
    def is_external(self) -> bool:
        return self.target.startswith(("http://", "https://"))

    @property
    def is_fragment_only(self) -> bool:
        return self.target.startswith("#")

    @property
    def path(self) -> str:
        return self.target[: self._fragment_index()]

    @property
    def fragment(self) -> str | None:
        index = self._fragment_index()
        if index == len(self.target):
            return None
        return self.target[index + 1 :]

    def _fragment_index(self) -> int:
        # First unescaped "#" splits path from fragment
        backslashes = 0
        for index, character in enumerate(self.target):
            if character == "#" and backslashes % 2 == 0:
                return index
            backslashes = backslashes + 1 if character == "\\" else 0
        return len(self.target)
