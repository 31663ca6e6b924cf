"""Mutable line buffer shared by the document transformations."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


class Document:
    """Ordered Markdown lines that can be edited by original line index.

    Deleting a line leaves a tombstone so that indices computed by the
    categorizer stay valid while the buffer is being edited. Content appended
    to a line is emitted right after it.

    Examples:
        document = Document.from_text("a\\nb\\n")
        document.delete(0)
        document.append(1, ["c"])
        document.render()  # "b\\nc\\n"
    """

    def __init__(self, lines: Iterable[str], trailing_newline: bool = True):
        self._lines: list[str | None] = list(lines)
        self._appended: dict[int, list[str]] = {}
        self.trailing_newline = trailing_newline

    @classmethod
    def from_text(cls, text: str) -> Document:
        return cls(text.splitlines(), trailing_newline=text.endswith("\n") or not text)

    def snapshot(self) -> list[str]:
        """Current lines without tombstones, appended content included."""
        return list(self._iter_lines())

    def replace(self, index: int, line: str) -> None:
        self._lines[index] = line

    def delete(self, index: int) -> None:
        self._lines[index] = None

    def append(self, index: int, lines: Iterable[str]) -> None:
        """Emit `lines` after the line at `index`, after earlier appends."""
        self._appended.setdefault(index, []).extend(lines)

    def render(self) -> str:
        text = "\n".join(self._iter_lines())
        if self.trailing_newline and text:
            text += "\n"
        return text

    def _iter_lines(self) -> Iterator[str]:
        for index, line in enumerate(self._lines):
            if line is not None:
                yield line
            yield from self._appended.get(index, ())
