"""Inclusion of files and command output."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from .categorizer import categorize, parse_directive
from .config import DirectivesConfig
from .constants import INCLUDE_END_MARKER
from .document import Document
from .exceptions import CommandTimeoutError, IncludeCycleError, IncludeDepthError, IncludeError
from .models import Category, CategoryKind, Directive

logger = logging.getLogger(__name__)

_INCLUDE_KINDS = (CategoryKind.NORMAL_INCLUDE_BLOCK, CategoryKind.VERBATIM_INCLUDE_BLOCK)


def _include_directive(category: Category) -> Directive | None:
    if category.kind not in _INCLUDE_KINDS or category.directive is None:
        return None
    return category.directive


def find_include_spans(categories: Sequence[Category]) -> list[tuple[int, int | None]]:
    """Pair each outermost include open marker with its matching close marker.

    Nesting is tracked the same way for normal and verbatim includes, so
    previously included content that itself holds include directives is
    skipped as a whole.

    Args:
        categories: Line categories of the document.

    Returns:
        list[tuple[int, int | None]]: ``(open_index, close_index)`` pairs; the
            close index is None when the block is never closed.
    """
    spans: list[tuple[int, int | None]] = []
    open_index: int | None = None
    depth = 0

    for index, category in enumerate(categories):
        directive = _include_directive(category)
        if directive is None:
            continue
        if open_index is None:
            if not directive.closing:
                open_index = index
                depth = 1
            continue

        depth += -1 if directive.closing else 1
        if depth == 0:
            spans.append((open_index, index))
            open_index = None

    if open_index is not None:
        spans.append((open_index, None))

    return spans


def has_unbalanced_include_markers(lines: Sequence[str]) -> bool:
    """Check whether include markers in `lines` would break block nesting."""
    depth = 0
    for line in lines:
        directive = parse_directive(line)
        if directive is None or directive.name != "include":
            continue
        depth += -1 if directive.closing else 1
        if depth < 0:
            return True
    return depth != 0


def read_included_file(path: Path) -> str:
    try:
        return path.read_text(encoding="UTF-8")
    except UnicodeDecodeError as error:
        raise IncludeError(f"Invalid UTF-8 sequence in included file {path}: {error}") from error
    except OSError as error:
        raise IncludeError(f"Error reading included file {path}: {error}") from error


def run_command(command: str, cwd: Path, timeout: float | None = None) -> str:
    """Run a shell command and return its combined stdout and stderr.

    A non-zero exit status is not an error: the output is what a reader of
    the document should see.

    Raises:
        CommandTimeoutError: If the command exceeds `timeout` seconds.
        IncludeError: If the command cannot be started.
    """
    logger.debug("Running %s in %s", command, cwd)
    try:
        completed = subprocess.run(
            command,
            shell=True,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as error:
        raise CommandTimeoutError(command, timeout or 0) from error
    except OSError as error:
        raise IncludeError(f"Error running command {command!r}: {error}") from error

    if completed.returncode != 0:
        logger.warning("Command %r exited with status %d", command, completed.returncode)
    return completed.stdout


def _split_content(text: str) -> list[str]:
    text = text.rstrip("\n")
    return text.splitlines() if text else []


def render_include(
    directive: Directive,
    base_dir: Path,
    config: DirectivesConfig,
    depth: int = 0,
    chain: tuple[str, ...] = (),
) -> list[str]:
    """Produce the lines that an include directive expands to.

    Args:
        directive: Include open directive.
        base_dir: Directory that relative files and commands are resolved in.
        config: Configuration with recursion depth and timeout limits.
        depth: Nesting depth of the document holding the directive.
        chain: Resolved paths of the Markdown files being included, outermost
            first.

    Returns:
        list[str]: Lines to insert after the directive.

    Raises:
        IncludeError: If a file cannot be read or a command cannot be run.
        IncludeDepthError: If nested Markdown inclusion is too deep.
        IncludeCycleError: If a Markdown file includes itself.
    """
    command = directive.get("command")
    source: Path | None = None

    if command is not None:
        text = run_command(command, base_dir, config.command_timeout)
        md_file = directive.get("md-file")
        if md_file is not None:
            source = base_dir / md_file
            text = read_included_file(source)
    else:
        source = base_dir / (directive.get("file") or "")
        text = read_included_file(source)

    content = _split_content(text)
    lang = directive.get("lang")

    if lang is not None:
        if lang == "console" and command is not None:
            content.insert(0, f"$ {command}")
        if has_unbalanced_include_markers(content):
            content = [f" {line}" for line in content]
        return [f"```{lang}", *content, "```"]

    if depth + 1 > config.max_include_depth:
        raise IncludeDepthError(config.max_include_depth)

    if source is None:
        return include_files(content, base_dir, config, depth + 1, chain)

    resolved = str(source.resolve())
    if resolved in chain:
        raise IncludeCycleError((*chain, resolved))
    return include_files(content, source.parent, config, depth + 1, (*chain, resolved))


def include_files(
    lines: Sequence[str],
    base_dir: Path,
    config: DirectivesConfig | None = None,
    depth: int = 0,
    chain: tuple[str, ...] = (),
) -> list[str]:
    """Expand every include directive of a document.

    Content left between an include open marker and its matching close marker
    by an earlier run is replaced. Included Markdown (normal includes) is
    expanded recursively; verbatim includes (``lang`` attribute) are wrapped in
    a code fence and left alone. An open marker without a close marker gets
    one appended after the inserted content.

    Args:
        lines: Document lines without terminators.
        base_dir: Directory that relative files and commands are resolved in.
        config: Configuration; defaults to `DirectivesConfig()`.
        depth: Current Markdown nesting depth.
        chain: Resolved paths of the enclosing Markdown files, outermost first.

    Returns:
        list[str]: The document with included content.

    Raises:
        IncludeError: See `render_include`.

    Examples:
        include_files(['<!-- <include command="echo hi"> -->', "<!-- </include> -->"], Path("."))
        # ['<!-- <include command="echo hi"> -->', "hi", "<!-- </include> -->"]
    """
    config = config or DirectivesConfig()
    categories = categorize(lines)
    document = Document(lines)

    for start, end in find_include_spans(categories):
        directive = _include_directive(categories[start])
        if directive is None:
            continue
        content = render_include(directive, base_dir, config, depth, chain)

        if end is None:
            logger.warning("Include directive at line %d has no closing marker", start + 1)
            content.append(INCLUDE_END_MARKER)
        else:
            for index in range(start + 1, end):
                document.delete(index)

        document.append(start, content)

    return document.snapshot()
