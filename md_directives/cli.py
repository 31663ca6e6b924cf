"""
Command-line entry point for md-directives.
Each command reads a Markdown document, applies one transformation, and writes
the result to stdout, to another file, or back in place.
"""

from __future__ import annotations

import functools
import logging
import os
from dataclasses import dataclass
from pathlib import Path

import click

from .captions import create_captions
from .categorizer import categorize
from .config import ConfigError, DirectivesConfig, build_config
from .document import Document
from .exceptions import DirectivesError
from .filesystem import (
    collect_file_stat,
    get_max_file_size,
    normalize_filepath,
    read_document,
    write_text,
)
from .include import include_files
from .sections import split_sections, write_sections
from .toc import create_tocs

__all__ = ["cli"]

logger = logging.getLogger(__name__)

STDIN_PATH = "-"


@dataclass
class _Source:
    path: Path | None
    text: str
    stat: os.stat_result | None = None

    @property
    def base_dir(self) -> Path:
        return self.path.parent if self.path is not None else Path.cwd()

    @property
    def lines(self) -> list[str]:
        return self.text.splitlines()

    def render(self, lines: list[str]) -> str:
        return Document(lines, trailing_newline=self.text.endswith("\n") or not self.text).render()


def _search_dir(filepath: str) -> Path:
    if filepath == STDIN_PATH:
        return Path.cwd()
    try:
        return normalize_filepath(filepath).parent
    except ValueError as error:
        raise click.BadParameter(str(error), param_hint="FILE") from error


def _config_for(filepath: str, **overrides: object) -> DirectivesConfig:
    try:
        return build_config(_search_dir(filepath), **overrides)
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error


def _read_source(filepath: str, config: DirectivesConfig) -> _Source:
    if filepath == STDIN_PATH:
        return _Source(path=None, text=click.get_text_stream("stdin").read())

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    try:
        path = normalize_filepath(filepath)
    except ValueError as error:
        raise click.BadParameter(str(error), param_hint="FILE") from error
    try:
        initial_stat = collect_file_stat(path)
        text = read_document(path, max_file_size)
    except DirectivesError as error:
        raise click.ClickException(str(error)) from error
    return _Source(path=path, text=text, stat=initial_stat)


def _emit(source: _Source, lines: list[str], in_place: bool, out_file: str | None):
    text = source.render(lines)
    try:
        if in_place:
            write_text(source.path, text, expected_stat=source.stat)
            logger.debug("Updated %s", source.path)
        elif out_file is not None:
            write_text(Path(out_file), text)
            logger.debug("Wrote %s", out_file)
        else:
            click.echo(text, nl=False)
    except DirectivesError as error:
        raise click.ClickException(str(error)) from error


def _check_output_options(filepath: str, in_place: bool, out_file: str | None):
    if in_place and out_file is not None:
        raise click.UsageError("--in-place and --out-file are mutually exclusive.")
    if in_place and filepath == STDIN_PATH:
        raise click.BadParameter("cannot edit standard input in place.", param_hint="FILE")


def output_options(command):
    """Add the ``--in-place`` and ``--out-file`` options to a command."""

    @click.option("-i", "--in-place", is_flag=True, help="Rewrite FILE instead of printing.")
    @click.option(
        "-o",
        "--out-file",
        type=click.Path(dir_okay=False, writable=True),
        help="Write the result to this file instead of printing.",
    )
    @functools.wraps(command)
    def wrapper(filepath: str, in_place: bool, out_file: str | None, **kwargs):
        _check_output_options(filepath, in_place, out_file)
        return command(filepath=filepath, in_place=in_place, out_file=out_file, **kwargs)

    return wrapper


file_argument = click.argument("filepath", metavar="FILE", type=click.Path(allow_dash=True))


@click.group()
@click.version_option(package_name="md-directives")
@click.option("-v", "--verbose", is_flag=True, help="Log what each command does.")
def cli(verbose: bool):
    """Expand directives embedded in Markdown documents.

    FILE may be '-' to read from standard input.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


@cli.command(name="categorize")
@file_argument
def categorize_command(filepath: str):
    """Print the category of every line of FILE.

    Examples:
        md-directives categorize README.md
    """
    source = _read_source(filepath, _config_for(filepath))
    for category in categorize(source.lines):
        click.echo(category.label)


@cli.command()
@file_argument
@output_options
@click.option("--titles", multiple=True, help="TOC title, in document order (repeatable).")
@click.option("--add-titles/--no-add-titles", default=None, help="Put a title above each TOC.")
@click.option(
    "--number-headings/--no-number-headings",
    default=None,
    help="Number headings and use numbered TOC lists.",
)
@click.option(
    "-e", "--exclude-headings", multiple=True, help="Heading title to leave out (repeatable)."
)
@click.option(
    "-l",
    "--exclude-levels",
    multiple=True,
    type=click.IntRange(1, 6),
    help="Heading level to leave out (repeatable).",
)
def toc(
    filepath: str,
    in_place: bool,
    out_file: str | None,
    titles: tuple[str, ...] = (),
    add_titles: bool | None = None,
    number_headings: bool | None = None,
    exclude_headings: tuple[str, ...] = (),
    exclude_levels: tuple[int, ...] = (),
):
    """Fill the tables of contents of FILE and number its headings.

    Args:
        filepath: Path to the Markdown document, or '-'.
        in_place: Whether to rewrite the document.
        out_file: Optional path receiving the result.
        titles: Overrides for the TOC titles.
        add_titles: Override for putting titles above the TOCs.
        number_headings: Override for heading numbering.
        exclude_headings: Heading titles left out of the TOCs.
        exclude_levels: Heading levels left out of numbering and the TOCs.

    Raises:
        click.BadParameter: If the path or configuration is invalid.
        click.ClickException: If the document cannot be read or written.

    Examples:
        md-directives toc -i --no-number-headings -l 1 README.md
    """
    config = _config_for(
        filepath,
        toc_titles=titles,
        add_titles=add_titles,
        number_headings=number_headings,
        excluded_headings=exclude_headings,
        excluded_levels=exclude_levels,
    )
    source = _read_source(filepath, config)
    _emit(source, create_tocs(source.lines, config), in_place, out_file)


@cli.command()
@file_argument
@output_options
def captions(filepath: str, in_place: bool, out_file: str | None):
    """Number the figure and table captions of FILE."""
    source = _read_source(filepath, _config_for(filepath))
    _emit(source, create_captions(source.lines), in_place, out_file)


@cli.command()
@file_argument
@output_options
def include(filepath: str, in_place: bool, out_file: str | None):
    """Insert included files and command output into FILE.

    Paths and commands are resolved relative to the directory of FILE (the
    current directory for standard input).
    """
    config = _config_for(filepath)
    source = _read_source(filepath, config)
    chain = (str(source.path),) if source.path is not None else ()
    try:
        lines = include_files(source.lines, source.base_dir, config, chain=chain)
    except DirectivesError as error:
        raise click.ClickException(str(error)) from error
    _emit(source, lines, in_place, out_file)


@cli.command()
@file_argument
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for the section files (default: the directory of FILE).",
)
def split(filepath: str, output_dir: Path | None = None):
    """Write the section blocks of FILE to their own files.

    Prints the path of every file written.
    """
    source = _read_source(filepath, _config_for(filepath))
    source_file = source.path.name if source.path is not None else ""
    try:
        sections = split_sections(source.lines, source_file=source_file)
        written = write_sections(sections, output_dir or source.base_dir)
    except DirectivesError as error:
        raise click.ClickException(str(error)) from error

    if not written:
        click.echo(f"No sections found in {filepath}.", err=True)
    for path in written:
        click.echo(str(path))


if __name__ == "__main__":
    cli()
