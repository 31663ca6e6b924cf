"""
md-directives: directive expansion for Markdown documents.

Documents carry their own instructions in HTML comments: tables of contents,
figure and table captions, included files and command output, and sections to
split out into files. This package can be used both as a CLI tool and as a
library.

CLI Usage:
    md-directives toc -i README.md
    md-directives include -o book.md book.src.md

Library Usage:
    from pathlib import Path
    from md_directives import create_tocs, include_files

    lines = Path("README.md").read_text().splitlines()
    lines = include_files(lines, Path("."))
    print("\\n".join(create_tocs(lines)))
"""

from .captions import create_captions
from .categorizer import CategorizerState, categorize
from .config import ConfigError, DirectivesConfig
from .exceptions import (
    CommandTimeoutError,
    DirectivesError,
    DocumentError,
    IncludeCycleError,
    IncludeDepthError,
    IncludeError,
    SectionError,
)
from .include import include_files
from .links import FragmentMapper, SectionLinkMapper, find_links, rewrite_links
from .models import Category, CategoryKind, HeadingRecord, LinkReference
from .paths import traverse
from .sections import split_sections, write_sections
from .slugify import SlugTable, generate_slug
from .toc import create_tocs, number_headings

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "categorize",
    "create_tocs",
    "create_captions",
    "include_files",
    "split_sections",
    "write_sections",
    # Building blocks
    "CategorizerState",
    "SlugTable",
    "generate_slug",
    "number_headings",
    "traverse",
    "find_links",
    "rewrite_links",
    "FragmentMapper",
    "SectionLinkMapper",
    # Data models
    "Category",
    "CategoryKind",
    "HeadingRecord",
    "LinkReference",
    "DirectivesConfig",
    # Exceptions
    "ConfigError",
    "DirectivesError",
    "DocumentError",
    "IncludeError",
    "IncludeDepthError",
    "IncludeCycleError",
    "CommandTimeoutError",
    "SectionError",
    # Version
    "__version__",
]
