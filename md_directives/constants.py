"""Constants used across the md-directives package."""

from __future__ import annotations

import re

# Markdown patterns
ATX_HEADING_PATTERN = re.compile(r"^ *(?P<marks>#{1,6}) +(?P<text>.*)$")
SETEXT_UNDERLINE_PATTERNS = {
    1: re.compile(r"^ *=+ *$"),
    2: re.compile(r"^ *-+ *$"),
}
NUMBERING_PATTERN = re.compile(r"^(?:[0-9]+\.)+ +")
BACKTICK_FENCE = "```"
TILDE_FENCE = "~~~"
INDENTED_CODE_PREFIX = "    "
LIST_MARKERS = "*+-"
COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"

# Directive comments, matched against the whole line
TOC_START_PATTERN = re.compile(r'^<!-- <toc(?: title="(?P<title>.*)")?> -->$')
TOC_END_PATTERN = re.compile(r"^<!-- </toc> -->$")
SECTION_START_PATTERN = re.compile(r'^<!-- <section file="(?P<file>.*)"> -->$')
SECTION_END_PATTERN = re.compile(r"^<!-- </section> -->$")
FIGURE_PATTERN = re.compile(r'^<!-- <figure file="(?P<file>.*)" caption="(?P<caption>.*)"> -->$')
TABLE_PATTERN = re.compile(r'^<!-- <table caption="(?P<caption>.*)"> -->$')
INCLUDE_START_PATTERN = re.compile(
    r'^<!-- <include (?P<source>file|command)="(?P<target>.*?)"'
    r'(?: lang="(?P<lang>[^"]*)")?'
    r'(?: md-file="(?P<md_file>[^"]*)")?> -->$'
)
INCLUDE_END_PATTERN = re.compile(r"^<!-- </include> -->$")

INCLUDE_END_MARKER = "<!-- </include> -->"

# TOC rendering
NUMBERED_MARKER = "1."
BULLET_MARKER = "-"
MAX_HEADING_LEVEL = 6
CAPTION_TERMINATORS = ".:!?"

MARKDOWN_EXTENSIONS = (".md", ".markdown", ".mdown", ".mkd", ".mkdn")
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_MAX_INCLUDE_DEPTH = 8
