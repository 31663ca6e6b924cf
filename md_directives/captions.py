"""Figure and table captions."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .categorizer import categorize
from .constants import CAPTION_TERMINATORS
from .document import Document
from .models import CategoryKind

logger = logging.getLogger(__name__)


def terminate_caption(caption: str) -> str:
    """End a caption with a period unless it ends in punctuation already."""
    if caption and caption[-1] not in CAPTION_TERMINATORS:
        return f"{caption}."
    return caption


def create_captions(lines: Sequence[str]) -> list[str]:
    """Insert numbered captions below figure and table directives.

    A figure directive is followed by the image and an italic
    ``Fig. N: caption`` line; a table directive by an italic
    ``Tab. N: caption`` line. Non-blank lines between a directive and the next
    blank line hold the previously generated caption and are replaced, so the
    table itself must follow after a blank line.

    Args:
        lines: Document lines without terminators.

    Returns:
        list[str]: The document with fresh captions.

    Examples:
        create_captions(['<!-- <table caption="Results"> -->', "", "| a |"])
        # ['<!-- <table caption="Results"> -->', "*Tab. 1: Results.*", "", "| a |"]
    """
    document = Document(lines)
    figure_index = 0
    table_index = 0
    in_caption = False

    for index, (line, category) in enumerate(zip(lines, categorize(lines))):
        if category.kind is CategoryKind.FIGURE and category.directive is not None:
            figure_index += 1
            in_caption = True
            caption = category.directive.get("caption", "")
            document.append(
                index,
                [
                    f"![{caption}]({category.directive.get('file', '')})",
                    f"*Fig. {figure_index}: {terminate_caption(caption)}*",
                ],
            )
        elif category.kind is CategoryKind.TABLE and category.directive is not None:
            table_index += 1
            in_caption = True
            caption = category.directive.get("caption", "")
            document.append(index, [f"*Tab. {table_index}: {terminate_caption(caption)}*"])
        elif not in_caption:
            continue
        elif not line.strip():
            in_caption = False
        else:
            document.delete(index)

    logger.debug("Captioned %d figures and %d tables", figure_index, table_index)
    return document.snapshot()
