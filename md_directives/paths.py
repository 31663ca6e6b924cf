"""Relative path computation between files of one document tree."""

from __future__ import annotations


def traverse(from_path: str, to_path: str) -> str:
    """Compute the path that leads from one file to another.

    Both paths are relative to the same root directory. The result, resolved
    against the directory of `from_path`, designates `to_path`.

    Args:
        from_path: File where the traversal starts.
        to_path: File where the traversal ends.

    Returns:
        str: Relative path from `from_path` to `to_path`; the empty string when
            both are identical, and `to_path` unchanged when either path is
            absolute.

    Examples:
        traverse("index.md", "chapters/a.md")  # "chapters/a.md"
        traverse("chapters/a.md", "images/fig.png")  # "../images/fig.png"
    """
    start = from_path[:-1] if from_path.endswith("/") else from_path
    end = to_path[:-1] if to_path.endswith("/") else to_path

    if start == end:
        return ""
    if start.startswith("/") or end.startswith("/"):
        return end

    start_components = start.split("/")
    end_components = end.split("/")

    common = 0
    while (
        common < len(start_components) - 1
        and common < len(end_components) - 1
        and start_components[common] == end_components[common]
    ):
        common += 1
    start_components = start_components[common:]
    end_components = end_components[common:]

    upwards = "../" * (len(start_components) - 1)
    return upwards + "/".join(end_components)
