"""Reading and writing documents."""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

from .constants import DEFAULT_MAX_FILE_SIZE, MARKDOWN_EXTENSIONS
from .exceptions import DocumentError

MAX_FILE_SIZE_ENV_VAR = "MD_DIRECTIVES_MAX_FILE_SIZE"


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Resolve the maximum allowed document size.

    Args:
        default: Fallback value in bytes when the environment variable is unset.

    Returns:
        int: Maximum allowed file size in bytes.

    Raises:
        ValueError: If the environment value is not a positive integer.

    Examples:
        os.environ["MD_DIRECTIVES_MAX_FILE_SIZE"] = "204800"
        limit = get_max_file_size(default=102400)
    """
    env_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if env_value is None:
        return default

    try:
        max_size = int(env_value)
    except ValueError as error:
        error_message = (
            f"Invalid value for {MAX_FILE_SIZE_ENV_VAR}: {env_value} (expected positive integer)"
        )
        raise ValueError(error_message) from error

    if max_size <= 0:
        error_message = f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {max_size}."
        raise ValueError(error_message)

    return max_size


def normalize_filepath(raw_path: str) -> Path:
    """Resolve and validate the path of a Markdown document.

    Args:
        raw_path: User-supplied path (absolute or relative, ``~`` expanded).

    Returns:
        Path: Absolute path to the document.

    Raises:
        ValueError: If the path does not exist, is not a regular file, or has
            an unsupported extension.

    Examples:
        normalize_filepath("docs/README.md")
    """
    path = Path(raw_path).expanduser()

    try:
        resolved = path.resolve(strict=True)
    except FileNotFoundError as error:
        raise ValueError(f"{path} does not exist.") from error
    except OSError as error:
        raise ValueError(f"Error resolving {path}: {error}") from error

    if not resolved.is_file():
        raise ValueError(f"{resolved} is not a regular file.")

    if resolved.suffix.lower() not in MARKDOWN_EXTENSIONS:
        error_message = f"{resolved} is not a Markdown file.\n"
        error_message += f"Supported extensions are: {', '.join(MARKDOWN_EXTENSIONS)}"
        raise ValueError(error_message)

    return resolved


def collect_file_stat(filepath: Path) -> os.stat_result:
    """Return stat information for a regular file.

    Raises:
        DocumentError: If the path is inaccessible or not a regular file.
    """
    try:
        stat_result = os.stat(filepath)
    except OSError as error:
        raise DocumentError(f"Error accessing {filepath}: {error}") from error

    if not stat.S_ISREG(stat_result.st_mode):
        raise DocumentError(f"{filepath} is not a regular file.")

    return stat_result


def enforce_file_size(stat_result: os.stat_result, max_size: int, filepath: Path):
    """Guard against documents that exceed the configured maximum size.

    Raises:
        DocumentError: If `stat_result.st_size` exceeds `max_size`.
    """
    if stat_result.st_size > max_size:
        raise DocumentError(f"{filepath} exceeds the maximum allowed size of {max_size} bytes.")


def ensure_file_unchanged(
    expected_stat: os.stat_result, current_stat: os.stat_result, filepath: Path
):
    """Detect changes between two filesystem snapshots.

    Args:
        expected_stat: Stat captured before processing.
        current_stat: Stat captured after processing.
        filepath: Path to the file being monitored.

    Raises:
        DocumentError: If inode, device, size, or modification time differ.
    """
    fingerprint_before = (
        expected_stat.st_ino,
        expected_stat.st_dev,
        expected_stat.st_size,
        expected_stat.st_mtime_ns,
    )
    fingerprint_after = (
        current_stat.st_ino,
        current_stat.st_dev,
        current_stat.st_size,
        current_stat.st_mtime_ns,
    )

    if fingerprint_before != fingerprint_after:
        raise DocumentError(f"{filepath} changed during processing; refusing to overwrite.")


def read_document(filepath: Path, max_size: int = DEFAULT_MAX_FILE_SIZE) -> str:
    """Read a UTF-8 document after checking its size.

    Args:
        filepath: Path to the document.
        max_size: Maximum allowed size in bytes.

    Returns:
        str: The document text.

    Raises:
        DocumentError: If the file is missing, too large, or not valid UTF-8.

    Examples:
        text = read_document(Path("README.md"))
    """
    enforce_file_size(collect_file_stat(filepath), max_size, filepath)
    try:
        with open(filepath, "r", encoding="UTF-8", newline="") as handle:
            return handle.read()
    except UnicodeDecodeError as error:
        raise DocumentError(f"Invalid UTF-8 sequence in {filepath}: {error}") from error
    except OSError as error:
        raise DocumentError(f"Error accessing {filepath}: {error}") from error


def write_text(filepath: Path, text: str, expected_stat: os.stat_result | None = None):
    """Replace a file's content atomically.

    The text goes to a temporary file in the same directory, which then
    replaces `filepath`. Permissions of an existing file are kept.

    Args:
        filepath: Path to write.
        text: New content.
        expected_stat: Stat captured when the file was read; the write is
            refused when the file changed since.

    Raises:
        DocumentError: If the file changed since `expected_stat` or cannot be
            written.

    Examples:
        write_text(Path("README.md"), "# Title\\n", expected_stat=initial_stat)
    """
    if expected_stat is not None:
        ensure_file_unchanged(expected_stat, collect_file_stat(filepath), filepath)
        permissions = stat.S_IMODE(expected_stat.st_mode)
    elif filepath.exists():
        permissions = stat.S_IMODE(collect_file_stat(filepath).st_mode)
    else:
        # New files get the permissions open() would give them
        umask = os.umask(0)
        os.umask(umask)
        permissions = 0o666 & ~umask

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="UTF-8", newline="", delete=False, dir=filepath.parent
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            tmp_file.write(text)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
            os.chmod(tmp_file.name, permissions)

        os.replace(temp_path, filepath)
    except OSError as error:
        raise DocumentError(f"Error writing {filepath}: {error}") from error
    finally:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
