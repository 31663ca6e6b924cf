"""Configuration loading and management."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
import tomllib

from .constants import DEFAULT_MAX_FILE_SIZE, DEFAULT_MAX_INCLUDE_DEPTH, MAX_HEADING_LEVEL

CONFIG_TABLE = "md-directives"


@dataclass
class DirectivesConfig:
    """Configuration for the document transformations.

    Attributes:
        toc_titles: Titles for the generated tables of contents, in document
            order; the first one is used for TOCs beyond the list's length.
            A ``title`` attribute on a ``<toc>`` marker takes precedence.
        add_titles: Whether to put a title heading above each TOC.
        number_headings: Whether to number headings in ``1.2.3.`` fashion and
            use numbered TOC lists.
        excluded_headings: Heading titles left out of the TOCs.
        excluded_levels: Heading levels left out of numbering and the TOCs.
        max_file_size: Maximum size in bytes of a document that will be read.
        max_include_depth: Maximum nesting depth of Markdown inclusion.
        command_timeout: Timeout in seconds for included commands, or None.

    Examples:
        DirectivesConfig(number_headings=False, excluded_levels=[1])
    """

    # Tables of contents
    toc_titles: list[str] = field(default_factory=lambda: ["Table of contents"])
    add_titles: bool = True
    number_headings: bool = True
    excluded_headings: list[str] = field(default_factory=list)
    excluded_levels: list[int] = field(default_factory=list)

    # Limits
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH
    command_timeout: float | None = None


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`excluded_levels` must contain levels between 1 and 6")
    """


def load_config(search_path: Path) -> DirectivesConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.md-directives]`` table from `pyproject.toml` and the
    ``[md-directives]`` or ``[tool.md-directives]`` table from
    `.md-directives.toml` when present. Returns default values when no
    configuration is found. TOML files that cannot be read or decoded are
    skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        DirectivesConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If the table is present but not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("docs"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", CONFIG_TABLE)]
        )
        if pyproject_config is not None:
            return pyproject_config

        dotfile_config = _load_from_file(
            current / f".{CONFIG_TABLE}.toml",
            table_paths=[(CONFIG_TABLE,), ("tool", CONFIG_TABLE)],
        )
        if dotfile_config is not None:
            return dotfile_config

        parent = current.parent
        if parent == current:
            break
        current = parent

    return DirectivesConfig()


_MISSING = object()


def _load_from_file(
    config_file: Path, table_paths: list[tuple[str, ...]]
) -> DirectivesConfig | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> DirectivesConfig:
    table_display = ".".join(table_path)

    if raw_config is None or raw_config == {}:
        return DirectivesConfig()

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    # TOML keys may use hyphens, as in the rest of pyproject.toml
    normalized = {key.replace("-", "_"): value for key, value in raw_config.items()}
    try:
        return DirectivesConfig(**normalized)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def validate_config(config: DirectivesConfig) -> None:
    """Validate a `DirectivesConfig` instance.

    Args:
        config: Configuration to validate.

    Raises:
        ConfigError: If titles are missing, levels are out of range, flags are
            not booleans, or numeric limits are non-positive.

    Examples:
        validate_config(DirectivesConfig(excluded_levels=[1]))
    """
    if not isinstance(config.toc_titles, list) or not all(
        isinstance(title, str) for title in config.toc_titles
    ):
        raise ConfigError("`toc_titles` must be a list of strings")
    if not config.toc_titles or not all(title.strip() for title in config.toc_titles):
        raise ConfigError("`toc_titles` must contain non-empty titles")
    if not isinstance(config.excluded_headings, list) or not all(
        isinstance(heading, str) for heading in config.excluded_headings
    ):
        raise ConfigError("`excluded_headings` must be a list of strings")

    for name in ("add_titles", "number_headings"):
        if not isinstance(getattr(config, name), bool):
            raise ConfigError(f"`{name}` must be a boolean")

    if not isinstance(config.excluded_levels, list):
        raise ConfigError("`excluded_levels` must be a list of integers")
    _ensure_integers({f"excluded_levels[{i}]": v for i, v in enumerate(config.excluded_levels)})
    for level in config.excluded_levels:
        if not 1 <= level <= MAX_HEADING_LEVEL:
            raise ConfigError(f"`excluded_levels` must contain levels between 1 and {MAX_HEADING_LEVEL}")

    _ensure_integers(
        {
            "max_file_size": config.max_file_size,
            "max_include_depth": config.max_include_depth,
        }
    )
    _ensure_positive(
        {
            "max_file_size": config.max_file_size,
            "max_include_depth": config.max_include_depth,
        }
    )

    timeout = config.command_timeout
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError("`command_timeout` must be a positive number of seconds")


def apply_overrides(config: DirectivesConfig, **overrides: object) -> DirectivesConfig:
    """Apply override values to a `DirectivesConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None (and empty tuples from repeatable CLI options) are ignored.

    Returns:
        DirectivesConfig: New configuration with the provided overrides applied.
        The original configuration is returned when no changes are supplied.

    Raises:
        TypeError: If an override name is not defined on `DirectivesConfig`.

    Examples:
        updated = apply_overrides(config, number_headings=False, excluded_levels=(1,))
    """
    changes = {}
    for key, value in overrides.items():
        if value is None or value == ():
            continue
        changes[key] = list(value) if isinstance(value, tuple) else value
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> DirectivesConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None values
            are ignored.

    Returns:
        DirectivesConfig: Validated configuration.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), number_headings=False)
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    validate_config(config)
    return config


def _ensure_positive(values: dict[str, int]) -> None:
    for key, value in values.items():
        if value <= 0:
            raise ConfigError(f"`{key}` must be a positive integer")


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")
