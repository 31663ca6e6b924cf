from __future__ import annotations

import textwrap
import pytest
from pathlib import Path

from md_directives.config import (
    ConfigError,
    DirectivesConfig,
    apply_overrides,
    build_config,
    load_config,
    validate_config,
)


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def _write_dotfile(base: Path, body: str) -> Path:
    path = base / ".md-directives.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def test_loads_config_from_pyproject(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.md-directives]
        toc_titles = ["Contents", "In this chapter"]
        add_titles = false
        number_headings = false
        excluded_headings = ["Changelog"]
        excluded_levels = [1]
        max_file_size = 1
        max_include_depth = 2
        command_timeout = 3.5
        """,
    )

    config = load_config(tmp_path)

    assert config == DirectivesConfig(
        toc_titles=["Contents", "In this chapter"],
        add_titles=False,
        number_headings=False,
        excluded_headings=["Changelog"],
        excluded_levels=[1],
        max_file_size=1,
        max_include_depth=2,
        command_timeout=3.5,
    )


def test_loads_config_from_dotfile(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [md-directives]
        toc_titles = ["Dotfile"]
        """,
    )
    nested = tmp_path / "child"
    nested.mkdir()

    config = load_config(nested)

    assert config.toc_titles == ["Dotfile"]


def test_config_keys_may_use_hyphens(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.md-directives]
        number-headings = false
        excluded-levels = [2]
        """,
    )

    config = load_config(tmp_path)

    assert config.number_headings is False
    assert config.excluded_levels == [2]


def test_load_config_walks_up_directories(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.md-directives]
        add_titles = false
        """,
    )
    nested = tmp_path / "a" / "b" / "c"
    nested.mkdir(parents=True)

    assert load_config(nested).add_titles is False


def test_empty_config_table_stops_inheritance(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.md-directives]
        add_titles = false
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    _write_pyproject(
        child,
        """
        [tool.md-directives]
        """,
    )

    assert load_config(child) == DirectivesConfig()


def test_pyproject_without_table_is_skipped(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.md-directives]
        excluded_levels = [6]
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    _write_pyproject(
        child,
        """
        [project]
        name = "unrelated"
        """,
    )

    assert load_config(child).excluded_levels == [6]


def test_load_config_returns_defaults_when_missing(tmp_path: Path):
    assert load_config(tmp_path) == DirectivesConfig()


def test_load_config_skips_invalid_toml(tmp_path: Path):
    invalid_dir = tmp_path / "invalid"
    invalid_dir.mkdir()
    _write_pyproject(invalid_dir, "not = {valid")
    _write_pyproject(
        tmp_path,
        """
        [tool.md-directives]
        toc_titles = ["From parent"]
        """,
    )

    nested = invalid_dir / "child"
    nested.mkdir()

    assert load_config(nested).toc_titles == ["From parent"]


def test_load_config_errors_on_unknown_keys(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.md-directives]
        add_titles = true
        unexpected = true
        """,
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_apply_overrides_ignores_unset_values():
    config = DirectivesConfig()

    assert apply_overrides(config, add_titles=None, excluded_levels=()) is config
    updated = apply_overrides(config, excluded_levels=(1, 2), number_headings=False)
    assert updated.excluded_levels == [1, 2]
    assert updated.number_headings is False
    assert config.number_headings is True


def test_build_config_applies_overrides_over_file(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.md-directives]
        toc_titles = ["From file"]
        """,
    )

    config = build_config(tmp_path, toc_titles=("From CLI",))

    assert config.toc_titles == ["From CLI"]


def test_build_config_validates(tmp_path: Path):
    with pytest.raises(ConfigError):
        build_config(tmp_path, excluded_levels=(7,))


@pytest.mark.parametrize(
    "config",
    [
        DirectivesConfig(toc_titles=[]),
        DirectivesConfig(toc_titles=[""]),
        DirectivesConfig(toc_titles="Contents"),  # type: ignore[arg-type]
        DirectivesConfig(excluded_headings=[1]),  # type: ignore[list-item]
        DirectivesConfig(excluded_levels=[0]),
        DirectivesConfig(excluded_levels=[7]),
        DirectivesConfig(excluded_levels=["1"]),  # type: ignore[list-item]
        DirectivesConfig(add_titles="yes"),  # type: ignore[arg-type]
        DirectivesConfig(number_headings=1),  # type: ignore[arg-type]
        DirectivesConfig(max_file_size=0),
        DirectivesConfig(max_include_depth=-1),
        DirectivesConfig(max_include_depth="deep"),  # type: ignore[arg-type]
        DirectivesConfig(command_timeout=0),
        DirectivesConfig(command_timeout=True),  # type: ignore[arg-type]
    ],
)
def test_validate_config_rejects_invalid_values(config: DirectivesConfig):
    with pytest.raises(ConfigError):
        validate_config(config)


def test_validate_config_accepts_defaults():
    validate_config(DirectivesConfig())
