import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a Click CLI runner for the md-directives commands."""
    return CliRunner()


@pytest.fixture()
def write_document(tmp_path: Path):
    """Writes dedented text to a file below the test's temporary directory."""

    def _write(filename: str, content: str) -> Path:
        path = tmp_path / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
        return path

    return _write
