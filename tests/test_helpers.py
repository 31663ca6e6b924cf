from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from md_directives.exceptions import DocumentError
from md_directives.filesystem import (
    collect_file_stat,
    ensure_file_unchanged,
    get_max_file_size,
    normalize_filepath,
    read_document,
    write_text,
)


def test_get_max_file_size_uses_default(monkeypatch):
    monkeypatch.delenv("MD_DIRECTIVES_MAX_FILE_SIZE", raising=False)
    assert get_max_file_size(default=123) == 123


def test_get_max_file_size_reads_environment(monkeypatch):
    monkeypatch.setenv("MD_DIRECTIVES_MAX_FILE_SIZE", "2048")
    assert get_max_file_size(default=123) == 2048


def test_get_max_file_size_rejects_non_integer(monkeypatch):
    monkeypatch.setenv("MD_DIRECTIVES_MAX_FILE_SIZE", "invalid")
    with pytest.raises(ValueError):
        get_max_file_size()


def test_get_max_file_size_rejects_non_positive(monkeypatch):
    monkeypatch.setenv("MD_DIRECTIVES_MAX_FILE_SIZE", "0")
    with pytest.raises(ValueError):
        get_max_file_size()


def test_normalize_filepath_missing_file(tmp_path: Path):
    with pytest.raises(ValueError, match="does not exist"):
        normalize_filepath(str(tmp_path / "missing.md"))


def test_normalize_filepath_rejects_directory(tmp_path: Path):
    directory = tmp_path / "docs.md"
    directory.mkdir()
    with pytest.raises(ValueError, match="not a regular file"):
        normalize_filepath(str(directory))


def test_normalize_filepath_rejects_other_extensions(tmp_path: Path):
    target = tmp_path / "notes.txt"
    target.write_text("text\n", encoding="utf-8")
    with pytest.raises(ValueError, match="not a Markdown file"):
        normalize_filepath(str(target))


def test_normalize_filepath_resolves(tmp_path: Path, monkeypatch):
    target = tmp_path / "doc.md"
    target.write_text("# Doc\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert normalize_filepath("doc.md") == target.resolve()


def test_collect_file_stat_handles_missing_file(tmp_path: Path):
    with pytest.raises(DocumentError):
        collect_file_stat(tmp_path / "missing.md")


def test_collect_file_stat_rejects_directory(tmp_path: Path):
    with pytest.raises(DocumentError, match="not a regular file"):
        collect_file_stat(tmp_path)


def test_read_document_enforces_size_limit(tmp_path: Path):
    target = tmp_path / "big.md"
    target.write_text("x" * 100, encoding="utf-8")

    with pytest.raises(DocumentError, match="maximum allowed size"):
        read_document(target, max_size=10)


def test_read_document_rejects_invalid_utf8(tmp_path: Path):
    target = tmp_path / "bad.md"
    target.write_bytes(b"\xff\xfe# Heading\n")

    with pytest.raises(DocumentError, match="Invalid UTF-8"):
        read_document(target)


def test_read_document_keeps_line_endings(tmp_path: Path):
    target = tmp_path / "crlf.md"
    target.write_bytes(b"a\r\nb\r\n")

    assert read_document(target) == "a\r\nb\r\n"


def test_ensure_file_unchanged_detects_modification(tmp_path: Path):
    target = tmp_path / "doc.md"
    target.write_text("one\n", encoding="utf-8")
    before = collect_file_stat(target)
    target.write_text("one two\n", encoding="utf-8")

    with pytest.raises(DocumentError, match="changed during processing"):
        ensure_file_unchanged(before, collect_file_stat(target), target)


def test_write_text_preserves_permissions(tmp_path: Path):
    target = tmp_path / "doc.md"
    target.write_text("old\n", encoding="utf-8")
    os.chmod(target, 0o640)
    initial_stat = collect_file_stat(target)

    write_text(target, "new\n", expected_stat=initial_stat)

    assert target.read_text(encoding="utf-8") == "new\n"
    assert stat.S_IMODE(target.stat().st_mode) == 0o640
    assert list(tmp_path.iterdir()) == [target]


def test_write_text_refuses_changed_file(tmp_path: Path):
    target = tmp_path / "doc.md"
    target.write_text("old\n", encoding="utf-8")
    initial_stat = collect_file_stat(target)
    target.write_text("changed elsewhere\n", encoding="utf-8")

    with pytest.raises(DocumentError):
        write_text(target, "new\n", expected_stat=initial_stat)
    assert target.read_text(encoding="utf-8") == "changed elsewhere\n"


def test_write_text_creates_new_file(tmp_path: Path):
    target = tmp_path / "new.md"
    write_text(target, "content\n")
    assert target.read_text(encoding="utf-8") == "content\n"
