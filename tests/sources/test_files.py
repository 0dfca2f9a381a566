"""Tests for :mod:`chunkscout.sources.files`."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from chunkscout.sources import (
    FileSource,
    SourceNotFoundError,
    SourceReadError,
    SourceRequest,
    iter_directory_sources,
)


def _write(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_file_source_reads_text(tmp_path: Path) -> None:
    path = _write(tmp_path / "main.js", "var a = 1;")
    source = FileSource(path=path)

    assert isinstance(source, SourceRequest)
    assert source.label == str(path)
    assert source.fetch() == "var a = 1;"


def test_file_source_reports_missing_files(tmp_path: Path) -> None:
    source = FileSource(path=tmp_path / "absent.js")

    with pytest.raises(SourceReadError) as excinfo:
        source.fetch()

    assert "absent.js" in str(excinfo.value)


def test_file_source_reports_undecodable_files(tmp_path: Path) -> None:
    path = tmp_path / "binary.js"
    path.write_bytes(b"\xff\xfe\x00var")

    with pytest.raises(SourceReadError, match="not valid utf-8"):
        FileSource(path=path).fetch()


def test_directory_sources_are_recursive_and_sorted(tmp_path: Path) -> None:
    _write(tmp_path / "b.js")
    _write(tmp_path / "a.js")
    _write(tmp_path / "nested" / "deep" / "c.js")
    _write(tmp_path / "readme.md")

    sources = list(iter_directory_sources(tmp_path))

    root = tmp_path.resolve()
    assert [Path(source.label).relative_to(root).as_posix() for source in sources] == [
        "a.js",
        "b.js",
        "nested/deep/c.js",
    ]


def test_directory_sources_honor_patterns(tmp_path: Path) -> None:
    _write(tmp_path / "static" / "js" / "main.js")
    _write(tmp_path / "static" / "js" / "main.mjs")
    _write(tmp_path / "vendor" / "lib.js")

    sources = list(
        iter_directory_sources(tmp_path, patterns=("static/**/*.js", "*.mjs"))
    )

    names = sorted(Path(source.label).name for source in sources)
    assert names == ["main.js", "main.mjs"]


def test_directory_sources_skip_symlinks_by_default(tmp_path: Path) -> None:
    target = tmp_path / "outside"
    _write(target / "linked.js")
    root = tmp_path / "root"
    _write(root / "own.js")
    try:
        os.symlink(target, root / "link", target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks unavailable")

    plain = [Path(s.label).name for s in iter_directory_sources(root)]
    followed = [
        Path(s.label).name
        for s in iter_directory_sources(root, follow_symlinks=True)
    ]

    assert plain == ["own.js"]
    assert followed == ["linked.js", "own.js"]


def test_directory_sources_survive_symlink_loops(tmp_path: Path) -> None:
    root = tmp_path / "root"
    _write(root / "a.js")
    try:
        os.symlink(root, root / "loop", target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks unavailable")

    sources = list(iter_directory_sources(root, follow_symlinks=True))

    assert [Path(s.label).name for s in sources] == ["a.js"]


def test_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(SourceNotFoundError, match="Directory not found"):
        list(iter_directory_sources(tmp_path / "absent"))


def test_file_root_raises(tmp_path: Path) -> None:
    path = _write(tmp_path / "main.js")

    with pytest.raises(SourceNotFoundError, match="Not a directory"):
        list(iter_directory_sources(path))
