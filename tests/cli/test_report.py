"""Tests for :mod:`chunkscout.cli.report`."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import json

import pytest

from chunkscout.analysis import ChunkLoader, ChunkLoaderAnalyzer
from chunkscout.cli.report import (
    LoaderReporter,
    ReportFormat,
    format_loader_json,
    format_loader_text,
)
from chunkscout.scan import UnitOutcome


@pytest.fixture()
def loader() -> ChunkLoader:
    analysis = ChunkLoaderAnalyzer().analyze(
        'x = e => ({2: "b.js", 1: "a.js", main: "m.js"})[e];'
    )
    return analysis.loaders[0]


def test_text_block_lists_sorted_entries(loader: ChunkLoader) -> None:
    block = format_loader_text("bundle.js", loader)

    lines = block.splitlines()
    assert lines[0] == "Found chunk loader in bundle.js:"
    assert lines[-3:] == ["1: a.js", "2: b.js", '"main": m.js']
    assert loader.render() in block


def test_json_record(loader: ChunkLoader) -> None:
    payload = json.loads(format_loader_json("bundle.js", loader))

    assert payload["label"] == "bundle.js"
    assert payload["entries"] == [
        {"id": "1", "filename": "a.js"},
        {"id": "2", "filename": "b.js"},
        {"id": "main", "filename": "m.js"},
    ]
    assert payload["loader"] == loader.render()


def test_reporter_writes_loaders_and_failures(
    loader: ChunkLoader,
    capsys: pytest.CaptureFixture[str],
) -> None:
    reporter = LoaderReporter(fmt=ReportFormat.JSON)

    reporter(UnitOutcome(label="ok.js", loaders=(loader,)))
    reporter(UnitOutcome(label="empty.js"))
    reporter(UnitOutcome(label="bad.js", error="bad.js: HTTP 500"))

    captured = capsys.readouterr()
    records = [
        json.loads(line) for line in captured.out.splitlines() if line.startswith("{")
    ]
    assert [record["label"] for record in records] == ["ok.js"]
    assert "Failed to analyze bad.js: HTTP 500" in captured.err


def test_concurrent_units_print_whole_blocks(
    loader: ChunkLoader,
    capsys: pytest.CaptureFixture[str],
) -> None:
    reporter = LoaderReporter()
    outcomes = [
        UnitOutcome(label=f"unit-{index}.js", loaders=(loader, loader))
        for index in range(16)
    ]

    with ThreadPoolExecutor(max_workers=8) as executor:
        list(executor.map(reporter, outcomes))

    output = capsys.readouterr().out
    expected = [
        format_loader_text(outcome.label, loader) + "\n" for outcome in outcomes
    ]
    for block in expected:
        # Both loaders of a unit are written back to back.
        assert block + block in output
    assert len(output) == 2 * sum(len(block) for block in expected)
