"""Render scan outcomes for the terminal."""

from __future__ import annotations

from enum import StrEnum
import json
import threading

import typer

from chunkscout.analysis import ChunkLoader
from chunkscout.scan import UnitOutcome

__all__ = ["LoaderReporter", "ReportFormat", "format_loader_json", "format_loader_text"]


class ReportFormat(StrEnum):
    """Supported report layouts."""

    TEXT = "text"
    JSON = "json"


def format_loader_text(label: str, loader: ChunkLoader, *, indent_size: int = 2) -> str:
    """Return the multi-line text block describing ``loader``.

    The block lists the origin, the pretty-printed loader and one
    ``id: filename`` line per entry.
    """

    lines = [f"Found chunk loader in {label}:", loader.render(indent_size=indent_size)]
    entries = loader.sorted_entries()
    if entries:
        lines.append("")
        lines.extend(str(entry) for entry in entries)
    lines.append("")
    return "\n".join(lines)


def format_loader_json(label: str, loader: ChunkLoader, *, indent_size: int = 2) -> str:
    """Return a single-line JSON record describing ``loader``."""

    payload = {
        "label": label,
        "loader": loader.render(indent_size=indent_size),
        "entries": [
            {"id": entry.chunk_id.value, "filename": entry.filename}
            for entry in loader.sorted_entries()
        ],
    }
    return json.dumps(payload, ensure_ascii=False)


class LoaderReporter:
    """Thread-safe sink printing each unit's loaders as one block."""

    def __init__(
        self,
        *,
        fmt: ReportFormat = ReportFormat.TEXT,
        indent_size: int = 2,
    ) -> None:
        self._format = fmt
        self._indent_size = indent_size
        self._lock = threading.Lock()

    def __call__(self, outcome: UnitOutcome) -> None:
        if outcome.failed:
            with self._lock:
                typer.secho(
                    f"Failed to analyze {outcome.error}",
                    fg=typer.colors.RED,
                    err=True,
                )
            return

        formatter = (
            format_loader_json
            if self._format is ReportFormat.JSON
            else format_loader_text
        )
        # Render outside the lock; only the write must not interleave.
        blocks = [
            formatter(outcome.label, loader, indent_size=self._indent_size)
            for loader in outcome.loaders
        ]
        if not blocks:
            return
        with self._lock:
            for block in blocks:
                typer.echo(block)
