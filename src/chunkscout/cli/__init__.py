"""Command-line interface for :mod:`chunkscout`.

This module exposes the Typer application behind the ``chunkscout`` console
script and wires source acquisition into the scan service.

Example:
    >>> import typer
    >>> from chunkscout.cli import create_app
    >>> app = create_app()
    >>> isinstance(app, typer.Typer)
    True
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import tomllib
from typing import Any, Sequence

import httpx
from pydantic import ValidationError
import typer

from chunkscout.core.config import AppConfig, load_config, render_config
from chunkscout.core.logging import configure_logging, get_logger
from chunkscout.scan import ScanService, ScanSummary
from chunkscout.sources import (
    FileSource,
    SourceError,
    SourceRequest,
    UrlSource,
    discover_script_urls,
    iter_directory_sources,
)

from .report import LoaderReporter, ReportFormat

_app_help = (
    "Locate bundler chunk loaders in JavaScript and recover the chunk "
    "filenames they map identifiers to."
)


@dataclass(slots=True)
class CliState:
    """Configuration resolved by the top-level callback."""

    config: AppConfig


def _fail(message: str) -> typer.Exit:
    typer.secho(message, fg=typer.colors.RED, err=True)
    return typer.Exit(code=1)


def _state(ctx: typer.Context) -> CliState:
    state = ctx.obj
    if not isinstance(state, CliState):  # pragma: no cover - callback always runs
        raise _fail("CLI state missing; invoke through the chunkscout command.")
    return state


def _build_overrides(
    *,
    log_level: str | None,
    verbose: bool,
    log_dir: Path | None,
) -> dict[str, Any]:
    """Translate global CLI options into config overrides.

    Example:
        >>> _build_overrides(log_level=None, verbose=True, log_dir=None)
        {'log_level': 'DEBUG'}
    """

    overrides: dict[str, Any] = {}
    if log_level:
        overrides["log_level"] = log_level
    if verbose:
        overrides["log_level"] = "DEBUG"
    if log_dir is not None:
        overrides["log_dir"] = str(log_dir)
    return overrides


def _run_scan(
    config: AppConfig,
    requests: Sequence[SourceRequest],
    *,
    fmt: ReportFormat,
    workers: int | None,
) -> ScanSummary:
    reporter = LoaderReporter(fmt=fmt, indent_size=config.analysis.indent_size)
    service = ScanService(config=config, max_workers=workers)
    return service.run(requests, sink=reporter)


def _finish(summary: ScanSummary) -> None:
    typer.secho(
        f"Scanned {summary.units} source(s): {summary.loaders} loader(s), "
        f"{summary.entries} chunk(s), {summary.failed} failure(s).",
        fg=typer.colors.YELLOW if summary.failed else typer.colors.GREEN,
        err=True,
    )
    if summary.failed:
        raise typer.Exit(code=1)


_FORMAT_OPTION = typer.Option(
    ReportFormat.TEXT,
    "--format",
    "-f",
    case_sensitive=False,
    help="Report layout: human-readable text or one JSON object per loader.",
)
_WORKERS_OPTION = typer.Option(
    None,
    "--workers",
    "-j",
    min=1,
    help="Parallel units (defaults to scan.max_workers).",
)


def create_app() -> "typer.Typer":
    """Return the Typer application powering the ``chunkscout`` CLI."""

    app = typer.Typer(
        help=_app_help,
        no_args_is_help=True,
        rich_markup_mode="rich",
    )

    @app.callback()
    def main_callback(
        ctx: typer.Context,
        config_path: Path | None = typer.Option(
            None,
            "--config",
            "-c",
            help="TOML config file (defaults to $CHUNKSCOUT_CONFIG).",
        ),
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            "-l",
            help="Override the logging level (DEBUG/INFO/WARNING/ERROR).",
        ),
        verbose: bool = typer.Option(
            False,
            "--verbose",
            "-v",
            help="Log every processed source (same as --log-level debug).",
        ),
        log_dir: Path | None = typer.Option(
            None,
            "--log-dir",
            help="Also write rotating JSON logs to this directory.",
        ),
    ) -> None:
        """Load configuration and logging before dispatching a command."""

        overrides = _build_overrides(
            log_level=log_level,
            verbose=verbose,
            log_dir=log_dir,
        )
        try:
            config = load_config(config_path=config_path, overrides=overrides)
            configure_logging(level=config.log_level, log_dir=config.log_dir)
        except (
            FileNotFoundError,
            tomllib.TOMLDecodeError,
            ValidationError,
            ValueError,
        ) as exc:
            raise _fail(f"Configuration error: {exc}") from exc
        ctx.obj = CliState(config=config)

    @app.command("file", help="Analyze one or more JavaScript files.")
    def file_command(
        ctx: typer.Context,
        paths: list[Path] = typer.Argument(..., help="Script files to analyze."),
        fmt: ReportFormat = _FORMAT_OPTION,
        workers: int | None = _WORKERS_OPTION,
    ) -> None:
        config = _state(ctx).config
        requests = [
            FileSource(path=path, encoding=config.scan.encoding) for path in paths
        ]
        _finish(_run_scan(config, requests, fmt=fmt, workers=workers))

    @app.command("dir", help="Analyze every script file under a directory.")
    def dir_command(
        ctx: typer.Context,
        root: Path = typer.Argument(..., help="Directory to scan recursively."),
        pattern: list[str] = typer.Option(
            None,
            "--pattern",
            "-p",
            help="gitwildmatch pattern selecting files (repeatable).",
        ),
        fmt: ReportFormat = _FORMAT_OPTION,
        workers: int | None = _WORKERS_OPTION,
    ) -> None:
        config = _state(ctx).config
        patterns = tuple(pattern) if pattern else config.scan.patterns
        try:
            requests = list(
                iter_directory_sources(
                    root,
                    patterns=patterns,
                    follow_symlinks=config.scan.follow_symlinks,
                    encoding=config.scan.encoding,
                )
            )
        except SourceError as exc:
            raise _fail(str(exc)) from exc
        get_logger(__name__, command="dir").info(
            "directory-scanned",
            root=str(root),
            files=len(requests),
        )
        _finish(_run_scan(config, requests, fmt=fmt, workers=workers))

    @app.command("site", help="Render a page and analyze the scripts it loads.")
    def site_command(
        ctx: typer.Context,
        url: str = typer.Argument(..., help="Page URL (scheme optional)."),
        fmt: ReportFormat = _FORMAT_OPTION,
        workers: int | None = _WORKERS_OPTION,
    ) -> None:
        config = _state(ctx).config
        try:
            urls = discover_script_urls(url, settings=config.site)
        except SourceError as exc:
            raise _fail(str(exc)) from exc

        timeout = httpx.Timeout(config.site.fetch_timeout_seconds)
        with httpx.Client(timeout=timeout, follow_redirects=True) as client:
            requests = [UrlSource(url=script, client=client) for script in urls]
            summary = _run_scan(config, requests, fmt=fmt, workers=workers)
        _finish(summary)

    @app.command("config", help="Print the effective configuration as TOML.")
    def config_command(ctx: typer.Context) -> None:
        typer.echo(render_config(_state(ctx).config), nl=False)

    return app


__all__ = ["CliState", "create_app"]
