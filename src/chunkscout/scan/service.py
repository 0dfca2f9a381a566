"""Run analysis units in parallel with unit-level failure isolation."""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
import threading
from typing import Callable

from chunkscout.analysis import ChunkLoader, ChunkLoaderAnalyzer, ScriptParseError
from chunkscout.core.config import AppConfig
from chunkscout.core.logging import Logger, get_logger
from chunkscout.sources import SourceError, SourceRequest

__all__ = [
    "AnalyzerFactory",
    "OutcomeSink",
    "ScanService",
    "ScanSummary",
    "UnitOutcome",
]


@dataclass(frozen=True, slots=True)
class UnitOutcome:
    """Result of analyzing one source: its loaders or the failure message."""

    label: str
    loaders: tuple[ChunkLoader, ...] = ()
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(slots=True)
class ScanSummary:
    """Counters accumulated over a scan."""

    units: int = 0
    failed: int = 0
    loaders: int = 0
    entries: int = 0
    failures: list[UnitOutcome] = field(default_factory=list)

    def record(self, outcome: UnitOutcome) -> None:
        self.units += 1
        if outcome.failed:
            self.failed += 1
            self.failures.append(outcome)
            return
        self.loaders += len(outcome.loaders)
        self.entries += sum(len(loader.entries) for loader in outcome.loaders)


AnalyzerFactory = Callable[[], ChunkLoaderAnalyzer]
OutcomeSink = Callable[[UnitOutcome], None]


class ScanService:
    """Fan source requests out to a worker pool.

    Every unit gets its own analyzer (and so its own parser and sandbox
    contexts). ``sink`` is called from worker threads and must serialize its
    own output; :class:`~chunkscout.cli.report.LoaderReporter` does. A sink
    that raises marks its unit as failed and the batch continues.
    """

    def __init__(
        self,
        *,
        config: AppConfig,
        analyzer_factory: AnalyzerFactory | None = None,
        max_workers: int | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._config = config
        self._analyzer_factory = analyzer_factory or self._default_analyzer
        self._max_workers = max_workers or config.scan.resolved_workers()
        self._logger = logger or get_logger(__name__, component="scan")
        self._summary_lock = threading.Lock()

    def _default_analyzer(self) -> ChunkLoaderAnalyzer:
        return ChunkLoaderAnalyzer(
            settings=self._config.analysis,
            sandbox_settings=self._config.sandbox,
        )

    def run(
        self,
        requests: Iterable[SourceRequest],
        *,
        sink: OutcomeSink,
    ) -> ScanSummary:
        """Analyze every request and report each outcome to ``sink``."""

        summary = ScanSummary()
        with ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="chunkscout",
        ) as executor:
            futures = [
                executor.submit(self._run_unit, request, sink, summary)
                for request in requests
            ]
            for future in as_completed(futures):
                future.result()

        self._logger.info(
            "scan-complete",
            units=summary.units,
            failed=summary.failed,
            loaders=summary.loaders,
            entries=summary.entries,
        )
        return summary

    def analyze_unit(self, request: SourceRequest) -> UnitOutcome:
        """Acquire and analyze one request, converting failures to outcomes."""

        label = request.label
        logger = self._logger.bind(label=label)
        logger.debug("unit-start")
        try:
            text = request.fetch()
            analysis = self._analyzer_factory().analyze(text, label=label)
        except SourceError as exc:
            logger.warning("unit-unreadable", error=str(exc))
            return UnitOutcome(label=label, error=str(exc))
        except ScriptParseError as exc:
            logger.warning("unit-unparsable", error=str(exc))
            return UnitOutcome(label=label, error=str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.error("unit-failed", error=str(exc), exc_info=True)
            return UnitOutcome(label=label, error=f"{label}: {exc}")
        logger.debug("unit-complete", loaders=len(analysis.loaders))
        return UnitOutcome(label=label, loaders=analysis.loaders)

    def _run_unit(
        self,
        request: SourceRequest,
        sink: OutcomeSink,
        summary: ScanSummary,
    ) -> None:
        outcome = self.analyze_unit(request)
        try:
            sink(outcome)
        except Exception as exc:  # noqa: BLE001
            self._logger.error(
                "unit-report-failed",
                label=outcome.label,
                error=str(exc),
                exc_info=True,
            )
            outcome = UnitOutcome(label=outcome.label, error=f"{outcome.label}: {exc}")
        with self._summary_lock:
            summary.record(outcome)
