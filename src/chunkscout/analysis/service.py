"""Analysis facade turning source text into confirmed chunk loaders."""

from __future__ import annotations

from chunkscout.core.config import AnalysisSettings, SandboxSettings
from chunkscout.core.logging import Logger, get_logger

from .chunk_ids import extract_chunk_ids
from .detector import detect_candidates
from .models import ChunkLoader, ScriptAnalysis
from .sandbox import SandboxEvaluator
from .syntax import parse_script

__all__ = ["ChunkLoaderAnalyzer"]


class ChunkLoaderAnalyzer:
    """Parse, detect, extract and evaluate loaders for one source at a time.

    An analyzer owns its sandbox evaluator and is not safe to share between
    threads; build one per unit of work.
    """

    def __init__(
        self,
        *,
        settings: AnalysisSettings | None = None,
        sandbox_settings: SandboxSettings | None = None,
        evaluator: SandboxEvaluator | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._settings = settings or AnalysisSettings()
        self._logger = logger or get_logger(__name__, component="analyzer")
        self._evaluator = evaluator or SandboxEvaluator(
            settings=sandbox_settings,
            logger=self._logger,
        )

    @property
    def settings(self) -> AnalysisSettings:
        return self._settings

    def analyze(self, text: str, *, label: str = "<source>") -> ScriptAnalysis:
        """Return the loaders confirmed in ``text``.

        Raises:
            ScriptParseError: If ``text`` cannot be parsed.
        """

        tree = parse_script(
            text,
            label=label,
            allow_errors=self._settings.allow_partial_parse,
        )
        candidates = detect_candidates(
            tree.root_node,
            suffixes=self._settings.loader_suffixes,
        )
        logger = self._logger.bind(label=label)
        logger.debug("candidates-detected", count=len(candidates))

        loaders: list[ChunkLoader] = []
        for candidate in candidates:
            chunk_ids = extract_chunk_ids(candidate.node)
            if not chunk_ids:
                continue
            entries = self._evaluator.evaluate(candidate, chunk_ids)
            if not entries:
                logger.debug(
                    "candidate-discarded",
                    line=candidate.node.start_point[0] + 1,
                    chunk_ids=len(chunk_ids),
                )
                continue
            loaders.append(ChunkLoader(candidate=candidate, entries=entries))

        logger.debug("loaders-confirmed", count=len(loaders))
        return ScriptAnalysis(label=label, loaders=tuple(loaders))
