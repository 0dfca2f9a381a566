"""Run candidate loaders inside disposable V8 contexts."""

from __future__ import annotations

from collections.abc import Iterable
import json
from typing import Any, Callable

from py_mini_racer import JSEvalException, LibNotFoundError, MiniRacer

from chunkscout.core.config import SandboxSettings
from chunkscout.core.logging import Logger, get_logger

from .dependencies import DependencyPlan, resolve_dependencies
from .models import ChunkEntry, ChunkId, LoaderCandidate

__all__ = ["UNDEFINED_TEXT", "SandboxEvaluator"]

UNDEFINED_TEXT = "undefined"

# Bindings may shadow the String builtin, so calls go through a saved copy.
_STRING_ALIAS = "__chunkscout_string__"

ContextFactory = Callable[[], Any]


class SandboxEvaluator:
    """Evaluate a loader once per chunk identifier.

    Each :meth:`evaluate` call owns one fresh context: bindings are declared,
    initializers run, then one synthesized call per identifier is evaluated
    and the context is closed. Instances hold no per-candidate state but are
    meant to be used from a single thread.
    """

    def __init__(
        self,
        *,
        settings: SandboxSettings | None = None,
        context_factory: ContextFactory = MiniRacer,
        logger: Logger | None = None,
    ) -> None:
        self._settings = settings or SandboxSettings()
        self._context_factory = context_factory
        self._logger = logger or get_logger(__name__, component="sandbox")

    def evaluate(
        self,
        candidate: LoaderCandidate,
        chunk_ids: Iterable[ChunkId],
        *,
        plan: DependencyPlan | None = None,
    ) -> frozenset[ChunkEntry]:
        """Return the entries ``candidate`` produces for ``chunk_ids``.

        ``plan`` defaults to :func:`resolve_dependencies` for the candidate.
        Identifiers whose call fails or yields ``undefined`` produce no entry;
        a context that cannot be prepared yields no entries at all.
        """

        if plan is None:
            plan = resolve_dependencies(candidate)

        try:
            context = self._context_factory()
        except (LibNotFoundError, JSEvalException) as exc:
            self._logger.debug("sandbox-context-failed", error=str(exc))
            return frozenset()

        try:
            try:
                self._prepare(context, plan)
            except JSEvalException as exc:
                self._logger.debug(
                    "candidate-unresolved",
                    bindings=list(plan.bindings),
                    error=str(exc),
                )
                return frozenset()

            source = candidate.source
            entries: set[ChunkEntry] = set()
            for chunk_id in chunk_ids:
                result = self._call(context, source, chunk_id)
                if result is None or result == UNDEFINED_TEXT:
                    continue
                entries.add(ChunkEntry(chunk_id=chunk_id, filename=result))
            return frozenset(entries)
        finally:
            context.close()

    def _prepare(self, context: Any, plan: DependencyPlan) -> None:
        context.eval(f"globalThis.{_STRING_ALIAS} = String;")
        for name in plan.bindings:
            context.eval(f"globalThis[{json.dumps(name)}] = {{}};")
        for statement in plan.initializers:
            self._eval(context, f"{statement};")

    def _call(self, context: Any, source: str, chunk_id: ChunkId) -> str | None:
        script = f"{_STRING_ALIAS}(({source})({chunk_id.render()}))"
        try:
            result = self._eval(context, script)
        except JSEvalException as exc:
            self._logger.debug(
                "chunk-id-failed",
                chunk_id=chunk_id.render(),
                error=str(exc),
            )
            return None
        return str(result)

    def _eval(self, context: Any, script: str) -> Any:
        return context.eval(
            script,
            timeout_sec=self._settings.timeout,
            max_memory=self._settings.max_memory,
        )
