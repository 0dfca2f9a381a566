"""Batch scanning of many sources with per-unit isolation."""

from __future__ import annotations

from .service import (
    AnalyzerFactory,
    OutcomeSink,
    ScanService,
    ScanSummary,
    UnitOutcome,
)

__all__ = [
    "AnalyzerFactory",
    "OutcomeSink",
    "ScanService",
    "ScanSummary",
    "UnitOutcome",
]
