"""Chunk loader analysis for bundled JavaScript.

The pipeline parses a script with tree-sitter, flags loader-shaped functions,
collects the chunk identifiers each one dispatches on and runs the function
per identifier inside a disposable V8 context to recover chunk filenames.

Example:
    >>> from chunkscout.analysis import ChunkLoaderAnalyzer
    >>> analysis = ChunkLoaderAnalyzer().analyze(
    ...     'x.u = function(e){return {1:"a.js",2:"b.js"}[e]}'
    ... )
    >>> sorted(str(entry) for entry in analysis.loaders[0].entries)
    ['1: a.js', '2: b.js']
"""

from __future__ import annotations

from .chunk_ids import extract_chunk_ids
from .dependencies import DependencyPlan, resolve_dependencies
from .detector import build_assignment_map, detect_candidates, is_loader_shaped
from .errors import AnalysisError, ScriptParseError
from .models import ChunkEntry, ChunkId, ChunkLoader, LoaderCandidate, ScriptAnalysis
from .sandbox import SandboxEvaluator
from .service import ChunkLoaderAnalyzer
from .syntax import parse_script
from .walk import walk

__all__ = [
    "AnalysisError",
    "ChunkEntry",
    "ChunkId",
    "ChunkLoader",
    "ChunkLoaderAnalyzer",
    "DependencyPlan",
    "LoaderCandidate",
    "SandboxEvaluator",
    "ScriptAnalysis",
    "ScriptParseError",
    "build_assignment_map",
    "detect_candidates",
    "extract_chunk_ids",
    "is_loader_shaped",
    "parse_script",
    "resolve_dependencies",
    "walk",
]
