"""Domain-specific exceptions for loader analysis."""

from __future__ import annotations


class AnalysisError(RuntimeError):
    """Base error for analysis failures."""


class ScriptParseError(AnalysisError):
    """Raised when source text is not syntactically valid JavaScript."""

    def __init__(
        self,
        message: str,
        *,
        label: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.label = label
        self.line = line
        self.column = column
        location = ""
        if line is not None:
            location = f" at line {line}"
            if column is not None:
                location += f", column {column}"
        prefix = f"{label}: " if label else ""
        super().__init__(f"{prefix}{message}{location}")


__all__ = ["AnalysisError", "ScriptParseError"]
