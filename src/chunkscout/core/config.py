"""Configuration models and loaders for :mod:`chunkscout`."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from pathlib import Path
import os
from typing import Any, Literal, Mapping

import tomllib
import tomlkit
from pydantic import BaseModel, Field, field_validator, model_validator

from chunkscout.resources import get_resource

DEFAULTS_RESOURCE_NAME = "chunkscout.defaults.toml"
CONFIG_ENV_VAR = "CHUNKSCOUT_CONFIG"
LOG_LEVEL_ENV_VAR = "CHUNKSCOUT_LOG_LEVEL"

WorkerCount = int | Literal["auto"]


def _normalize_entries(values: Any) -> tuple[str, ...]:
    if isinstance(values, str):
        values = (values,)
    normalized: list[str] = []
    for value in values or ():
        entry = str(value).strip()
        if not entry:
            continue
        normalized.append(entry)
    if not normalized:
        raise ValueError("At least one entry must be configured.")
    return tuple(dict.fromkeys(normalized))


class AnalysisSettings(BaseModel):
    """Loader detection and rendering options."""

    loader_suffixes: tuple[str, ...] = Field(
        default=(".js",),
        description=(
            "Filename suffixes that mark a string literal as a chunk filename."
        ),
    )
    allow_partial_parse: bool = Field(
        default=False,
        description=(
            "Analyze sources even when the parser recovered from syntax errors."
        ),
    )
    indent_size: int = Field(
        default=2,
        ge=1,
        description="Indentation width used when pretty-printing loaders.",
    )

    model_config = {"str_strip_whitespace": True, "validate_assignment": True}

    @field_validator("loader_suffixes", mode="before")
    @classmethod
    def _validate_suffixes(cls, value: Any) -> tuple[str, ...]:
        return _normalize_entries(value)


class SandboxSettings(BaseModel):
    """Resource bounds applied to each synthesized loader call."""

    timeout_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Wall-clock bound per call in seconds (0 disables it).",
    )
    max_memory_bytes: int = Field(
        default=64 * 1024 * 1024,
        ge=0,
        description="Heap bound per call in bytes (0 disables it).",
    )

    model_config = {"validate_assignment": True}

    @property
    def timeout(self) -> float | None:
        return self.timeout_seconds or None

    @property
    def max_memory(self) -> int | None:
        return self.max_memory_bytes or None


class ScanSettings(BaseModel):
    """Directory traversal and worker pool options."""

    patterns: tuple[str, ...] = Field(
        default=("*.js",),
        description="gitwildmatch patterns selecting script files.",
    )
    follow_symlinks: bool = Field(
        default=False,
        description="Whether directory scans descend into symlinks.",
    )
    encoding: str = Field(
        default="utf-8",
        description="Text encoding used when reading script files.",
    )
    max_workers: WorkerCount = Field(
        default="auto",
        description="Worker count for parallel units (integer or 'auto').",
    )

    model_config = {"str_strip_whitespace": True, "validate_assignment": True}

    @field_validator("patterns", mode="before")
    @classmethod
    def _validate_patterns(cls, value: Any) -> tuple[str, ...]:
        return _normalize_entries(value)

    @field_validator("max_workers", mode="before")
    @classmethod
    def _validate_workers(cls, value: Any) -> WorkerCount:
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized == "auto":
                return "auto"
            try:
                value = int(normalized)
            except ValueError as exc:
                raise ValueError(
                    "max_workers must be an integer or 'auto'."
                ) from exc
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("max_workers must be an integer or 'auto'.")
        if value < 1:
            raise ValueError("max_workers must be >= 1.")
        return value

    def resolved_workers(self) -> int:
        """Return the concrete worker count.

        Example:
            >>> ScanSettings(max_workers=3).resolved_workers()
            3
        """

        if self.max_workers == "auto":
            return min(32, (os.cpu_count() or 1) + 4)
        return int(self.max_workers)


class SiteSettings(BaseModel):
    """Options for crawling a live page for script URLs."""

    default_scheme: Literal["https", "http"] = Field(
        default="https",
        description="Scheme prefixed to site URLs given without one.",
    )
    script_suffixes: tuple[str, ...] = Field(
        default=(".js",),
        description="URL path suffixes identifying script requests.",
    )
    fetch_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Timeout for downloading each discovered script.",
    )
    navigation_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Timeout for page navigation and load.",
    )
    headless: bool = Field(
        default=True,
        description="Run the browser without a visible window.",
    )

    model_config = {"str_strip_whitespace": True, "validate_assignment": True}

    @field_validator("script_suffixes", mode="before")
    @classmethod
    def _validate_suffixes(cls, value: Any) -> tuple[str, ...]:
        return _normalize_entries(value)


class AppConfig(BaseModel):
    """Root configuration for the :mod:`chunkscout` application."""

    log_level: str = Field(
        default="INFO",
        description="Default logging level for the application runtime.",
    )
    log_dir: Path | None = Field(
        default=None,
        description="Directory receiving rotating log files (optional).",
    )
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)
    sandbox: SandboxSettings = Field(default_factory=SandboxSettings)
    scan: ScanSettings = Field(default_factory=ScanSettings)
    site: SiteSettings = Field(default_factory=SiteSettings)

    model_config = {"str_strip_whitespace": True, "validate_assignment": True}

    @field_validator("log_dir", mode="before")
    @classmethod
    def _blank_log_dir(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _post_process(self) -> "AppConfig":
        object.__setattr__(self, "log_level", self.log_level.upper())
        if self.log_dir is not None:
            object.__setattr__(self, "log_dir", self.log_dir.expanduser())
        return self


def read_packaged_defaults_text() -> str:
    """Return the raw packaged defaults TOML content.

    Example:
        >>> text = read_packaged_defaults_text()
        >>> text.startswith("#")
        True
    """

    resource = get_resource(DEFAULTS_RESOURCE_NAME)
    return resource.read_text(encoding="utf-8")


def load_packaged_defaults() -> dict[str, Any]:
    """Load the packaged defaults as a plain dictionary.

    Example:
        >>> defaults = load_packaged_defaults()
        >>> defaults["log_level"]
        'INFO'
    """

    return tomllib.loads(read_packaged_defaults_text())


def _deep_merge(
    base: Mapping[str, Any],
    overlay: Mapping[str, Any],
) -> dict[str, Any]:
    """Recursively merge ``overlay`` into ``base`` returning a new dict."""

    merged: dict[str, Any] = dict(base)
    for key, value in overlay.items():
        if (
            key in merged
            and isinstance(merged[key], MappingABC)
            and isinstance(value, MappingABC)
        ):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    *,
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Build the effective configuration.

    Precedence (lowest first): packaged defaults, the user config file
    (``config_path`` or ``$CHUNKSCOUT_CONFIG``), ``$CHUNKSCOUT_LOG_LEVEL``,
    then ``overrides``.

    Raises:
        FileNotFoundError: If an explicitly requested config file is missing.
        tomllib.TOMLDecodeError: If the config file is not valid TOML.
        pydantic.ValidationError: If a value fails validation.
    """

    environ = os.environ if env is None else env
    data = load_packaged_defaults()

    if config_path is None and environ.get(CONFIG_ENV_VAR):
        config_path = Path(environ[CONFIG_ENV_VAR])
    if config_path is not None:
        path = config_path.expanduser()
        if not path.is_file():
            raise FileNotFoundError(f"Config file not found: {path}")
        data = _deep_merge(data, tomllib.loads(path.read_text("utf-8")))

    env_level = environ.get(LOG_LEVEL_ENV_VAR)
    if env_level:
        data["log_level"] = env_level

    if overrides:
        data = _deep_merge(data, overrides)

    return AppConfig(**data)


def render_config(config: AppConfig) -> str:
    """Render ``config`` as a TOML document.

    Example:
        >>> "[sandbox]" in render_config(AppConfig())
        True
    """

    document = tomlkit.document()
    document.add(tomlkit.comment("chunkscout effective configuration"))
    document["log_level"] = config.log_level
    document["log_dir"] = str(config.log_dir) if config.log_dir else ""

    payload = config.model_dump(mode="json", exclude={"log_level", "log_dir"})
    for section, values in payload.items():
        table = tomlkit.table()
        for key, value in values.items():
            table[key] = value
        document[section] = table
    return tomlkit.dumps(document)


__all__ = [
    "AnalysisSettings",
    "AppConfig",
    "CONFIG_ENV_VAR",
    "DEFAULTS_RESOURCE_NAME",
    "LOG_LEVEL_ENV_VAR",
    "SandboxSettings",
    "ScanSettings",
    "SiteSettings",
    "load_config",
    "load_packaged_defaults",
    "read_packaged_defaults_text",
    "render_config",
]
