"""Tests for :mod:`chunkscout.resources`."""

from __future__ import annotations

import tomllib

import pytest

from chunkscout.core.config import DEFAULTS_RESOURCE_NAME
from chunkscout.resources import get_resource


def test_get_resource_missing_file_raises() -> None:
    with pytest.raises(FileNotFoundError):
        get_resource("does-not-exist.toml")


def test_packaged_defaults_are_valid_toml() -> None:
    text = get_resource(DEFAULTS_RESOURCE_NAME).read_text(encoding="utf-8")

    defaults = tomllib.loads(text)

    assert set(defaults) >= {"log_level", "analysis", "sandbox", "scan", "site"}
