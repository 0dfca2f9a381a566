"""Shared pytest fixtures for chunkscout tests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

import pytest

from chunkscout.analysis import LoaderCandidate, detect_candidates, parse_script


def _clear_root_handlers() -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        try:
            handler.close()
        except Exception:  # pragma: no cover
            pass


@pytest.fixture(autouse=True)
def reset_logging_state() -> Iterator[None]:
    """Ensure each test runs with a clean logging configuration."""

    _clear_root_handlers()
    yield
    _clear_root_handlers()


@pytest.fixture
def candidates_of() -> Callable[[str], tuple[LoaderCandidate, ...]]:
    """Return a helper parsing source text into loader candidates."""

    def _candidates(source: str) -> tuple[LoaderCandidate, ...]:
        tree = parse_script(source)
        return detect_candidates(tree.root_node)

    return _candidates


@pytest.fixture
def single_candidate(
    candidates_of: Callable[[str], tuple[LoaderCandidate, ...]],
) -> Callable[[str], LoaderCandidate]:
    """Return a helper asserting exactly one candidate is detected."""

    def _single(source: str) -> LoaderCandidate:
        found = candidates_of(source)
        assert len(found) == 1, f"expected one candidate, got {len(found)}"
        return found[0]

    return _single
