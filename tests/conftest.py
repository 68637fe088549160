"""Test harness configuration.

This repo uses a `src/` layout. Make sure the in-repo package is imported
even when an older installed `bards_quill` is on the path.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

DEFAULT_NON_INTEGRATION_TIMEOUT_SECONDS = 30


def pytest_configure() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    src_path = str(repo_root / "src")
    if sys.path[:1] != [src_path] and src_path not in sys.path:
        sys.path.insert(0, src_path)


def pytest_collection_modifyitems(
    session: pytest.Session, config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Apply a default per-test timeout (via `pytest-timeout`) to unit tests."""
    _ = session, config
    for item in items:
        if item.get_closest_marker("integration") is not None:
            continue
        if item.get_closest_marker("timeout") is not None:
            continue
        item.add_marker(pytest.mark.timeout(DEFAULT_NON_INTEGRATION_TIMEOUT_SECONDS))


@pytest.fixture()
def state_dir(tmp_path: Path) -> Path:
    path = tmp_path / "state"
    path.mkdir()
    return path


@pytest.fixture()
def quote_rules():
    from bards_quill.core.markup import MarkupRule

    return (MarkupRule(id="q", start='"', end='"', color="#2563eb", name="Speech"),)
