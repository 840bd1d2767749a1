"""Pytest configuration for repository test runs."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


def pytest_sessionstart() -> None:
    """Add src and repository root to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    for import_root in (project_root / "src", project_root):
        if str(import_root) not in sys.path:
            sys.path.insert(0, str(import_root))


@pytest.fixture(autouse=True)
def _clear_larder_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host LARDER_* variables out of config-dependent tests."""
    for variable in list(os.environ):
        if variable.startswith("LARDER_"):
            monkeypatch.delenv(variable, raising=False)
