"""
Shared pytest fixtures and configuration for haute tests.

This module provides:
- The ``closet`` directory of argument files used by resolver/executor tests
- A recording host instance
- Settings and logging context cleanup for test isolation
"""

import sys
from pathlib import Path
from typing import Any, Generator

import pytest

# Ensure haute package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from haute.core.config import clear_settings_cache
from haute.core.logging import clear_context

CLOSET = Path(__file__).parent / "closet"


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings_fixture() -> Generator[None, None, None]:
    """Drop cached settings and bound log context around each test."""
    clear_settings_cache()
    clear_context()
    yield
    clear_settings_cache()
    clear_context()


# =============================================================================
# Closet Fixtures
# =============================================================================


@pytest.fixture
def closet() -> Path:
    """Directory of argument files (python, json, yaml, packages, listings)."""
    return CLOSET


class Recorder:
    """
    Host instance that records every call made on it.

    ``calls`` holds ``(method, args)`` tuples in call order.
    """

    def __init__(self):
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.deep = DeepRecorder(self)

    def call_this(self, *args: Any) -> None:
        self.calls.append(("call_this", args))

    def call_this_too(self, *args: Any) -> None:
        self.calls.append(("call_this_too", args))

    def call_this_three(self, *args: Any) -> None:
        self.calls.append(("call_this_three", args))

    async def call_async(self, *args: Any) -> None:
        import asyncio

        await asyncio.sleep(0.001)
        self.calls.append(("call_async", args))

    @property
    def args(self) -> list[tuple[Any, ...]]:
        return [args for _, args in self.calls]


class DeepRecorder:
    """Nested target reached through ``deep.call_this``."""

    def __init__(self, root: Recorder):
        self.root = root
        self.context = False

    def call_this(self, *args: Any) -> None:
        self.context = True
        self.root.calls.append(("deep.call_this", args))


@pytest.fixture
def recorder() -> Recorder:
    """A fresh recording host instance."""
    return Recorder()
