"""
Shared pytest fixtures and configuration for all tests.
"""

import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Add src directory to path so imports work
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from set_query.sets.registry import SetRegistry, registry  # noqa: E402


@pytest.fixture(autouse=True)
def reset_global_registry() -> Generator[None, None, None]:
    """Keep the global set registry empty and unfrozen between tests."""
    registry.clear()
    yield
    registry.clear()


@pytest.fixture
def set_registry() -> SetRegistry:
    """A fresh set registry with a few sets registered."""
    fresh = SetRegistry()
    fresh.register("featured", lambda *args: [3, 1, 2], description="Featured posts")
    fresh.register("by_ids", lambda *ids: list(ids), description="Posts with the given IDs")
    fresh.register("empty", lambda *args: [])
    return fresh
