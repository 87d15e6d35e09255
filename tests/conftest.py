"""Shared fixtures for chainware tests."""

from __future__ import annotations

from types import SimpleNamespace
from typing import TYPE_CHECKING

import pytest

from chainware.instrumentation import HookRegistry, set_hook_registry

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def ctx() -> SimpleNamespace:
    """Fresh mutable context with an event trail."""
    return SimpleNamespace(trail=[])


@pytest.fixture
def hooks() -> Iterator[HookRegistry]:
    """Isolated hook registry installed for the duration of one test."""
    registry = HookRegistry()
    set_hook_registry(registry)
    yield registry
    registry.clear()
    set_hook_registry(HookRegistry())
