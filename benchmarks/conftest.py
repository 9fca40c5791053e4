"""Benchmark fixtures and configuration."""

from __future__ import annotations

import pytest


@pytest.fixture
def fragments() -> list[str]:
    """Generate ~100KB worth of short fragments."""
    return [f"<li id='item-{i}'>Item {i} of the list</li>\n" for i in range(2500)]
