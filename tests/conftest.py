"""Shared pytest fixtures and configuration for the yt-html5 test suite.

Guidelines
----------
* No internet access in any test.
* yt-dlp must be mocked at the infra boundary.
* Core tests must be pure — no side effects.
* Every test gets its own shared hook store; the process-wide default
  is never touched.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog

from yt_html5.core.hooks import HookRegistry, Hooks, SharedRegistry


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo any ``configure_logging`` call made by a CLI test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def shared() -> SharedRegistry:
    return SharedRegistry()


@pytest.fixture
def registry(shared: SharedRegistry) -> HookRegistry:
    return HookRegistry(shared)


@pytest.fixture
def hooks(shared: SharedRegistry) -> Hooks:
    return Hooks(HookRegistry(shared))
