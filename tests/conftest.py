"""Shared test fixtures."""

from __future__ import annotations

import io
from collections.abc import Callable

import pytest

from stepwise.config import Settings
from stepwise.runtime import ProgressManager, TerminalView


@pytest.fixture()
def plain_view() -> tuple[TerminalView, io.StringIO, io.StringIO]:
    """Non-interactive, colorless view writing into string buffers."""

    out, err = io.StringIO(), io.StringIO()
    return TerminalView(out, color=False, interactive=False, err_stream=err), out, err


@pytest.fixture()
def fast_manager(plain_view) -> Callable[..., ProgressManager]:
    """Build a manager polling every 10ms that renders into ``plain_view``."""

    view, _, _ = plain_view

    def _build(**overrides) -> ProgressManager:
        return ProgressManager(settings=Settings(poll_interval_ms=10, **overrides), view=view)

    return _build
