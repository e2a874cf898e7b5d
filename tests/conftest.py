"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator

import pytest

from chessply.core.context import MoveContext
from chessply.core.enums import Color, PieceType

# Linux CI runners are often headless. Force an offscreen backend only there.
if (
    sys.platform.startswith("linux")
    and "QT_QPA_PLATFORM" not in os.environ
    and "DISPLAY" not in os.environ
    and "WAYLAND_DISPLAY" not in os.environ
):
    os.environ["QT_QPA_PLATFORM"] = "offscreen"


class RecordingChooser:
    """Promotion chooser that remembers every request."""

    def __init__(self, answer: PieceType | None = PieceType.QUEEN) -> None:
        self.answer = answer
        self.calls: list[Color] = []

    def choose(self, color: Color) -> PieceType | None:
        self.calls.append(color)
        return self.answer


@pytest.fixture
def chooser() -> RecordingChooser:
    return RecordingChooser()


@pytest.fixture
def quiet() -> MoveContext:
    """Context that skips check / mate tagging."""
    return MoveContext(annotate=False)


@pytest.fixture(scope="session")
def qapp() -> Iterator[object]:
    """Provide a singleton QApplication for UI tests."""
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app
