"""Promotion piece selection strategies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from chessply.core.changes import PROMOTION_PIECES
from chessply.core.enums import Color, PieceType


class PromotionChooser(Protocol):
    """Supplies the piece a pawn promotes to when the move did not say.

    Interactive implementations may block on user input and may return
    ``None`` when the user declines to choose.
    """

    def choose(self, color: Color) -> PieceType | None: ...


@dataclass(frozen=True, slots=True)
class FixedPromotionChooser:
    """Always answers with the same piece; never blocks."""

    piece: PieceType = PieceType.QUEEN

    def __post_init__(self) -> None:
        if self.piece not in PROMOTION_PIECES:
            raise ValueError(f"Cannot promote to {self.piece!r}")

    def choose(self, color: Color) -> PieceType | None:
        return self.piece


QUEEN_CHOOSER = FixedPromotionChooser(PieceType.QUEEN)

__all__ = [
    "FixedPromotionChooser",
    "PROMOTION_PIECES",
    "PromotionChooser",
    "QUEEN_CHOOSER",
]
