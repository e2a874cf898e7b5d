"""Castling resolution for standard and Fischer-Random layouts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from chessply.core.changes import Step
from chessply.core.enums import CastlingSide, Keyword, PieceType
from chessply.core.piece import Piece
from chessply.core.types import Square, file_of, make_square, rank_of

if TYPE_CHECKING:
    from chessply.core.position import Position

_LOGGER = logging.getLogger(__name__)

# Destination files per side: (king, rook)
_DESTINATION_FILES: dict[CastlingSide, tuple[int, int]] = {
    CastlingSide.SHORT: (6, 5),
    CastlingSide.LONG: (2, 3),
}
_KEYWORDS: dict[CastlingSide, Keyword] = {
    CastlingSide.SHORT: Keyword.CASTLE,
    CastlingSide.LONG: Keyword.LONG_CASTLE,
}


def _between(a: Square, b: Square) -> range:
    """Squares strictly between *a* and *b* on one rank."""
    if a < b:
        return range(a + 1, b)
    return range(a - 1, b, -1)


def _span(a: Square, b: Square) -> range:
    """Squares from *a* (exclusive) to *b* (inclusive) on one rank."""
    if a <= b:
        return range(a + 1, b + 1)
    return range(a - 1, b - 1, -1)


@dataclass(frozen=True, slots=True)
class CastlingPlan:
    """King and rook coordinates of one castling move."""

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square
    keyword: Keyword

    @property
    def steps(self) -> tuple[Step, Step]:
        return (Step(self.king_from, self.king_to), Step(self.rook_from, self.rook_to))

    @property
    def side(self) -> CastlingSide:
        return CastlingSide.SHORT if self.keyword == Keyword.CASTLE else CastlingSide.LONG


class CastlingResolver:
    """Works out whether, and how, a king may castle on a given side."""

    @staticmethod
    def side_for(king_sq: Square, to_sq: Square) -> CastlingSide:
        """Side implied by a king heading from *king_sq* toward *to_sq*."""
        return CastlingSide.SHORT if file_of(to_sq) > file_of(king_sq) else CastlingSide.LONG

    @staticmethod
    def resolve(
        position: Position, side: CastlingSide, king_sq: Square
    ) -> CastlingPlan | None:
        """Castling plan for the king on *king_sq*, or ``None`` if not allowed.

        The king may not castle out of, through or into check.  Every square
        between king and rook must be empty, and both pieces need their
        travel squares free of anything but each other.
        """
        king = position.piece_at(king_sq)
        if king is None or king.piece_type != PieceType.KING:
            return None
        color = king.color

        rook_sq = position.can_castle(color, side)
        if rook_sq is None or rank_of(rook_sq) != rank_of(king_sq):
            return None
        if position.piece_at(rook_sq) != Piece(color, PieceType.ROOK):
            return None

        opponent = color.opposite
        if position.is_attacked(king_sq, opponent):
            return None

        # Walk from the king toward the rook; the walk must reach the rook.
        for sq in _between(king_sq, rook_sq):
            if position.piece_at(sq) is not None:
                _LOGGER.debug("Castling %s blocked at %d", side.name, sq)
                return None

        rank = rank_of(king_sq)
        king_file, rook_file = _DESTINATION_FILES[side]
        king_to = make_square(king_file, rank)
        rook_to = make_square(rook_file, rank)

        for sq in _span(king_sq, king_to):
            if sq != rook_sq and position.piece_at(sq) is not None:
                return None
            if position.is_attacked(sq, opponent):
                _LOGGER.debug("Castling %s crosses attacked square %d", side.name, sq)
                return None
        for sq in _span(rook_sq, rook_to):
            if sq != king_sq and position.piece_at(sq) is not None:
                return None

        return CastlingPlan(king_sq, king_to, rook_sq, rook_to, _KEYWORDS[side])
