"""High-level status queries on a single position."""

from __future__ import annotations

from typing import TYPE_CHECKING

from chessply.core.context import MoveContext
from chessply.core.enumerator import MoveEnumerator
from chessply.core.enums import Color, GameResult, PieceType
from chessply.core.types import file_of, rank_of

if TYPE_CHECKING:
    from chessply.core.position import Position

_PROBE = MoveEnumerator(MoveContext(annotate=False))


class Rules:
    """Static rule-checker that operates on a :class:`Position`."""

    @staticmethod
    def is_in_check(position: Position) -> bool:
        return position.is_in_check(position.side_to_move)

    @staticmethod
    def has_legal_move(position: Position) -> bool:
        return _PROBE.has_legal_move(position)

    @staticmethod
    def is_checkmate(position: Position) -> bool:
        return Rules.is_in_check(position) and not Rules.has_legal_move(position)

    @staticmethod
    def is_stalemate(position: Position) -> bool:
        return not Rules.is_in_check(position) and not Rules.has_legal_move(position)

    @staticmethod
    def is_insufficient_material(position: Position) -> bool:
        """K vs K, K+B vs K, K+N vs K, K+B vs K+B (same-color bishops)."""
        board = position.board
        white_occ = board.color_bitboard(Color.WHITE)
        black_occ = board.color_bitboard(Color.BLACK)
        total = (white_occ | black_occ).bit_count()

        if total == 2:
            return True

        if total == 3:
            return any(
                board.has_piece(color, pt)
                for color in Color
                for pt in (PieceType.KNIGHT, PieceType.BISHOP)
            )

        if total == 4:
            white_bishops = board.pieces(Color.WHITE, PieceType.BISHOP)
            black_bishops = board.pieces(Color.BLACK, PieceType.BISHOP)
            if len(white_bishops) == 1 and len(black_bishops) == 1:
                w_sq, b_sq = white_bishops[0], black_bishops[0]
                return (file_of(w_sq) + rank_of(w_sq)) % 2 == (
                    file_of(b_sq) + rank_of(b_sq)
                ) % 2

        return False

    @staticmethod
    def game_result(position: Position) -> GameResult:
        """Result decided by this position alone."""
        if not Rules.has_legal_move(position):
            if Rules.is_in_check(position):
                return (
                    GameResult.BLACK_WINS
                    if position.side_to_move == Color.WHITE
                    else GameResult.WHITE_WINS
                )
            return GameResult.DRAW  # stalemate

        if Rules.is_insufficient_material(position):
            return GameResult.DRAW
        return GameResult.IN_PROGRESS
