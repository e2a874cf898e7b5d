"""Tests for castling resolution in standard and Fischer-Random layouts."""

import pytest

from chessply.core.castling import CastlingPlan, CastlingResolver
from chessply.core.changes import Step
from chessply.core.enums import CastlingSide, Keyword
from chessply.core.notation import position_from_fen
from chessply.core.types import (
    A1, B1, C1, D1, E1, F1, G1, H1,
    C8, D8, E8,
)

OPEN_BACK_RANKS = "r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R w KQkq - 0 1"


class TestStandard:
    def test_short(self) -> None:
        plan = CastlingResolver.resolve(
            position_from_fen(OPEN_BACK_RANKS), CastlingSide.SHORT, E1
        )
        assert plan == CastlingPlan(E1, G1, H1, F1, Keyword.CASTLE)
        assert plan.steps == (Step(E1, G1), Step(H1, F1))
        assert plan.side == CastlingSide.SHORT

    def test_long(self) -> None:
        plan = CastlingResolver.resolve(
            position_from_fen(OPEN_BACK_RANKS), CastlingSide.LONG, E1
        )
        assert plan == CastlingPlan(E1, C1, A1, D1, Keyword.LONG_CASTLE)

    def test_black_long(self) -> None:
        pos = position_from_fen(OPEN_BACK_RANKS.replace(" w ", " b "))
        plan = CastlingResolver.resolve(pos, CastlingSide.LONG, E8)
        assert plan is not None
        assert (plan.king_to, plan.rook_to) == (C8, D8)

    def test_side_for(self) -> None:
        assert CastlingResolver.side_for(E1, G1) == CastlingSide.SHORT
        assert CastlingResolver.side_for(E1, C1) == CastlingSide.LONG


class TestRefusals:
    @pytest.mark.parametrize(
        ("fen", "side"),
        [
            # No right.
            ("r3k2r/8/8/8/8/8/8/R3K2R w Qkq - 0 1", CastlingSide.SHORT),
            # Piece in the way.
            ("r3k2r/8/8/8/8/8/8/R3KB1R w KQkq - 0 1", CastlingSide.SHORT),
            ("r3k2r/8/8/8/8/8/8/RN2K2R w KQkq - 0 1", CastlingSide.LONG),
            # King in check.
            ("r3k2r/8/8/8/8/8/4r3/R3K2R w KQkq - 0 1", CastlingSide.SHORT),
            # Passing through an attacked square.
            ("r3k2r/8/8/8/8/8/5r2/R3K2R w KQkq - 0 1", CastlingSide.SHORT),
            # Landing on an attacked square.
            ("r3k2r/8/8/8/8/8/2r5/R3K2R w KQkq - 0 1", CastlingSide.LONG),
        ],
    )
    def test_refused(self, fen: str, side: CastlingSide) -> None:
        assert CastlingResolver.resolve(position_from_fen(fen), side, E1) is None

    def test_attacked_rook_path_is_allowed(self) -> None:
        # b1 is attacked but only the rook crosses it.
        pos = position_from_fen("r3k2r/8/8/8/8/8/1r6/R3K2R w KQkq - 0 1")
        assert CastlingResolver.resolve(pos, CastlingSide.LONG, E1) is not None

    def test_not_a_king(self) -> None:
        pos = position_from_fen(OPEN_BACK_RANKS)
        assert CastlingResolver.resolve(pos, CastlingSide.SHORT, H1) is None


class TestFischerRandom:
    def test_king_on_b1_long(self) -> None:
        # King b1, rook a1: the pieces swap past each other to c1 / d1.
        pos = position_from_fen("6k1/8/8/8/8/8/8/RK6 w A - 0 1")
        plan = CastlingResolver.resolve(pos, CastlingSide.LONG, B1)
        assert plan == CastlingPlan(B1, C1, A1, D1, Keyword.LONG_CASTLE)

    def test_king_already_on_destination(self) -> None:
        pos = position_from_fen("6k1/8/8/8/8/8/8/6KR w H - 0 1")
        plan = CastlingResolver.resolve(pos, CastlingSide.SHORT, G1)
        assert plan == CastlingPlan(G1, G1, H1, F1, Keyword.CASTLE)

    def test_rook_on_king_destination(self) -> None:
        pos = position_from_fen("6k1/8/8/8/8/8/8/5KR1 w G - 0 1")
        plan = CastlingResolver.resolve(pos, CastlingSide.SHORT, F1)
        assert plan == CastlingPlan(F1, G1, G1, F1, Keyword.CASTLE)

    def test_blocked_rook_destination(self) -> None:
        # Knight on d1 sits where the a1 rook must land.
        pos = position_from_fen("6k1/8/8/8/8/8/8/RK1N4 w A - 0 1")
        assert CastlingResolver.resolve(pos, CastlingSide.LONG, B1) is None
