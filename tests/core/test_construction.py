"""Tests for construct_ply: validation and special-move detection."""

import logging

import pytest

from chessply.core.changes import Annotation, Step
from chessply.core.construction import construct_ply
from chessply.core.context import MoveContext
from chessply.core.enums import Color, Keyword, PieceType
from chessply.core.errors import (
    AmbiguousPromotionError,
    CastlingResolutionError,
    ChessplyError,
)
from chessply.core.notation import position_from_fen
from chessply.core.piece import Piece
from chessply.core.position import Position
from chessply.core.promotion import FixedPromotionChooser
from chessply.core.types import (
    A1, B1, C1, D1, E1, F1, G1, H1,
    E2, E3, E4, E5, E7, E8,
    parse_square,
)

CASTLE_READY = "r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R w KQkq - 0 1"
PROMOTION_READY = "8/4P3/8/8/8/8/k7/4K3 w - - 0 1"
FRC_KING_FAR = "6k1/8/8/8/8/8/8/1KR5 w C - 0 1"


class TestValidation:
    def test_legal_move(self) -> None:
        ply = construct_ply(Position.initial(), Step(E2, E4))
        assert ply is not None
        assert ply.changes == (Step(E2, E4),)

    def test_tuple_steps_accepted(self) -> None:
        ply = construct_ply(Position.initial(), (E2, E4))
        assert ply is not None
        assert ply.source == E2

    def test_illegal_move_returns_none(self) -> None:
        assert construct_ply(Position.initial(), Step(E2, E5)) is None

    def test_empty_origin_returns_none(self) -> None:
        assert construct_ply(Position.initial(), Step(E4, E5)) is None

    def test_rejection_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="chessply.core.construction"):
            construct_ply(Position.initial(), Step(E2, E5))
        assert "Rejected illegal move e2e5" in caplog.text

    def test_validated_skips_legality(self, quiet: MoveContext) -> None:
        ply = construct_ply(
            Position.initial(), Step(E2, E5), validated=True, context=quiet
        )
        assert ply is not None

    def test_status_only_ply(self) -> None:
        ply = construct_ply(Position.initial(), Keyword.RESIGN)
        assert ply is not None
        assert ply.has(Keyword.RESIGN)
        assert ply.is_final()

    def test_unsupported_change_type(self) -> None:
        with pytest.raises(TypeError):
            construct_ply(Position.initial(), "e2e4")  # type: ignore[arg-type]


class TestCastling:
    def test_two_file_king_move_becomes_castle(self) -> None:
        ply = construct_ply(position_from_fen(CASTLE_READY), Step(E1, G1))
        assert ply is not None
        assert ply.has(Keyword.CASTLE)
        assert ply.changes == (Step(E1, G1), Step(H1, F1))

    def test_long_castle(self) -> None:
        ply = construct_ply(position_from_fen(CASTLE_READY), Step(E1, C1))
        assert ply is not None
        assert ply.has(Keyword.LONG_CASTLE)
        assert ply.changes == (Step(E1, C1), Step(A1, D1))

    def test_king_onto_own_rook(self) -> None:
        ply = construct_ply(position_from_fen(CASTLE_READY), Step(E1, H1))
        assert ply is not None
        assert ply.has(Keyword.CASTLE)
        assert ply.successor.piece_at(G1) == Piece(Color.WHITE, PieceType.KING)

    def test_fischer_random_king_onto_rook(self) -> None:
        pos = position_from_fen("6k1/8/8/8/8/8/8/RK6 w A - 0 1")
        ply = construct_ply(pos, Step(B1, A1))
        assert ply is not None
        assert ply.has(Keyword.LONG_CASTLE)
        assert ply.changes == (Step(B1, C1), Step(A1, D1))

    def test_fischer_random_long_king_move_castles(self) -> None:
        pos = position_from_fen(FRC_KING_FAR)
        ply = construct_ply(pos, Step(B1, G1))
        assert ply is not None
        assert ply.has(Keyword.CASTLE)
        assert ply.changes == (Step(B1, G1), Step(C1, F1))
        assert ply.successor.piece_at(F1) == Piece(Color.WHITE, PieceType.ROOK)
        assert ply.successor.piece_at(C1) is None

    def test_fischer_random_long_king_move_validated(self, quiet: MoveContext) -> None:
        pos = position_from_fen(FRC_KING_FAR)
        ply = construct_ply(pos, Step(B1, G1), validated=True, context=quiet)
        assert ply is not None
        assert ply.has(Keyword.CASTLE)
        assert ply.changes == (Step(B1, G1), Step(C1, F1))

    def test_king_step_preferred_over_castle(self) -> None:
        pos = position_from_fen("6k1/8/8/8/8/8/8/RK6 w A - 0 1")
        ply = construct_ply(pos, Step(B1, C1))
        assert ply is not None
        assert not ply.is_castle
        assert ply.changes == (Step(B1, C1),)

    def test_explicit_keyword(self) -> None:
        ply = construct_ply(
            position_from_fen(CASTLE_READY), Step(E1, G1), Keyword.CASTLE
        )
        assert ply is not None
        assert [n.keyword for n in ply.annotations].count(Keyword.CASTLE) == 1
        assert len(ply.changes) == 2

    def test_both_steps_supplied(self) -> None:
        ply = construct_ply(
            position_from_fen(CASTLE_READY),
            Step(E1, G1),
            Step(H1, F1),
            Keyword.CASTLE,
        )
        assert ply is not None
        assert ply.changes == (Step(E1, G1), Step(H1, F1))

    def test_two_steps_without_keyword_rejected(self) -> None:
        pos = position_from_fen(CASTLE_READY)
        assert construct_ply(pos, Step(E1, G1), Step(H1, F1)) is None

    def test_blocked_castle_rejected(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3KB1R w KQkq - 0 1")
        assert construct_ply(pos, Step(E1, G1)) is None

    def test_validated_unresolvable_castle_raises(self, quiet: MoveContext) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w - - 0 1")
        with pytest.raises(CastlingResolutionError):
            construct_ply(pos, Step(E1, G1), validated=True, context=quiet)


class TestPromotion:
    def test_chooser_asked_once(self, chooser) -> None:
        ctx = MoveContext(chooser=chooser)
        ply = construct_ply(position_from_fen(PROMOTION_READY), Step(E7, E8), context=ctx)
        assert ply is not None
        assert ply.promotion == PieceType.QUEEN
        assert chooser.calls == [Color.WHITE]

    def test_named_piece_skips_chooser(self, chooser) -> None:
        ctx = MoveContext(chooser=chooser)
        ply = construct_ply(
            position_from_fen(PROMOTION_READY),
            Step(E7, E8),
            Annotation(Keyword.PROMOTE, PieceType.ROOK),
            context=ctx,
        )
        assert ply is not None
        assert ply.promotion == PieceType.ROOK
        assert chooser.calls == []

    def test_declined_choice_raises(self, chooser) -> None:
        chooser.answer = None
        ctx = MoveContext(chooser=chooser)
        with pytest.raises(AmbiguousPromotionError):
            construct_ply(position_from_fen(PROMOTION_READY), Step(E7, E8), context=ctx)

    def test_chooser_answer_outside_set(self, chooser) -> None:
        chooser.answer = PieceType.KING
        ctx = MoveContext(chooser=chooser)
        with pytest.raises(ValueError):
            construct_ply(position_from_fen(PROMOTION_READY), Step(E7, E8), context=ctx)

    def test_out_of_turn_promotes_to_knight(self, chooser) -> None:
        pos = position_from_fen("8/4P3/8/8/8/8/k7/4K3 b - - 0 1")
        ply = construct_ply(pos, Step(E7, E8), context=MoveContext(chooser=chooser))
        assert ply is not None
        assert ply.promotion == PieceType.KNIGHT
        assert chooser.calls == []

    def test_out_of_turn_can_ask_chooser(self, chooser) -> None:
        pos = position_from_fen("8/4P3/8/8/8/8/k7/4K3 b - - 0 1")
        ctx = MoveContext(chooser=chooser, out_of_turn_promotion=None)
        ply = construct_ply(pos, Step(E7, E8), context=ctx)
        assert ply is not None
        assert ply.promotion == PieceType.QUEEN
        assert chooser.calls == [Color.WHITE]

    def test_promotion_tag_off_last_rank_rejected(self) -> None:
        ply = construct_ply(
            Position.initial(), Step(E2, E4), Annotation(Keyword.PROMOTE, PieceType.QUEEN)
        )
        assert ply is None

    def test_context_rejects_bad_default(self) -> None:
        with pytest.raises(ValueError):
            MoveContext(out_of_turn_promotion=PieceType.PAWN)


class TestEnPassant:
    def test_tagged(self) -> None:
        pos = position_from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1")
        ply = construct_ply(pos, Step(E5, parse_square("d6")))
        assert ply is not None
        assert ply.has(Keyword.EN_PASSANT)
        assert ply.successor.piece_at(parse_square("d5")) is None

    def test_tag_on_ordinary_capture_rejected(self) -> None:
        pos = position_from_fen("4k3/8/8/4p3/3PP3/8/8/4K3 w - - 0 1")
        ply = construct_ply(pos, Step(parse_square("d4"), E5), Keyword.EN_PASSANT)
        assert ply is None

    def test_tag_matching_capture_accepted(self) -> None:
        pos = position_from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1")
        ply = construct_ply(pos, Step(E5, parse_square("d6")), Keyword.EN_PASSANT)
        assert ply is not None
        assert [n.keyword for n in ply.annotations].count(Keyword.EN_PASSANT) == 1

    def test_plain_push_not_tagged(self) -> None:
        ply = construct_ply(Position.initial(), Step(E2, E3))
        assert ply is not None
        assert not ply.has(Keyword.EN_PASSANT)


class TestStatus:
    def test_check_tagged(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
        ply = construct_ply(pos, Step(A1, parse_square("a8")))
        assert ply is not None
        assert ply.status == Keyword.CHECK

    def test_quiet_context_untagged(self, quiet: MoveContext) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
        ply = construct_ply(pos, Step(A1, parse_square("a8")), context=quiet)
        assert ply is not None
        assert ply.status is None

    def test_supplied_status_kept(self) -> None:
        ply = construct_ply(Position.initial(), Step(E2, E4), Keyword.CHECK)
        assert ply is not None
        assert ply.status == Keyword.CHECK
        assert ply.annotations == (Annotation(Keyword.CHECK),)

    def test_king_moves_normally(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
        ply = construct_ply(pos, Step(E1, D1))
        assert ply is not None
        assert not ply.is_castle
        assert ply.successor.piece_at(D1) == Piece(Color.WHITE, PieceType.KING)
        assert ply.successor.piece_at(E8) == Piece(Color.BLACK, PieceType.KING)


class TestFixedChooser:
    def test_fixed_piece_used(self) -> None:
        ctx = MoveContext(chooser=FixedPromotionChooser(PieceType.BISHOP))
        ply = construct_ply(position_from_fen(PROMOTION_READY), Step(E7, E8), context=ctx)
        assert ply is not None
        assert ply.promotion == PieceType.BISHOP

    def test_rejects_king(self) -> None:
        with pytest.raises(ValueError):
            FixedPromotionChooser(PieceType.KING)

    def test_errors_share_base(self) -> None:
        assert issubclass(AmbiguousPromotionError, ChessplyError)
        assert issubclass(CastlingResolutionError, ChessplyError)
