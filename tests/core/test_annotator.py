"""Tests for check / checkmate / stalemate tagging."""

from chessply.core.annotator import CheckAnnotator
from chessply.core.changes import Annotation, Step
from chessply.core.construction import construct_ply
from chessply.core.context import MoveContext
from chessply.core.enums import Keyword
from chessply.core.notation import position_from_fen
from chessply.core.ply import Ply
from chessply.core.position import Position
from chessply.core.types import E2, E4, parse_square

BEFORE_FOOLS_MATE = "rnbqkbnr/pppp1ppp/8/4p3/6P1/5P2/PPPPP2P/RNBQKBNR b KQkq g3 0 2"
BEFORE_STALEMATE = "7k/8/5K2/6Q1/8/8/8/8 w - - 0 1"


def _ply(fen: str, move: str) -> Ply:
    return Ply(
        position_from_fen(fen),
        (Step(parse_square(move[:2]), parse_square(move[2:])),),
    )


class TestCheckAnnotator:
    def test_fools_mate(self) -> None:
        ply = CheckAnnotator.annotate(_ply(BEFORE_FOOLS_MATE, "d8h4"))
        assert ply.status == Keyword.CHECKMATE
        assert ply.is_final()

    def test_stalemate(self) -> None:
        ply = CheckAnnotator.annotate(_ply(BEFORE_STALEMATE, "g5g6"))
        assert ply.status == Keyword.STALEMATE
        assert ply.is_final()

    def test_check(self) -> None:
        ply = CheckAnnotator.annotate(_ply("4k3/8/8/8/8/8/8/R3K3 w - - 0 1", "a1a8"))
        assert ply.status == Keyword.CHECK
        assert not ply.is_final()

    def test_quiet_move(self) -> None:
        ply = CheckAnnotator.annotate(Ply(Position.initial(), (Step(E2, E4),)))
        assert ply.status is None
        assert ply.has(Keyword.NEXT_POS)

    def test_idempotent(self) -> None:
        ply = CheckAnnotator.annotate(_ply(BEFORE_FOOLS_MATE, "d8h4"))
        before = ply.annotations
        assert CheckAnnotator.annotate(ply) is ply
        assert ply.annotations == before

    def test_existing_status_untouched(self) -> None:
        ply = Ply(
            position_from_fen(BEFORE_FOOLS_MATE),
            (Step(parse_square("d8"), parse_square("h4")),),
            (Annotation(Keyword.CHECK),),
        )
        CheckAnnotator.annotate(ply)
        assert ply.status == Keyword.CHECK
        assert not ply.has(Keyword.NEXT_POS)

    def test_status_ply_skipped(self) -> None:
        ply = Ply(Position.initial(), (), (Annotation(Keyword.RESIGN),))
        CheckAnnotator.annotate(ply)
        assert ply.status is None

    def test_probing_context_disables_tagging(self) -> None:
        probe = MoveContext().probing()
        assert not probe.annotate
        assert probe.probing() is probe

    def test_constructed_mate_is_tagged(self) -> None:
        pos = position_from_fen(BEFORE_FOOLS_MATE)
        ply = construct_ply(pos, Step(parse_square("d8"), parse_square("h4")))
        assert ply is not None
        assert ply.has(Keyword.CHECKMATE)
        assert not ply.has(Keyword.CHECK)
