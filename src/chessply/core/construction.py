"""Ply construction: validation, castling / promotion / en-passant detection,
terminal-status tagging.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Union

from chessply.core.castling import CastlingResolver
from chessply.core.changes import Annotation, Step
from chessply.core.context import DEFAULT_CONTEXT, MoveContext
from chessply.core.enums import STATUS_KEYWORDS, CastlingSide, Keyword, PieceType
from chessply.core.errors import AmbiguousPromotionError, CastlingResolutionError
from chessply.core.geometry import KING_TARGETS
from chessply.core.piece import Piece
from chessply.core.ply import Ply
from chessply.core.promotion import PROMOTION_PIECES
from chessply.core.types import Square, last_rank, rank_of

if TYPE_CHECKING:
    from chessply.core.position import Position

_LOGGER = logging.getLogger(__name__)

_CASTLE_KEYWORDS = (Keyword.CASTLE, Keyword.LONG_CASTLE)

Change = Union[Step, tuple[Square, Square], Annotation, Keyword]


class PlyBuilder:
    """Mutable scratch state for a single construction.

    Lives only inside :func:`construct_ply`; callers only ever see the
    finished :class:`Ply`.
    """

    __slots__ = ("position", "steps", "annotations")

    def __init__(self, position: Position, changes: Iterable[Change]) -> None:
        self.position = position
        self.steps: list[Step] = []
        self.annotations: list[Annotation] = []
        for change in changes:
            if isinstance(change, Step):
                self.steps.append(change)
            elif isinstance(change, Annotation):
                self.annotations.append(change)
            elif isinstance(change, Keyword):
                self.annotations.append(Annotation(change))
            elif isinstance(change, tuple) and len(change) == 2:
                self.steps.append(Step(*change))
            else:
                raise TypeError(f"Unsupported ply change: {change!r}")

    def has(self, *keywords: Keyword) -> bool:
        return any(note.keyword in keywords for note in self.annotations)

    def append(self, note: Annotation) -> None:
        self.annotations.append(note)

    @property
    def mover(self) -> Piece | None:
        if not self.steps:
            return None
        return self.position.piece_at(self.steps[0].from_sq)

    def build(self) -> Ply:
        return Ply(self.position, self.steps, self.annotations)


def construct_ply(
    position: Position,
    *changes: Change,
    validated: bool = False,
    context: MoveContext | None = None,
) -> Ply | None:
    """Build a :class:`Ply` on *position* from *changes*.

    *changes* are steps (or ``(from, to)`` tuples) followed by annotations
    or bare keywords.  Unless *validated* is set, the changes must match a legal move of the
    piece on the first origin square, including any castle, promotion or
    en-passant tag the caller supplied; an illegal move returns ``None``.

    Raises:
        AmbiguousPromotionError: a pawn reaches the last rank, the move
            names no piece and the chooser gives none.
        CastlingResolutionError: a king move beyond the adjacent squares
            passed validation but no castling path resolves for it.
    """
    from chessply.core.annotator import CheckAnnotator

    ctx = context if context is not None else DEFAULT_CONTEXT
    builder = PlyBuilder(position, changes)

    if builder.steps and not validated:
        _read_king_onto_rook(builder)
        candidate = _match_candidate(builder, ctx)
        if candidate is None:
            _LOGGER.debug("Rejected illegal move %s", builder.steps[0])
            return None
        _adopt(builder, candidate)

    mover = builder.mover
    if mover is not None and len(builder.steps) == 1:
        if mover.piece_type == PieceType.KING:
            _resolve_castling(builder)
        elif mover.piece_type == PieceType.PAWN:
            _detect_promotion(builder, mover, ctx)
            _detect_en_passant(builder)

    ply = builder.build()
    if ctx.annotate and not ply.has(*STATUS_KEYWORDS):
        CheckAnnotator.annotate(ply, ctx)
    return ply


def _match_candidate(builder: PlyBuilder, ctx: MoveContext) -> Ply | None:
    """The legal ply the builder's changes describe, or ``None``.

    A caller-supplied castle keyword, promotion piece or en-passant tag
    must be matched by the candidate.  Without a castle keyword a plain
    king move wins over a castling move to the same square.
    """
    from chessply.core.enumerator import Constraints, MoveEnumerator

    first = builder.steps[0]
    castle = next((k for k in _CASTLE_KEYWORDS if builder.has(k)), None)
    if len(builder.steps) == 2 and castle is None:
        return None
    steps = tuple(builder.steps)
    promotion = next(
        (n.value for n in builder.annotations if n.keyword == Keyword.PROMOTE), None
    )

    enumerator = MoveEnumerator(ctx.probing())
    found = enumerator.enumerate(
        builder.position, Constraints(index=first.from_sq, target=first.to_sq)
    )
    matches: list[Ply] = []
    for candidate in found:
        if castle is not None:
            if not candidate.has(castle):
                continue
            if len(steps) == 2 and candidate.changes != steps:
                continue
        if promotion is not None and candidate.promotion != promotion:
            continue
        if builder.has(Keyword.EN_PASSANT) and not candidate.has(Keyword.EN_PASSANT):
            continue
        matches.append(candidate)

    if castle is None:
        plain = [m for m in matches if not m.is_castle]
        if plain:
            return plain[0]
    return matches[0] if matches else None


def _adopt(builder: PlyBuilder, candidate: Ply) -> None:
    """Take the candidate's steps and implied tags.

    The promotion piece stays with the caller or the chooser.
    """
    builder.steps = list(candidate.changes)
    for note in candidate.annotations:
        if note.keyword != Keyword.PROMOTE and not builder.has(note.keyword):
            builder.append(note)


def _read_king_onto_rook(builder: PlyBuilder) -> None:
    """Rewrite a king-takes-own-rook move as a castling move.

    This is how Fischer-Random castling is entered when the king stays
    put or lands next to its origin.
    """
    first = builder.steps[0]
    position = builder.position
    king = position.piece_at(first.from_sq)
    if (
        king is None
        or king.piece_type != PieceType.KING
        or len(builder.steps) != 1
        or builder.has(Keyword.CASTLE, Keyword.LONG_CASTLE)
    ):
        return
    for side in CastlingSide:
        if position.can_castle(king.color, side) == first.to_sq and (
            position.piece_at(first.to_sq) == Piece(king.color, PieceType.ROOK)
        ):
            plan = CastlingResolver.resolve(position, side, first.from_sq)
            if plan is not None:
                builder.steps = list(plan.steps)
                builder.append(Annotation(plan.keyword))
            return


def _resolve_castling(builder: PlyBuilder) -> None:
    first = builder.steps[0]
    if builder.has(Keyword.LONG_CASTLE):
        side = CastlingSide.LONG
    elif builder.has(Keyword.CASTLE):
        side = CastlingSide.SHORT
    elif first.to_sq not in KING_TARGETS[first.from_sq]:
        side = CastlingResolver.side_for(first.from_sq, first.to_sq)
    else:
        return

    plan = CastlingResolver.resolve(builder.position, side, first.from_sq)
    if plan is None or plan.king_to != first.to_sq:
        _LOGGER.warning("Validated king move %s does not resolve as castling", first)
        raise CastlingResolutionError(f"No castling path for king move {first}")
    builder.steps = list(plan.steps)
    if not builder.has(plan.keyword):
        builder.append(Annotation(plan.keyword))


def _detect_promotion(builder: PlyBuilder, pawn: Piece, ctx: MoveContext) -> None:
    first = builder.steps[0]
    if rank_of(first.to_sq) != last_rank(pawn.color) or builder.has(Keyword.PROMOTE):
        return

    if pawn.color != builder.position.side_to_move and ctx.out_of_turn_promotion:
        piece = ctx.out_of_turn_promotion
    else:
        piece = ctx.chooser.choose(pawn.color)
    if piece is None:
        _LOGGER.warning("No promotion piece chosen for %s", first)
        raise AmbiguousPromotionError(f"Move {first} needs a promotion piece")
    if piece not in PROMOTION_PIECES:
        raise ValueError(f"Cannot promote to {piece!r}")

    _LOGGER.debug("Promoting %s to %s", first, piece.name)
    builder.append(Annotation(Keyword.PROMOTE, piece))


def _detect_en_passant(builder: PlyBuilder) -> None:
    if builder.has(Keyword.EN_PASSANT):
        return
    for note in builder.position.implied_annotations(builder.steps[0]):
        builder.append(note)
