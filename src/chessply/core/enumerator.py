"""Legal move enumeration under composable constraints."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, overload

from chessply.core.castling import CastlingResolver
from chessply.core.changes import PROMOTION_PIECES, Annotation, Step
from chessply.core.construction import construct_ply
from chessply.core.context import DEFAULT_CONTEXT, MoveContext
from chessply.core.enums import CastlingSide, Color, Keyword, PieceType
from chessply.core.errors import UnrecognizedPieceError
from chessply.core.geometry import KING_TARGETS, KNIGHT_TARGETS, SLIDING_RAYS
from chessply.core.piece import Piece
from chessply.core.ply import Ply
from chessply.core.types import (
    Square,
    back_rank,
    file_of,
    is_valid_square,
    last_rank,
    offset_square,
    pawn_direction,
    rank_of,
)

if TYPE_CHECKING:
    from chessply.core.position import Position

_LOGGER = logging.getLogger(__name__)

# A legal candidate before it becomes a ply: steps plus extra annotations.
Candidate = tuple[tuple[Step, ...], tuple[Annotation, ...]]


@dataclass(frozen=True, slots=True)
class Constraints:
    """Restrictions on what :meth:`MoveEnumerator.enumerate` produces.

    Attributes:
        any_move: Stop at the first legal move and return ``True``/``False``.
        color: Enumerate for this side (default: the piece's own color when
            *index* is given, else the side to move).
        piece: Only moves of this piece kind.
        file: Only origins on this file (0-7); needs *piece*.
        index: Only moves starting on this square.
        target: Only moves ending on this square (the king's square for
            castling).
        candidates: Only moves starting on one of these squares.
    """

    any_move: bool = False
    color: Color | None = None
    piece: Piece | None = None
    file: int | None = None
    index: Square | None = None
    target: Square | None = None
    candidates: tuple[Square, ...] | None = None

    def __post_init__(self) -> None:
        if self.file is not None:
            if self.piece is None:
                raise ValueError("The file constraint requires a piece constraint")
            if not 0 <= self.file < 8:
                raise ValueError(f"Invalid file index: {self.file!r}")
        for sq in (self.index, self.target):
            if sq is not None and not is_valid_square(sq):
                raise ValueError(f"Invalid square: {sq!r}")


_NO_CONSTRAINTS = Constraints()


class MoveEnumerator:
    """Enumerates legal plies for a :class:`Position`.

    Geometry is walked here; own-king safety is always decided by the
    position's ``legal_candidates`` / ``is_safe_after`` queries.
    """

    __slots__ = ("_context", "_geometry")

    def __init__(self, context: MoveContext | None = None) -> None:
        self._context = context if context is not None else DEFAULT_CONTEXT
        self._geometry: dict[
            PieceType, Callable[[Position, Square, Piece], Iterator[Candidate]]
        ] = {
            PieceType.PAWN: self._pawn,
            PieceType.KNIGHT: self._leaper,
            PieceType.BISHOP: self._slider,
            PieceType.ROOK: self._slider,
            PieceType.QUEEN: self._slider,
            PieceType.KING: self._king,
        }

    @property
    def context(self) -> MoveContext:
        return self._context

    # -- Public API ---------------------------------------------------------

    @overload
    def enumerate(
        self, position: Position, constraints: None = None
    ) -> list[Ply]: ...

    @overload
    def enumerate(
        self, position: Position, constraints: Constraints
    ) -> list[Ply] | bool: ...

    def enumerate(
        self, position: Position, constraints: Constraints | None = None
    ) -> list[Ply] | bool:
        """Legal plies matching *constraints*.

        With ``any_move`` set, returns whether at least one exists; nothing
        past the first legal candidate is evaluated.
        """
        c = constraints if constraints is not None else _NO_CONSTRAINTS
        candidates = self._candidates(position, c)

        if c.any_move:
            for _ in candidates:
                return True
            return False

        plies: list[Ply] = []
        for steps, notes in candidates:
            ply = construct_ply(
                position, *steps, *notes, validated=True, context=self._context
            )
            if ply is None:
                raise RuntimeError(f"Enumerated candidate {steps} did not construct")
            plies.append(ply)
        _LOGGER.debug("Enumerated %d plies under %s", len(plies), c)
        return plies

    def legal_plies(self, position: Position) -> list[Ply]:
        """All legal plies for the side to move."""
        return self.enumerate(position)

    def has_legal_move(self, position: Position, color: Color | None = None) -> bool:
        return bool(
            self.enumerate(position, Constraints(any_move=True, color=color))
        )

    # -- Origin selection ---------------------------------------------------

    def _origins(
        self, position: Position, c: Constraints
    ) -> Iterator[tuple[Square, Piece]]:
        color: Color | None
        if c.color is not None:
            color = c.color
        elif c.piece is not None:
            color = c.piece.color
        elif c.index is not None:
            color = None  # whoever stands on the square
        else:
            color = position.side_to_move

        if c.index is not None:
            squares: list[Square] = [c.index]
        elif c.candidates is not None:
            squares = list(c.candidates)
        elif c.piece is not None:
            squares = position.search(c.piece)
        else:
            assert color is not None
            squares = [
                sq for pt in PieceType for sq in position.search(Piece(color, pt))
            ]

        for sq in squares:
            piece = position.piece_at(sq)
            if piece is None:
                continue
            if color is not None and piece.color != color:
                continue
            if c.piece is not None and piece != c.piece:
                continue
            if c.file is not None and file_of(sq) != c.file:
                continue
            yield sq, piece

    def _candidates(self, position: Position, c: Constraints) -> Iterator[Candidate]:
        for origin, piece in self._origins(position, c):
            geometry = self._geometry.get(piece.piece_type)
            if geometry is None:
                raise UnrecognizedPieceError(f"No move geometry for {piece!r}")
            for steps, notes in geometry(position, origin, piece):
                if c.target is not None and steps[0].to_sq != c.target:
                    continue
                if len(steps) == 1:
                    legal = bool(
                        position.legal_candidates(piece.color, steps[0].to_sq, (origin,))
                    )
                else:
                    legal = position.is_safe_after(piece.color, steps)
                if legal:
                    yield steps, notes

    # -- Piece geometry -----------------------------------------------------

    @staticmethod
    def _reachable(position: Position, to_sq: Square, color: Color) -> bool:
        target = position.piece_at(to_sq)
        return target is None or target.color != color

    def _leaper(
        self, position: Position, sq: Square, piece: Piece
    ) -> Iterator[Candidate]:
        for to_sq in KNIGHT_TARGETS[sq]:
            if self._reachable(position, to_sq, piece.color):
                yield (Step(sq, to_sq),), ()

    def _slider(
        self, position: Position, sq: Square, piece: Piece
    ) -> Iterator[Candidate]:
        for ray in SLIDING_RAYS[piece.piece_type][sq]:
            for to_sq in ray:
                target = position.piece_at(to_sq)
                if target is None:
                    yield (Step(sq, to_sq),), ()
                    continue
                if target.color != piece.color:
                    yield (Step(sq, to_sq),), ()
                break

    def _king(self, position: Position, sq: Square, piece: Piece) -> Iterator[Candidate]:
        for to_sq in KING_TARGETS[sq]:
            if self._reachable(position, to_sq, piece.color):
                yield (Step(sq, to_sq),), ()

        if rank_of(sq) != back_rank(piece.color):
            return
        for side in CastlingSide:
            plan = CastlingResolver.resolve(position, side, sq)
            if plan is not None:
                yield plan.steps, (Annotation(plan.keyword),)

    def _pawn(self, position: Position, sq: Square, piece: Piece) -> Iterator[Candidate]:
        color = piece.color
        forward = pawn_direction(color)
        promotes_on = last_rank(color)

        def moves_to(to_sq: Square, *notes: Annotation) -> Iterator[Candidate]:
            step = Step(sq, to_sq)
            if rank_of(to_sq) == promotes_on:
                for pt in PROMOTION_PIECES:
                    yield (step,), (Annotation(Keyword.PROMOTE, pt),)
            else:
                yield (step,), notes

        one_step = offset_square(sq, 0, forward)
        if one_step is not None and position.piece_at(one_step) is None:
            yield from moves_to(one_step)
            start_rank = back_rank(color) + forward
            if rank_of(sq) == start_rank:
                two_step = offset_square(sq, 0, 2 * forward)
                if two_step is not None and position.piece_at(two_step) is None:
                    yield from moves_to(two_step)

        for df in (-1, 1):
            cap_sq = offset_square(sq, df, forward)
            if cap_sq is None:
                continue
            target = position.piece_at(cap_sq)
            if target is not None:
                if target.color != color:
                    yield from moves_to(cap_sq)
            elif cap_sq == position.en_passant and self._passed_pawn_beside(
                position, sq, df, color
            ):
                yield from moves_to(cap_sq, Annotation(Keyword.EN_PASSANT))

    @staticmethod
    def _passed_pawn_beside(
        position: Position, sq: Square, df: int, color: Color
    ) -> bool:
        """Is an enemy pawn standing laterally next to *sq* on the *df* side?"""
        beside = offset_square(sq, df, 0)
        return beside is not None and position.piece_at(beside) == Piece(
            color.opposite, PieceType.PAWN
        )
