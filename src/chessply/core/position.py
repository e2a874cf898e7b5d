"""Position: immutable board-state snapshot with attack and legality queries."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TypeAlias

from chessply.core.board import Board
from chessply.core.changes import Annotation, Step, has_keyword, promotion_of
from chessply.core.enums import CastlingSide, Color, Keyword, PieceType
from chessply.core.geometry import square_attacked
from chessply.core.piece import Piece
from chessply.core.types import (
    A1,
    A8,
    H1,
    H8,
    Square,
    file_of,
    is_valid_square,
    make_square,
    rank_of,
)

# Rook square per castling right, indexed by color * 2 + side.
CastlingRooks: TypeAlias = tuple[Square | None, ...]

STANDARD_CASTLING: CastlingRooks = (H1, A1, H8, A8)
NO_CASTLING: CastlingRooks = (None, None, None, None)


def _right_index(color: Color, side: CastlingSide) -> int:
    return int(color) * 2 + int(side)


def en_passant_victim(step: Step) -> Square:
    """Square of the pawn captured by an en-passant *step*."""
    return make_square(file_of(step.to_sq), rank_of(step.from_sq))


class Position:
    """Full chess position: board + side to move + castling + en passant + clocks.

    Positions are never mutated once built.  Applying a change list
    produces a fresh successor, so any number of plies may share one base.
    The constructor takes ownership of *board*.
    """

    __slots__ = (
        "_board",
        "_side_to_move",
        "_castling",
        "_en_passant",
        "_halfmove_clock",
        "_fullmove_number",
    )

    def __init__(
        self,
        board: Board | None = None,
        side_to_move: Color = Color.WHITE,
        castling: Sequence[Square | None] | None = None,
        en_passant: Square | None = None,
        halfmove_clock: int = 0,
        fullmove_number: int = 1,
    ) -> None:
        if castling is None:
            castling = STANDARD_CASTLING if board is None else NO_CASTLING
        if len(castling) != 4 or not all(
            sq is None or is_valid_square(sq) for sq in castling
        ):
            raise ValueError(f"Invalid castling rook squares: {castling!r}")
        if en_passant is not None and not is_valid_square(en_passant):
            raise ValueError(f"Invalid en-passant square: {en_passant!r}")

        self._board = board if board is not None else Board.initial()
        self._side_to_move = side_to_move
        self._castling: CastlingRooks = tuple(castling)
        self._en_passant = en_passant
        self._halfmove_clock = halfmove_clock
        self._fullmove_number = fullmove_number

    @classmethod
    def initial(cls) -> Position:
        """Standard starting position."""
        return cls()

    # ── Read-only state ──────────────────────────────────────────────────

    @property
    def board(self) -> Board:
        """Piece placement.  Callers must treat it as read-only."""
        return self._board

    @property
    def side_to_move(self) -> Color:
        return self._side_to_move

    @property
    def castling(self) -> CastlingRooks:
        """Rook squares of the four castling rights (``None`` where lost)."""
        return self._castling

    @property
    def en_passant(self) -> Square | None:
        """Square a pawn skipped on the previous move, if any."""
        return self._en_passant

    @property
    def halfmove_clock(self) -> int:
        return self._halfmove_clock

    @property
    def fullmove_number(self) -> int:
        return self._fullmove_number

    # ── Queries ──────────────────────────────────────────────────────────

    def piece_at(self, sq: Square) -> Piece | None:
        return self._board[sq]

    def can_castle(self, color: Color, side: CastlingSide) -> Square | None:
        """Rook square for *color* castling on *side*, or ``None``."""
        return self._castling[_right_index(color, side)]

    def king_square(self, color: Color) -> Square | None:
        return self._board.king_square(color)

    def is_attacked(self, sq: Square, by_color: Color) -> bool:
        return square_attacked(self._board, sq, by_color)

    def is_in_check(self, color: Color) -> bool:
        """Is *color*'s king attacked?  ``False`` when it has no king."""
        king_sq = self.king_square(color)
        return king_sq is not None and self.is_attacked(king_sq, color.opposite)

    def search(
        self,
        piece: Piece | None = None,
        *,
        color: Color | None = None,
        piece_type: PieceType | None = None,
    ) -> list[Square]:
        """Squares holding *piece*, or pieces matching *color* / *piece_type*."""
        if piece is not None:
            return self._board.pieces(piece.color, piece.piece_type)
        if color is not None and piece_type is not None:
            return self._board.pieces(color, piece_type)
        if color is not None:
            return self._board.all_pieces(color)
        return [
            sq
            for sq in range(64)
            if (p := self._board[sq]) is not None
            and (piece_type is None or p.piece_type == piece_type)
        ]

    def implied_annotations(self, step: Step) -> tuple[Annotation, ...]:
        """Annotations a plain *step* needs to be played correctly.

        Only en passant qualifies: a pawn moving diagonally onto the empty
        en-passant target captures the pawn beside it.
        """
        piece = self._board[step.from_sq]
        if (
            piece is not None
            and piece.piece_type == PieceType.PAWN
            and step.to_sq == self._en_passant
            and file_of(step.from_sq) != file_of(step.to_sq)
            and self._board.is_empty(step.to_sq)
        ):
            return (Annotation(Keyword.EN_PASSANT),)
        return ()

    def legal_candidates(
        self, color: Color, target: Square, candidates: Iterable[Square]
    ) -> list[Square]:
        """Origins among *candidates* whose *color* piece may go to *target*.

        A candidate is rejected when the move would leave *color*'s king
        attacked.  Geometry is not checked here.
        """
        legal: list[Square] = []
        for origin in candidates:
            piece = self._board[origin]
            if piece is None or piece.color != color:
                continue
            step = Step(origin, target)
            if self.is_safe_after(color, (step,), self.implied_annotations(step)):
                legal.append(origin)
        return legal

    def is_safe_after(
        self,
        color: Color,
        steps: Sequence[Step],
        annotations: Sequence[Annotation] = (),
    ) -> bool:
        """Would *color*'s king be safe once *steps* are played?"""
        board = self._play(steps, annotations)
        king_sq = board.king_square(color)
        return king_sq is None or not square_attacked(board, king_sq, color.opposite)

    # ── Successor ────────────────────────────────────────────────────────

    def apply_changes(
        self, steps: Sequence[Step], annotations: Sequence[Annotation] = ()
    ) -> Position:
        """Return the position reached by playing *steps*.

        A change list without steps (resignation, draw offer, ...) leaves the
        position as it is.
        """
        if not steps:
            return self

        first = steps[0]
        mover = self._board[first.from_sq]
        if mover is None:
            raise ValueError(f"No piece on {first.from_sq}")

        castles = len(steps) == 2
        en_passant_capture = has_keyword(tuple(annotations), Keyword.EN_PASSANT)
        captured = en_passant_capture or (
            not castles and self._board[first.to_sq] is not None
        )
        board = self._play(steps, annotations)

        # Castling rights
        rights = list(self._castling)
        if mover.piece_type == PieceType.KING:
            for side in CastlingSide:
                rights[_right_index(mover.color, side)] = None
        touched = {s.from_sq for s in steps} | {s.to_sq for s in steps}
        rights = [None if rook_sq in touched else rook_sq for rook_sq in rights]

        # En passant target for the opponent
        next_en_passant: Square | None = None
        if (
            mover.piece_type == PieceType.PAWN
            and abs(rank_of(first.to_sq) - rank_of(first.from_sq)) == 2
        ):
            next_en_passant = make_square(
                file_of(first.from_sq),
                (rank_of(first.from_sq) + rank_of(first.to_sq)) // 2,
            )

        if mover.piece_type == PieceType.PAWN or captured:
            halfmove_clock = 0
        else:
            halfmove_clock = self._halfmove_clock + 1
        fullmove_number = self._fullmove_number
        if mover.color == Color.BLACK:
            fullmove_number += 1

        return Position(
            board,
            mover.color.opposite,
            rights,
            next_en_passant,
            halfmove_clock,
            fullmove_number,
        )

    def _play(
        self, steps: Sequence[Step], annotations: Sequence[Annotation]
    ) -> Board:
        """Scratch copy of the board with *steps* played on it."""
        board = self._board.copy()
        lifted: list[tuple[Step, Piece]] = []
        for step in steps:
            piece = board[step.from_sq]
            if piece is None:
                raise ValueError(f"No piece on {step.from_sq}")
            lifted.append((step, piece))

        # Lift everything before placing anything: castling pairs may overlap
        # in Fischer-Random layouts.
        for step, _ in lifted:
            board[step.from_sq] = None

        notes = tuple(annotations)
        if steps and has_keyword(notes, Keyword.EN_PASSANT):
            board[en_passant_victim(steps[0])] = None

        promotion = promotion_of(notes)
        for step, piece in lifted:
            if promotion is not None and piece.piece_type == PieceType.PAWN:
                piece = Piece(piece.color, promotion)
            board[step.to_sq] = piece
        return board

    # ── Dunder helpers ───────────────────────────────────────────────────

    def _key(self) -> tuple[object, ...]:
        return (
            self._board.placement(),
            self._side_to_move,
            self._castling,
            self._en_passant,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return f"<Position {self._side_to_move} to move>\n{self._board!r}"
