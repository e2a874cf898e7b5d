"""Ply: one half-move, a base position plus its change list."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from chessply.core.changes import Annotation, Step, promotion_of
from chessply.core.enums import (
    STATUS_KEYWORDS,
    TERMINATING_KEYWORDS,
    Color,
    Keyword,
    PieceType,
)
from chessply.core.types import Square

if TYPE_CHECKING:
    from chessply.core.position import Position

_CASTLE_KEYWORDS = (Keyword.CASTLE, Keyword.LONG_CASTLE)


def _check_steps(steps: Iterable[Step]) -> tuple[Step, ...]:
    result = tuple(steps)
    if len(result) > 2:
        raise ValueError(f"A ply moves at most two pieces, got {len(result)} steps")
    for step in result:
        if not isinstance(step, Step):
            raise TypeError(f"Expected Step, got {step!r}")
    return result


def _check_annotations(notes: Iterable[Annotation]) -> tuple[Annotation, ...]:
    result = tuple(notes)
    keywords = [note.keyword for note in result]
    if len(set(keywords)) != len(keywords):
        raise ValueError(f"Duplicate ply keyword in {[str(k) for k in keywords]}")
    if all(k in keywords for k in _CASTLE_KEYWORDS):
        raise ValueError("A ply cannot be both castle and long-castle")
    return result


class Ply:
    """One half-move.

    ``steps`` holds zero, one or two coordinate pairs (two only for
    castling: king first, rook second).  A ply without steps is a pure
    status ply such as a resignation.  ``annotations`` is the ordered
    keyword list.

    The successor position is computed on first access and cached; changing
    the base or the steps drops the cache.  Once handed out by construction
    a ply is treated as immutable apart from that cache.
    """

    __slots__ = ("_base", "_steps", "_annotations", "_successor")

    def __init__(
        self,
        base: Position,
        steps: Iterable[Step] = (),
        annotations: Iterable[Annotation] = (),
    ) -> None:
        self._base = base
        self._steps = _check_steps(steps)
        self._annotations = _check_annotations(annotations)
        self._successor: Position | None = None

    # ── Base / changes ───────────────────────────────────────────────────

    @property
    def base(self) -> Position:
        return self._base

    @base.setter
    def base(self, position: Position) -> None:
        self._base = position
        self._successor = None

    @property
    def changes(self) -> tuple[Step, ...]:
        return self._steps

    @changes.setter
    def changes(self, steps: Iterable[Step]) -> None:
        self._steps = _check_steps(steps)
        self._successor = None

    @property
    def annotations(self) -> tuple[Annotation, ...]:
        return self._annotations

    # ── Keywords ─────────────────────────────────────────────────────────

    def has(self, *keywords: Keyword) -> bool:
        """Does the ply carry any of *keywords*?"""
        for keyword in keywords:
            if keyword == Keyword.NEXT_POS:
                if self._successor is not None:
                    return True
            elif any(note.keyword == keyword for note in self._annotations):
                return True
        return False

    def get(self, keyword: Keyword) -> PieceType | Position | bool | None:
        """Value of *keyword*: its value, ``True`` if bare, ``None`` if absent."""
        if keyword == Keyword.NEXT_POS:
            return self._successor
        for note in self._annotations:
            if note.keyword == keyword:
                return True if note.value is None else note.value
        return None

    def set(self, keyword: Keyword, value: PieceType | Position | None = None) -> None:
        """Add *keyword*, replacing an existing entry for the same keyword.

        ``NEXT_POS`` seeds the successor cache; an already cached successor
        is kept.
        """
        if keyword == Keyword.NEXT_POS:
            if value is None:
                raise ValueError("next-pos needs a position")
            if self._successor is None:
                self._successor = value  # type: ignore[assignment]
            return

        note = Annotation(keyword, value)  # type: ignore[arg-type]
        kept = [n for n in self._annotations if n.keyword != keyword]
        if keyword in _CASTLE_KEYWORDS:
            kept = [n for n in kept if n.keyword not in _CASTLE_KEYWORDS]
        kept.append(note)
        self._annotations = tuple(kept)

    # ── Derived accessors ────────────────────────────────────────────────

    @property
    def source(self) -> Square | None:
        return self._steps[0].from_sq if self._steps else None

    @property
    def target(self) -> Square | None:
        return self._steps[0].to_sq if self._steps else None

    @property
    def promotion(self) -> PieceType | None:
        return promotion_of(self._annotations)

    @property
    def is_castle(self) -> bool:
        return self.has(*_CASTLE_KEYWORDS)

    @property
    def mover(self) -> Color | None:
        """Color of the moving piece, ``None`` for a status ply."""
        if not self._steps:
            return None
        piece = self._base.piece_at(self._steps[0].from_sq)
        return piece.color if piece is not None else None

    @property
    def successor(self) -> Position:
        """Position after this ply, computed once."""
        if self._successor is None:
            self._successor = self._base.apply_changes(self._steps, self._annotations)
        return self._successor

    def is_final(self, previous: Ply | None = None) -> bool:
        """Does the game end with this ply?

        True when the ply carries a terminating keyword, or when *previous*
        (the ply before it) already left the game in checkmate or stalemate.
        """
        if any(note.keyword in TERMINATING_KEYWORDS for note in self._annotations):
            return True
        return previous is not None and previous.has(
            Keyword.CHECKMATE, Keyword.STALEMATE
        )

    @property
    def status(self) -> Keyword | None:
        """The check / checkmate / stalemate tag, if any."""
        for note in self._annotations:
            if note.keyword in STATUS_KEYWORDS:
                return note.keyword
        return None

    # ── Dunder helpers ───────────────────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ply):
            return NotImplemented
        return (
            self._base is other._base
            and self._steps == other._steps
            and self._annotations == other._annotations
        )

    def __str__(self) -> str:
        parts = [str(step) for step in self._steps]
        parts.extend(str(note) for note in self._annotations)
        return " ".join(parts) if parts else "-"

    def __repr__(self) -> str:
        return f"Ply({self})"
