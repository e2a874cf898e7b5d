"""Change-list value objects: coordinate steps and keyword annotations."""

from __future__ import annotations

from dataclasses import dataclass

from chessply.core.enums import Keyword, PieceType
from chessply.core.types import Square, is_valid_square, square_name

# Keywords whose annotation carries a value.
_VALUED: frozenset[Keyword] = frozenset({Keyword.PROMOTE})

PROMOTION_PIECES: tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)


@dataclass(frozen=True, slots=True)
class Step:
    """One coordinate pair: a piece travels from *from_sq* to *to_sq*."""

    from_sq: Square
    to_sq: Square

    def __post_init__(self) -> None:
        if not (is_valid_square(self.from_sq) and is_valid_square(self.to_sq)):
            raise ValueError(f"Invalid step squares: {self.from_sq!r}, {self.to_sq!r}")

    def __str__(self) -> str:
        return f"{square_name(self.from_sq)}{square_name(self.to_sq)}"


@dataclass(frozen=True, slots=True)
class Annotation:
    """A keyword entry on a ply, optionally carrying a value.

    Only ``PROMOTE`` takes a value (the promotion piece type); every other
    keyword is true by presence.  ``NEXT_POS`` is never stored as an
    annotation, the successor lives in the ply's own cache.
    """

    keyword: Keyword
    value: PieceType | None = None

    def __post_init__(self) -> None:
        if self.keyword == Keyword.NEXT_POS:
            raise ValueError("next-pos is a cached field, not an annotation")
        if self.keyword in _VALUED:
            if self.value not in PROMOTION_PIECES:
                raise ValueError(f"Invalid promotion piece: {self.value!r}")
        elif self.value is not None:
            raise ValueError(f"Keyword {self.keyword} takes no value")

    def __str__(self) -> str:
        if self.value is None:
            return str(self.keyword)
        return f"{self.keyword}({self.value.name.lower()})"


def promotion_of(annotations: tuple[Annotation, ...]) -> PieceType | None:
    for note in annotations:
        if note.keyword == Keyword.PROMOTE:
            return note.value
    return None


def has_keyword(annotations: tuple[Annotation, ...], keyword: Keyword) -> bool:
    return any(note.keyword == keyword for note in annotations)
