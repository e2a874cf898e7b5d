"""Piece value object."""

from __future__ import annotations

from dataclasses import dataclass

from chessply.core.enums import Color, PieceType

_TYPE_LETTERS: dict[PieceType, str] = {
    PieceType.PAWN: "p",
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
    PieceType.KING: "k",
}
_LETTER_TYPES: dict[str, PieceType] = {v: k for k, v in _TYPE_LETTERS.items()}

# White figurines start at U+2654 (king) and run down to the pawn;
# the black set follows six code points later.
_FIGURINE_OFFSET: dict[PieceType, int] = {
    PieceType.KING: 0,
    PieceType.QUEEN: 1,
    PieceType.ROOK: 2,
    PieceType.BISHOP: 3,
    PieceType.KNIGHT: 4,
    PieceType.PAWN: 5,
}


@dataclass(frozen=True, slots=True)
class Piece:
    """Immutable value object representing a chess piece of one color."""

    color: Color
    piece_type: PieceType

    def __str__(self) -> str:
        """FEN character (uppercase = white, lowercase = black)."""
        letter = _TYPE_LETTERS[self.piece_type]
        return letter.upper() if self.color == Color.WHITE else letter

    @classmethod
    def from_char(cls, char: str) -> Piece:
        """Create piece from FEN character, e.g. 'N' → white knight."""
        ptype = _LETTER_TYPES.get(char.lower()) if len(char) == 1 else None
        if ptype is None:
            raise ValueError(f"Invalid piece character: {char!r}")
        return cls(Color.WHITE if char.isupper() else Color.BLACK, ptype)

    @property
    def symbol(self) -> str:
        """Unicode chess symbol, e.g. ♞."""
        base = 0x2654 if self.color == Color.WHITE else 0x265A
        return chr(base + _FIGURINE_OFFSET[self.piece_type])

    @property
    def letter(self) -> str:
        """Lowercase type letter regardless of color, e.g. 'q'."""
        return _TYPE_LETTERS[self.piece_type]


def piece_type_from_letter(letter: str) -> PieceType:
    """Piece type for a case-insensitive type letter, e.g. 'Q' → QUEEN."""
    ptype = _LETTER_TYPES.get(letter.lower()) if len(letter) == 1 else None
    if ptype is None:
        raise ValueError(f"Invalid piece letter: {letter!r}")
    return ptype


def all_pieces() -> tuple[Piece, ...]:
    """All twelve piece kinds, white first."""
    return tuple(Piece(color, pt) for color in Color for pt in PieceType)
