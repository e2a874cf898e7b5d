"""Closed vocabularies: colors, piece types, castling sides, ply keywords."""

from __future__ import annotations

from enum import Enum, IntEnum


class Color(IntEnum):
    """Side color."""

    WHITE = 0
    BLACK = 1

    @property
    def opposite(self) -> Color:
        return Color(1 - self.value)

    def __str__(self) -> str:
        return self.name.lower()


class PieceType(IntEnum):
    """Chess piece types ordered by conventional value."""

    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6


class CastlingSide(IntEnum):
    """Which rook the king castles toward."""

    SHORT = 0  # toward the h-file
    LONG = 1  # toward the a-file


class GameResult(IntEnum):
    """Outcome of the game as seen from a single position."""

    IN_PROGRESS = 0
    WHITE_WINS = 1
    BLACK_WINS = 2
    DRAW = 3


class Keyword(Enum):
    """Annotation keywords a ply may carry.

    The value is the textual keyword used when plies are rendered.
    """

    PROMOTE = "promote"
    RESIGN = "resign"
    STALEMATE = "stalemate"
    REPETITION = "repetition"
    PERPETUAL = "perpetual"
    CHECK = "check"
    CHECKMATE = "checkmate"
    DRAW = "draw"
    DRAW_OFFERED = "draw-offered"
    CASTLE = "castle"
    LONG_CASTLE = "long-castle"
    EN_PASSANT = "en-passant"
    NEXT_POS = "next-pos"
    FLAG_FELL = "flag-fell"
    ABORTED = "aborted"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> Keyword:
        """Look up a keyword by its textual name, e.g. ``"long-castle"``."""
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown ply keyword: {name!r}") from None


# Keywords describing the position reached after the ply.
STATUS_KEYWORDS: frozenset[Keyword] = frozenset(
    {Keyword.CHECK, Keyword.CHECKMATE, Keyword.STALEMATE}
)

# Keywords after which no further ply may follow.
TERMINATING_KEYWORDS: frozenset[Keyword] = frozenset(
    {
        Keyword.RESIGN,
        Keyword.CHECKMATE,
        Keyword.STALEMATE,
        Keyword.DRAW,
        Keyword.REPETITION,
        Keyword.PERPETUAL,
        Keyword.FLAG_FELL,
        Keyword.ABORTED,
    }
)
