"""Board - piece placement on an 8x8 board."""

from __future__ import annotations

from chessply.core.enums import Color, PieceType
from chessply.core.piece import Piece
from chessply.core.types import Square, make_square

_BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


def squares_of(bitboard: int) -> list[Square]:
    """Squares of the set bits in *bitboard*, lowest first."""
    squares: list[Square] = []
    while bitboard:
        lsb = bitboard & -bitboard
        squares.append(lsb.bit_length() - 1)
        bitboard ^= lsb
    return squares


class Board:
    """Mutable 64-square board indexed per piece kind.

    Positions own their boards and only ever mutate private copies, so a
    board reachable from a published position never changes.
    """

    __slots__ = ("_squares", "_by_piece", "_by_color", "_kings")

    def __init__(self) -> None:
        self._squares: list[Piece | None] = [None] * 64
        # piece -> bitboard of the squares it occupies
        self._by_piece: dict[Piece, int] = {}
        # [color] -> bitboard of everything that color occupies
        self._by_color: list[int] = [0, 0]
        # [color] -> king square (None if no king)
        self._kings: list[Square | None] = [None, None]

    # -- Element access -----------------------------------------------------

    def __getitem__(self, sq: Square) -> Piece | None:
        return self._squares[sq]

    def __setitem__(self, sq: Square, piece: Piece | None) -> None:
        old = self._squares[sq]
        if old == piece:
            return

        mask = 1 << sq
        if old is not None:
            self._by_piece[old] &= ~mask
            self._by_color[old.color] &= ~mask
            if old.piece_type == PieceType.KING and self._kings[old.color] == sq:
                self._kings[old.color] = None

        self._squares[sq] = piece
        if piece is None:
            return

        self._by_piece[piece] = self._by_piece.get(piece, 0) | mask
        self._by_color[piece.color] |= mask
        if piece.piece_type == PieceType.KING:
            self._kings[piece.color] = sq

    def is_empty(self, sq: Square) -> bool:
        return self._squares[sq] is None

    # -- Query helpers ------------------------------------------------------

    def bitboard(self, piece: Piece) -> int:
        return self._by_piece.get(piece, 0)

    def pieces(self, color: Color, piece_type: PieceType) -> list[Square]:
        """Squares occupied by *color*'s *piece_type*."""
        return squares_of(self.bitboard(Piece(color, piece_type)))

    def has_piece(self, color: Color, piece_type: PieceType) -> bool:
        return bool(self.bitboard(Piece(color, piece_type)))

    def color_bitboard(self, color: Color) -> int:
        return self._by_color[color]

    def all_pieces(self, color: Color) -> list[Square]:
        return squares_of(self._by_color[color])

    def occupied_bitboard(self) -> int:
        return self._by_color[0] | self._by_color[1]

    def placement(self) -> tuple[Piece | None, ...]:
        """Snapshot of all 64 squares, a1 first."""
        return tuple(self._squares)

    def king_square(self, color: Color) -> Square | None:
        """King square of *color*, ``None`` if that king is not on the board.

        With several kings of one color only the last one placed is tracked.
        """
        return self._kings[color]

    # -- Copying ------------------------------------------------------------

    def copy(self) -> Board:
        b = Board()
        b._squares = self._squares.copy()
        b._by_piece = self._by_piece.copy()
        b._by_color = self._by_color.copy()
        b._kings = self._kings.copy()
        return b

    @classmethod
    def initial(cls) -> Board:
        """Standard starting placement."""
        b = cls()
        for f, pt in enumerate(_BACK_RANK):
            b[make_square(f, 0)] = Piece(Color.WHITE, pt)
            b[make_square(f, 1)] = Piece(Color.WHITE, PieceType.PAWN)
            b[make_square(f, 6)] = Piece(Color.BLACK, PieceType.PAWN)
            b[make_square(f, 7)] = Piece(Color.BLACK, pt)
        return b

    # -- Dunder helpers -----------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._squares == other._squares

    def __repr__(self) -> str:
        rows: list[str] = []
        for rank in range(7, -1, -1):
            row = []
            for file in range(8):
                p = self[make_square(file, rank)]
                row.append(str(p) if p else ".")
            rows.append(f"{rank + 1} {' '.join(row)}")
        rows.append("  a b c d e f g h")
        return "\n".join(rows)
