"""Piece movement geometry: offset tables, sliding rays, attack detection."""

from __future__ import annotations

from chessply.core.board import Board
from chessply.core.enums import Color, PieceType
from chessply.core.piece import Piece
from chessply.core.types import Square, offset_square

KNIGHT_OFFSETS: tuple[tuple[int, int], ...] = (
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
)

KING_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)

BISHOP_DIRS: tuple[tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ROOK_DIRS: tuple[tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
QUEEN_DIRS: tuple[tuple[int, int], ...] = BISHOP_DIRS + ROOK_DIRS

Rays = tuple[tuple[Square, ...], ...]


# -- Precomputed lookup tables ---------------------------------------------


def _build_targets(
    offsets: tuple[tuple[int, int], ...],
) -> tuple[tuple[Square, ...], ...]:
    table: list[tuple[Square, ...]] = []
    for sq in range(64):
        reached = (offset_square(sq, df, dr) for df, dr in offsets)
        table.append(tuple(to_sq for to_sq in reached if to_sq is not None))
    return tuple(table)


def _build_rays(directions: tuple[tuple[int, int], ...]) -> tuple[Rays, ...]:
    table: list[Rays] = []
    for sq in range(64):
        square_rays: list[tuple[Square, ...]] = []
        for df, dr in directions:
            ray: list[Square] = []
            to_sq = offset_square(sq, df, dr)
            while to_sq is not None:
                ray.append(to_sq)
                to_sq = offset_square(to_sq, df, dr)
            square_rays.append(tuple(ray))
        table.append(tuple(square_rays))
    return tuple(table)


def _mask(squares: tuple[Square, ...]) -> int:
    mask = 0
    for sq in squares:
        mask |= 1 << sq
    return mask


def _build_pawn_attackers(color: Color) -> tuple[int, ...]:
    """[sq] -> squares from which a *color* pawn attacks *sq*."""
    back = -1 if color == Color.WHITE else 1
    masks: list[int] = []
    for sq in range(64):
        origins = (offset_square(sq, -1, back), offset_square(sq, 1, back))
        masks.append(_mask(tuple(o for o in origins if o is not None)))
    return tuple(masks)


KNIGHT_TARGETS = _build_targets(KNIGHT_OFFSETS)
KING_TARGETS = _build_targets(KING_OFFSETS)
BISHOP_RAYS = _build_rays(BISHOP_DIRS)
ROOK_RAYS = _build_rays(ROOK_DIRS)
QUEEN_RAYS = _build_rays(QUEEN_DIRS)

SLIDING_RAYS: dict[PieceType, tuple[Rays, ...]] = {
    PieceType.BISHOP: BISHOP_RAYS,
    PieceType.ROOK: ROOK_RAYS,
    PieceType.QUEEN: QUEEN_RAYS,
}

_KNIGHT_MASKS = tuple(_mask(t) for t in KNIGHT_TARGETS)
_KING_MASKS = tuple(_mask(t) for t in KING_TARGETS)
_PAWN_ATTACKERS = (
    _build_pawn_attackers(Color.WHITE),
    _build_pawn_attackers(Color.BLACK),
)


# -- Attack detection -------------------------------------------------------


def _ray_hits(
    board: Board, rays: Rays, by_color: Color, kinds: tuple[PieceType, ...]
) -> bool:
    for ray in rays:
        for to_sq in ray:
            piece = board[to_sq]
            if piece is None:
                continue
            if piece.color == by_color and piece.piece_type in kinds:
                return True
            break
    return False


def square_attacked(board: Board, sq: Square, by_color: Color) -> bool:
    """Is *sq* attacked by any piece of *by_color* on *board*?"""
    if board.bitboard(Piece(by_color, PieceType.PAWN)) & _PAWN_ATTACKERS[by_color][sq]:
        return True
    if board.bitboard(Piece(by_color, PieceType.KNIGHT)) & _KNIGHT_MASKS[sq]:
        return True
    if board.bitboard(Piece(by_color, PieceType.KING)) & _KING_MASKS[sq]:
        return True

    queens = board.has_piece(by_color, PieceType.QUEEN)
    if queens or board.has_piece(by_color, PieceType.BISHOP):
        if _ray_hits(
            board, BISHOP_RAYS[sq], by_color, (PieceType.BISHOP, PieceType.QUEEN)
        ):
            return True
    if queens or board.has_piece(by_color, PieceType.ROOK):
        if _ray_hits(board, ROOK_RAYS[sq], by_color, (PieceType.ROOK, PieceType.QUEEN)):
            return True
    return False
