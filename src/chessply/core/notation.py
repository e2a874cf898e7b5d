"""FEN, coordinate and SAN notation."""

from __future__ import annotations

import re

from chessply.core.board import Board
from chessply.core.changes import Annotation, Step
from chessply.core.construction import construct_ply
from chessply.core.context import MoveContext
from chessply.core.enumerator import Constraints, MoveEnumerator
from chessply.core.enums import CastlingSide, Color, Keyword, PieceType
from chessply.core.piece import Piece, piece_type_from_letter
from chessply.core.ply import Ply
from chessply.core.position import Position
from chessply.core.types import (
    Square,
    back_rank,
    file_of,
    make_square,
    parse_file,
    parse_square,
    rank_of,
    square_name,
)

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_SAN_PIECE: dict[PieceType, str] = {
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}
_SAN_PIECE_REV: dict[str, PieceType] = {v: k for k, v in _SAN_PIECE.items()}

_COORDINATE_RE = re.compile(r"^([a-h][1-8])([a-h][1-8])([qrbnQRBN])?$")
_SAN_RE = re.compile(
    r"^(?P<piece>[NBRQK])?(?P<file>[a-h])?(?P<rank>[1-8])?x?"
    r"(?P<to>[a-h][1-8])(?:=?(?P<promo>[NBRQ]))?$"
)

_NO_ANNOTATION = MoveContext(annotate=False)


# ── FEN ──────────────────────────────────────────────────────────────────────


def _outermost_rook(board: Board, color: Color, side: CastlingSide) -> Square | None:
    """Rook of *color* furthest from its king on *side* of the back rank."""
    rank = back_rank(color)
    king_sq = board.king_square(color)
    if king_sq is None or rank_of(king_sq) != rank:
        return None
    king_file = file_of(king_sq)
    files = range(7, king_file, -1) if side == CastlingSide.SHORT else range(king_file)
    rook = Piece(color, PieceType.ROOK)
    for f in files:
        if board[make_square(f, rank)] == rook:
            return make_square(f, rank)
    return None


def _parse_castling(field: str, board: Board) -> list[Square | None]:
    rights: list[Square | None] = [None] * 4
    if field == "-":
        return rights

    for ch in field:
        color = Color.WHITE if ch.isupper() else Color.BLACK
        king_sq = board.king_square(color)
        if king_sq is None or rank_of(king_sq) != back_rank(color):
            raise ValueError(f"Invalid FEN castling field (no king): {field!r}")

        if ch in "KkQq":
            side = CastlingSide.SHORT if ch in "Kk" else CastlingSide.LONG
            rook_sq = _outermost_rook(board, color, side)
        else:
            rook_sq = make_square(parse_file(ch), back_rank(color))
            side = (
                CastlingSide.SHORT
                if file_of(rook_sq) > file_of(king_sq)
                else CastlingSide.LONG
            )
            if board[rook_sq] != Piece(color, PieceType.ROOK):
                rook_sq = None

        index = int(color) * 2 + int(side)
        if rook_sq is None or rights[index] is not None:
            raise ValueError(f"Invalid FEN castling field: {field!r}")
        rights[index] = rook_sq
    return rights


def _format_castling(pos: Position) -> str:
    out = ""
    for color in Color:
        for side in CastlingSide:
            rook_sq = pos.can_castle(color, side)
            if rook_sq is None:
                continue
            if rook_sq == _outermost_rook(pos.board, color, side):
                ch = "K" if side == CastlingSide.SHORT else "Q"
            else:
                ch = "ABCDEFGH"[file_of(rook_sq)]
            out += ch if color == Color.WHITE else ch.lower()
    return out or "-"


def position_from_fen(fen: str) -> Position:
    """Parse a FEN string into a :class:`Position`.

    The castling field accepts ``KQkq`` as well as X-FEN / Shredder-FEN
    rook files (``HAha``, ``BGbg``) for Fischer-Random layouts.
    """
    parts = fen.split()
    if not (4 <= len(parts) <= 6):
        raise ValueError(f"Invalid FEN (need 4-6 fields): {fen!r}")

    placement, side_part, castling_part, ep_part = parts[:4]

    # 1. Piece placement
    ranks = placement.split("/")
    if len(ranks) != 8:
        raise ValueError(f"Invalid FEN board (must contain 8 ranks): {fen!r}")
    board = Board()
    for rank_idx, rank_text in enumerate(ranks):
        rank = 7 - rank_idx
        file = 0
        for ch in rank_text:
            if ch.isdigit():
                step = int(ch)
                if not (1 <= step <= 8):
                    raise ValueError(f"Invalid FEN digit {ch!r}: {fen!r}")
                file += step
            else:
                if file >= 8:
                    raise ValueError(f"Invalid FEN rank width: {fen!r}")
                board[make_square(file, rank)] = Piece.from_char(ch)
                file += 1
            if file > 8:
                raise ValueError(f"Invalid FEN rank width: {fen!r}")
        if file != 8:
            raise ValueError(f"Invalid FEN rank width: {fen!r}")

    # 2. Side to move
    if side_part == "w":
        side = Color.WHITE
    elif side_part == "b":
        side = Color.BLACK
    else:
        raise ValueError(f"Invalid FEN side-to-move field: {side_part!r}")

    # 3. Castling
    castling = _parse_castling(castling_part, board)

    # 4. En passant
    ep: Square | None = None
    if ep_part != "-":
        ep = parse_square(ep_part)
        expected_ep_rank = 5 if side == Color.WHITE else 2
        if rank_of(ep) != expected_ep_rank:
            raise ValueError(
                f"Invalid FEN en-passant square for side-to-move: {ep_part!r}"
            )

    # 5–6. Clocks (optional)
    halfmove = int(parts[4]) if len(parts) > 4 else 0
    if halfmove < 0:
        raise ValueError(f"Invalid FEN halfmove clock: {parts[4]!r}")
    fullmove = int(parts[5]) if len(parts) > 5 else 1
    if fullmove < 1:
        raise ValueError(f"Invalid FEN fullmove number: {parts[5]!r}")

    return Position(board, side, castling, ep, halfmove, fullmove)


def position_to_fen(pos: Position) -> str:
    """Serialise a :class:`Position` to FEN."""
    rows: list[str] = []
    for rank in range(7, -1, -1):
        empty = 0
        row = ""
        for file in range(8):
            piece = pos.piece_at(make_square(file, rank))
            if piece is None:
                empty += 1
                continue
            if empty:
                row += str(empty)
                empty = 0
            row += str(piece)
        if empty:
            row += str(empty)
        rows.append(row)

    side_str = "w" if pos.side_to_move == Color.WHITE else "b"
    ep_str = square_name(pos.en_passant) if pos.en_passant is not None else "-"
    return (
        f"{'/'.join(rows)} {side_str} {_format_castling(pos)} {ep_str} "
        f"{pos.halfmove_clock} {pos.fullmove_number}"
    )


# ── Coordinate notation ──────────────────────────────────────────────────────


def parse_coordinate(
    position: Position, text: str, context: MoveContext | None = None
) -> Ply | None:
    """Build a ply from coordinate text such as ``e2e4`` or ``e7e8q``.

    Castling is written as the king's two-file move (``e1g1``) or as the
    king moving onto its own rook (``e1h1``).  Returns ``None`` for an
    illegal move; raises ``ValueError`` for text that is not a move.
    """
    match = _COORDINATE_RE.match(text.strip())
    if match is None:
        raise ValueError(f"Invalid coordinate move: {text!r}")
    from_name, to_name, promo = match.groups()
    changes: list[Step | Annotation] = [
        Step(parse_square(from_name), parse_square(to_name))
    ]
    if promo:
        changes.append(Annotation(Keyword.PROMOTE, piece_type_from_letter(promo)))
    return construct_ply(position, *changes, context=context)


def ply_to_coordinate(ply: Ply) -> str:
    """Coordinate text of *ply*; ``0000`` for a ply without steps."""
    if not ply.changes:
        return "0000"
    king = ply.changes[0]
    if ply.is_castle and abs(file_of(king.to_sq) - file_of(king.from_sq)) != 2:
        rook = ply.changes[1]
        return f"{square_name(king.from_sq)}{square_name(rook.from_sq)}"
    text = str(king)
    if ply.promotion is not None:
        text += Piece(Color.BLACK, ply.promotion).letter
    return text


# ── SAN (Standard Algebraic Notation) ────────────────────────────────────────


def ply_to_san(ply: Ply) -> str:
    """SAN of *ply* on its base position.

    The ``+`` / ``#`` suffix comes from the ply's own status annotation.
    """
    if not ply.changes:
        return "--"
    suffix = ""
    if ply.has(Keyword.CHECKMATE):
        suffix = "#"
    elif ply.has(Keyword.CHECK):
        suffix = "+"

    if ply.has(Keyword.CASTLE):
        return "O-O" + suffix
    if ply.has(Keyword.LONG_CASTLE):
        return "O-O-O" + suffix

    base = ply.base
    step = ply.changes[0]
    piece = base.piece_at(step.from_sq)
    if piece is None:
        raise ValueError(f"No piece on {square_name(step.from_sq)}")
    is_capture = base.piece_at(step.to_sq) is not None or ply.has(Keyword.EN_PASSANT)

    san = ""
    if piece.piece_type == PieceType.PAWN:
        if is_capture:
            san += square_name(step.from_sq)[0]
    else:
        san += _SAN_PIECE[piece.piece_type]
        rivals = {
            other.source
            for other in MoveEnumerator(_NO_ANNOTATION).enumerate(
                base, Constraints(piece=piece, target=step.to_sq)
            )
            if other.source != step.from_sq and not other.is_castle
        }
        if rivals:
            same_file = any(file_of(sq) == file_of(step.from_sq) for sq in rivals)
            same_rank = any(rank_of(sq) == rank_of(step.from_sq) for sq in rivals)
            if not same_file:
                san += square_name(step.from_sq)[0]
            elif not same_rank:
                san += square_name(step.from_sq)[1]
            else:
                san += square_name(step.from_sq)

    if is_capture:
        san += "x"
    san += square_name(step.to_sq)
    if ply.promotion is not None:
        san += "=" + _SAN_PIECE[ply.promotion]
    return san + suffix


def parse_san(position: Position, san: str, context: MoveContext | None = None) -> Ply:
    """Parse a SAN string into a :class:`Ply` on *position*."""
    enumerator = MoveEnumerator(context)
    side = position.side_to_move
    clean = san.strip().rstrip("+#!?")

    if clean in ("O-O", "0-0", "O-O-O", "0-0-0"):
        keyword = Keyword.CASTLE if len(clean) == 3 else Keyword.LONG_CASTLE
        plies = enumerator.enumerate(
            position, Constraints(piece=Piece(side, PieceType.KING))
        )
        for ply in plies:
            if ply.has(keyword):
                return ply
        raise ValueError(f"Illegal move: {san}")

    match = _SAN_RE.match(clean)
    if match is None:
        raise ValueError(f"Invalid SAN: {san!r}")

    piece_type = _SAN_PIECE_REV[match["piece"]] if match["piece"] else PieceType.PAWN
    from_file = parse_file(match["file"]) if match["file"] else None
    from_rank = int(match["rank"]) - 1 if match["rank"] else None
    promotion = _SAN_PIECE_REV[match["promo"]] if match["promo"] else None

    candidates = [
        ply
        for ply in enumerator.enumerate(
            position,
            Constraints(
                piece=Piece(side, piece_type),
                file=from_file,
                target=parse_square(match["to"]),
            ),
        )
        if not ply.is_castle
        and (from_rank is None or rank_of(ply.source) == from_rank)
        and ply.promotion == promotion
    ]

    if len(candidates) == 1:
        return candidates[0]
    if not candidates:
        raise ValueError(f"Illegal move: {san}")
    raise ValueError(f"Ambiguous move: {san} → {[str(p) for p in candidates]}")
