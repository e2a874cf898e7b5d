"""Core domain layer: pure chess logic with zero external dependencies.

Quick start::

    from chessply.core import MoveEnumerator, parse_coordinate, position_from_fen, STARTING_FEN

    pos = position_from_fen(STARTING_FEN)
    for ply in MoveEnumerator().enumerate(pos):
        print(ply)

    ply = parse_coordinate(pos, "e2e4")
    print(ply.successor)
"""

from chessply.core.annotator import CheckAnnotator
from chessply.core.board import Board
from chessply.core.castling import CastlingPlan, CastlingResolver
from chessply.core.changes import PROMOTION_PIECES, Annotation, Step
from chessply.core.construction import construct_ply
from chessply.core.context import MoveContext
from chessply.core.enumerator import Constraints, MoveEnumerator
from chessply.core.enums import CastlingSide, Color, GameResult, Keyword, PieceType
from chessply.core.errors import (
    AmbiguousPromotionError,
    CastlingResolutionError,
    ChessplyError,
    UnrecognizedPieceError,
)
from chessply.core.notation import (
    STARTING_FEN,
    parse_coordinate,
    parse_san,
    ply_to_coordinate,
    ply_to_san,
    position_from_fen,
    position_to_fen,
)
from chessply.core.piece import Piece
from chessply.core.ply import Ply
from chessply.core.position import Position
from chessply.core.promotion import FixedPromotionChooser, PromotionChooser
from chessply.core.rules import Rules
from chessply.core.types import (
    Square,
    file_of,
    make_square,
    parse_square,
    rank_of,
    square_name,
)

__all__ = [
    # Enums
    "CastlingSide",
    "Color",
    "GameResult",
    "Keyword",
    "PieceType",
    # Types / helpers
    "Square",
    "file_of",
    "make_square",
    "parse_square",
    "rank_of",
    "square_name",
    # Domain objects
    "Annotation",
    "Board",
    "Piece",
    "Ply",
    "Position",
    "Step",
    "PROMOTION_PIECES",
    # Move machinery
    "CastlingPlan",
    "CastlingResolver",
    "CheckAnnotator",
    "Constraints",
    "FixedPromotionChooser",
    "MoveContext",
    "MoveEnumerator",
    "PromotionChooser",
    "Rules",
    "construct_ply",
    # Errors
    "AmbiguousPromotionError",
    "CastlingResolutionError",
    "ChessplyError",
    "UnrecognizedPieceError",
    # Notation
    "STARTING_FEN",
    "parse_coordinate",
    "parse_san",
    "ply_to_coordinate",
    "ply_to_san",
    "position_from_fen",
    "position_to_fen",
]
