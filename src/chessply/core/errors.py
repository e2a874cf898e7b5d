"""Exceptions raised by the move layer.

An illegal move is not an error: construction returns ``None`` for it.
The classes below signal a broken invariant and are never caught inside
the library.
"""

from __future__ import annotations


class ChessplyError(Exception):
    """Base class for all library errors."""


class AmbiguousPromotionError(ChessplyError):
    """A pawn reached the last rank and no promotion piece was supplied."""


class UnrecognizedPieceError(ChessplyError):
    """Move geometry was requested for a piece outside the supported set."""


class CastlingResolutionError(ChessplyError):
    """A king move passed validation but no castling path resolves for it."""
