"""chessply: ply construction and legal move generation for one chess position."""

__version__ = "0.1.0"
