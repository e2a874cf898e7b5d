"""PyQt6 adapters for the interactive parts of move entry."""

from chessply.ui.promotion_dialog import PromotionDialog, QtPromotionChooser

__all__ = ["PromotionDialog", "QtPromotionChooser"]
