"""Promotion dialog: lets the user pick the promotion piece."""

from __future__ import annotations

import logging

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from chessply.core.changes import PROMOTION_PIECES
from chessply.core.enums import Color, PieceType
from chessply.core.piece import Piece

_LOGGER = logging.getLogger(__name__)


class PromotionDialog(QDialog):
    """Modal dialog to select the promotion piece type."""

    def __init__(self, color: Color, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setModal(True)
        self.setWindowTitle("Promotion")
        self.setWindowFlags(
            self.windowFlags() & ~Qt.WindowType.WindowContextHelpButtonHint
        )

        self._selected: PieceType = PieceType.QUEEN
        self._buttons: dict[PieceType, QPushButton] = {}

        layout = QVBoxLayout(self)
        label = QLabel("Promote pawn to:")
        label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(label)

        btn_row = QHBoxLayout()
        for pt in PROMOTION_PIECES:
            btn = QPushButton(Piece(color, pt).symbol)
            btn.setFont(QFont(btn.font().family(), 28))
            btn.setFixedSize(68, 68)
            btn.setToolTip(pt.name.capitalize())
            btn.clicked.connect(lambda checked, p=pt: self._choose(p))
            btn_row.addWidget(btn)
            self._buttons[pt] = btn

        layout.addLayout(btn_row)

    def _choose(self, piece_type: PieceType) -> None:
        self._selected = piece_type
        self.accept()

    @property
    def selected(self) -> PieceType:
        return self._selected

    def button(self, piece_type: PieceType) -> QPushButton:
        return self._buttons[piece_type]

    @staticmethod
    def ask(color: Color, parent: QWidget | None = None) -> PieceType | None:
        """Show the dialog and return the chosen piece type, or ``None`` on cancel."""
        dlg = PromotionDialog(color, parent)
        if dlg.exec() == QDialog.DialogCode.Accepted:
            return dlg.selected
        return None


class QtPromotionChooser:
    """:class:`~chessply.core.promotion.PromotionChooser` backed by the dialog.

    Blocks in a modal event loop until the user picks a piece.  A cancelled
    dialog yields ``None``, which ply construction reports as an
    ``AmbiguousPromotionError``.
    """

    __slots__ = ("_parent",)

    def __init__(self, parent: QWidget | None = None) -> None:
        self._parent = parent

    def choose(self, color: Color) -> PieceType | None:
        piece_type = PromotionDialog.ask(color, self._parent)
        if piece_type is None:
            _LOGGER.info("Promotion dialog cancelled for %s", color)
        return piece_type
