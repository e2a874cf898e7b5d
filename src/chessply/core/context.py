"""Options threaded through enumeration, construction and annotation."""

from __future__ import annotations

from dataclasses import dataclass, replace

from chessply.core.changes import PROMOTION_PIECES
from chessply.core.enums import PieceType
from chessply.core.promotion import QUEEN_CHOOSER, PromotionChooser


@dataclass(slots=True, frozen=True)
class MoveContext:
    """How plies get built.

    Attributes:
        annotate: Tag constructed plies with check / checkmate / stalemate.
            Nested probes run with this off so that a speculative reply
            never triggers its own lookahead.
        chooser: Asked for the promotion piece when a move omits it.
        out_of_turn_promotion: Piece used, without asking *chooser*, when
            the mover is not the side to move (e.g. a pre-supplied move).
            ``None`` asks the chooser in that case too.
    """

    annotate: bool = True
    chooser: PromotionChooser = QUEEN_CHOOSER
    out_of_turn_promotion: PieceType | None = PieceType.KNIGHT

    def __post_init__(self) -> None:
        if (
            self.out_of_turn_promotion is not None
            and self.out_of_turn_promotion not in PROMOTION_PIECES
        ):
            raise ValueError(
                f"Cannot promote to {self.out_of_turn_promotion!r}"
            )

    def probing(self) -> MoveContext:
        """Copy with annotation disabled, for nested lookahead."""
        if not self.annotate:
            return self
        return replace(self, annotate=False)


DEFAULT_CONTEXT = MoveContext()
