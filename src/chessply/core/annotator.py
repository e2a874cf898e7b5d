"""Check / checkmate / stalemate tagging of a ply."""

from __future__ import annotations

import logging

from chessply.core.context import DEFAULT_CONTEXT, MoveContext
from chessply.core.enums import STATUS_KEYWORDS, Keyword
from chessply.core.enumerator import Constraints, MoveEnumerator
from chessply.core.ply import Ply

_LOGGER = logging.getLogger(__name__)


class CheckAnnotator:
    """Tags a ply with the status of the position it leads to."""

    @staticmethod
    def annotate(ply: Ply, context: MoveContext | None = None) -> Ply:
        """Append ``CHECK``, ``CHECKMATE`` or ``STALEMATE`` to *ply* when due.

        Materializes (and caches) the successor, then asks whether the
        opponent has any legal reply.  That nested enumeration runs with
        annotation off, so the replies it builds are never annotated
        themselves.  Returns *ply*; a ply that already carries a status,
        or has no steps, is left untouched.
        """
        if ply.has(*STATUS_KEYWORDS):
            return ply
        mover = ply.mover
        if mover is None:
            return ply

        ctx = context if context is not None else DEFAULT_CONTEXT
        successor = ply.successor
        opponent = mover.opposite

        king_sq = successor.king_square(opponent)
        attacked = king_sq is not None and successor.is_attacked(king_sq, mover)
        probe = MoveEnumerator(ctx.probing())
        can_reply = probe.enumerate(
            successor, Constraints(any_move=True, color=opponent)
        )

        if attacked:
            ply.set(Keyword.CHECK if can_reply else Keyword.CHECKMATE)
        elif not can_reply:
            ply.set(Keyword.STALEMATE)

        if ply.status is not None:
            _LOGGER.debug("Tagged %s as %s", ply, ply.status)
        return ply
