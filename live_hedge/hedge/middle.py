"""Middle opportunity detection from live line movement."""
from __future__ import annotations

from typing import Optional

from live_hedge.config import settings
from live_hedge.models.enums import BetSide
from live_hedge.models.outputs import MiddleOpportunity
from live_hedge.utils.logging import get_logger

logger = get_logger(__name__)


def find_middle_opportunity(
    original_line: float,
    live_line: Optional[float],
    side: BetSide,
    min_move: Optional[float] = None,
) -> Optional[MiddleOpportunity]:
    """
    Window where the original bet and an opposing bet at the live line both win.

    An over opens a middle when the live line rises (over the original,
    under the live line); an under when it falls. Moves smaller than
    min_move (default 2 points) are ignored.

    Returns:
        MiddleOpportunity, or None when the line has not moved far enough the right way
    """
    if live_line is None:
        return None
    min_move = settings.middle_min_move if min_move is None else min_move

    movement = live_line - original_line
    favourable = movement if side is BetSide.OVER else -movement
    if favourable < min_move:
        return None

    lower, upper = min(original_line, live_line), max(original_line, live_line)
    logger.debug(f"Middle window {lower}-{upper} ({side.value} {original_line}, live {live_line})")
    return MiddleOpportunity(
        original_line=original_line,
        live_line=live_line,
        lower_bound=lower,
        upper_bound=upper,
        window_size=round(upper - lower, 2),
        hedge_side=side.opposite,
    )
