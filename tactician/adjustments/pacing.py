"""
Pacing Pass

When we have fewer ready units than the opponent, unit actions just trade
into a bigger board; bias the choice toward worthwhile card plays instead.
"""

import logging
from typing import List

from .. import constants as C
from ..evaluators.base import Action, PlayCardAction

logger = logging.getLogger(__name__)


def apply_pacing(actions: List[Action], ctx) -> List[Action]:
    threshold = ctx.setting('pacing', 'ready_unit_deficit_threshold', C.PACING_DEFICIT_THRESHOLD)
    bonus = ctx.setting('pacing', 'card_play_bonus', C.PACING_CARD_BONUS)

    ours = len(ctx.friendly.ready_units())
    theirs = len(ctx.enemy.ready_units())
    if theirs - ours < threshold:
        return list(actions)

    logger.debug(f"Outnumbered on ready units ({ours} vs {theirs}), favoring cards")
    return [
        a.adjusted(f"Outnumbered ({ours} vs {theirs} ready)", bonus)
        if isinstance(a, PlayCardAction) and a.score > 0 else a
        for a in actions
    ]
