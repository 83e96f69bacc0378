"""
Anti-Ship Denial Removal Pass

Anti-ship units are penalized for attacking units so they keep hitting
ships. When nothing better is on the table this cycle (no worthwhile card
play, no open section attack, no other unit's attack) the penalty is
refunded. The list is rescanned here, after the earlier passes.
"""

import logging
from typing import List

from .. import constants as C
from ..evaluators.base import Action, PlayCardAction, SectionAttackAction, UnitAttackAction

logger = logging.getLogger(__name__)


def _has_alternative(attacker_id: str, actions: List[Action]) -> bool:
    for action in actions:
        if action.is_invalid or action.score <= 0:
            continue
        if isinstance(action, (PlayCardAction, SectionAttackAction)):
            return True
        if isinstance(action, UnitAttackAction) and action.attacker.id != attacker_id:
            return True
    return False


def apply_denial_removal(actions: List[Action], ctx) -> List[Action]:
    result: List[Action] = []
    for action in actions:
        if (isinstance(action, UnitAttackAction) and not action.is_invalid
                and ctx.stats(action.attacker, action.lane).bonus_ship_damage > 0
                and not _has_alternative(action.attacker.id, actions)):
            action = action.adjusted("No better alternative, anti-ship penalty refunded",
                                     -C.ANTI_SHIP_DENIAL_PENALTY)
        result.append(action)
    return result
