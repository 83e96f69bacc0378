"""
Movement Lock Pass

A lock token (INHIBIT_MOVEMENT unit) sitting in one of our lanes stops every
unit there from moving out. Abilities that remove such a token (its own
purge, or friendly damage that destroys it) are worth the mobility they
give back.
"""

import logging
from typing import List, Optional

from .. import constants as C
from ..evaluators.base import AbilityAction, Action
from ..models import Keyword, Side, Unit

logger = logging.getLogger(__name__)


def _removed_lock(action: Action, ctx) -> Optional[Unit]:
    """The friendly lock token this action removes, if any"""
    if not isinstance(action, AbilityAction):
        return None

    if action.ability.effect_type == 'DESTROY_TOKEN_SELF':
        token = action.unit
    elif action.ability.effect_type == 'DAMAGE' and isinstance(action.target, Unit):
        token = action.target
        if action.ability.value < ctx.stats(token).durability:
            return None
    else:
        return None

    if token.owner is not Side.FRIENDLY or not ctx.has_keyword(token, Keyword.INHIBIT_MOVEMENT):
        return None
    return token


def mobility_value(token: Unit, ctx) -> float:
    locked = [u for u in ctx.friendly.ready_units(token.lane)
              if u.id != token.id and not ctx.is_token(u) and not u.cannot_move]
    value = len(locked) * C.MOBILITY_PER_LOCKED_UNIT
    value += sum(C.MOBILITY_HIGH_CLASS_BONUS for u in locked
                 if ctx.stats(u).unit_class >= C.MOBILITY_HIGH_CLASS_MIN)
    return value


def apply_mobility_lock(actions: List[Action], ctx) -> List[Action]:
    result: List[Action] = []
    for action in actions:
        token = None if action.is_invalid else _removed_lock(action, ctx)
        if token is not None:
            value = mobility_value(token, ctx)
            if value > 0:
                logger.debug(f"Removing lock token {token.id} frees lane {token.lane + 1} ({value:.0f})")
                action = action.adjusted(f"Frees movement in lane {token.lane + 1}", value)
        result.append(action)
    return result
