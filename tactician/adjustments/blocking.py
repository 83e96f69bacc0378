"""
Jammer Blocking Pass

A ready enemy JAMMER forces single-target cards in its lane onto itself.
Card plays aimed at any other enemy unit in that lane are invalid; the value
they would have had (or, if larger, the value of every affordable
single-target card in hand against the protected units) becomes a bonus for
attacks that remove the jammer.
"""

import logging
from typing import Dict, List

from .. import constants as C
from ..evaluators.base import Action, PlayCardAction, UnitAttackAction
from ..evaluators.card import evaluate_card_play
from ..models import Affinity, Keyword, Side, Unit

logger = logging.getLogger(__name__)

BLOCKED_REASON = "BLOCKED BY JAMMER"


def _jammer_lanes(ctx) -> Dict[int, List[Unit]]:
    """Lane -> protected (non-jammer) enemy units, for lanes holding a ready enemy jammer"""
    lanes = {}
    for lane in ctx.state.lanes:
        units = ctx.enemy.units_in(lane)
        if any(u.is_ready and ctx.stats(u, lane).has(Keyword.JAMMER) for u in units):
            lanes[lane] = [u for u in units if not ctx.stats(u, lane).has(Keyword.JAMMER)]
    return lanes


def _is_blocked_play(action: Action, jammer_lanes, ctx) -> bool:
    if not isinstance(action, PlayCardAction) or not isinstance(action.target, Unit):
        return False
    target = action.target
    if target.owner is not Side.ENEMY or target.lane not in jammer_lanes:
        return False
    return not ctx.stats(target).has(Keyword.JAMMER)


def affordable_blocked_value(protected: List[Unit], ctx) -> float:
    """
    Value of the hand's affordable single-target unit cards against the
    units a jammer is protecting (best target per card, summed).
    """
    total = 0.0
    for card in ctx.friendly.hand:
        if card.cost > ctx.friendly.energy or not card.is_single_target_vs_units:
            continue
        if card.affinity is Affinity.FRIENDLY:
            continue
        best = max((evaluate_card_play(card, unit, ctx).score for unit in protected), default=0)
        total += max(0, best)
    return total


def apply_blocking(actions: List[Action], ctx) -> List[Action]:
    jammer_lanes = _jammer_lanes(ctx)
    if not jammer_lanes:
        return list(actions)

    blocked_value = {lane: 0.0 for lane in jammer_lanes}
    adjusted: List[Action] = []
    for action in actions:
        if _is_blocked_play(action, jammer_lanes, ctx) and not action.is_invalid:
            blocked_value[action.target.lane] += max(0, action.score)
            adjusted.append(action.invalidated(BLOCKED_REASON))
        else:
            adjusted.append(action)

    for lane, protected in jammer_lanes.items():
        affordable = affordable_blocked_value(protected, ctx) if protected else 0.0
        if affordable > blocked_value[lane]:
            blocked_value[lane] = affordable
        if blocked_value[lane] > 0:
            logger.debug(f"Jammer in lane {lane + 1} is blocking {blocked_value[lane]:.0f} of card value")

    result: List[Action] = []
    for action in adjusted:
        if (isinstance(action, UnitAttackAction) and not action.is_invalid
                and action.target.lane in jammer_lanes
                and ctx.stats(action.target).has(Keyword.JAMMER)):
            value = blocked_value[action.target.lane]
            if value > 0:
                action = action.adjusted("Removes jammer, unblocks cards", value)
                if ctx.stats(action.attacker).attack <= C.JAMMER_EFFICIENCY_ATTACK_MAX:
                    action = action.adjusted("Efficient jammer removal", C.JAMMER_EFFICIENCY_BONUS)
        result.append(action)
    return result
