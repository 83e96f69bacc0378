"""
Move Evaluator

Handles moving a ready unit to an adjacent lane.

Decision factors:
- Lane score change in the lane left behind and the lane entered
- Fixed move cost
- Reinforcing a losing lane in front of our own degraded section
- ON_MOVE stat triggers
- Pressing a damaged enemy section (and not over-committing to a critical one)
"""

import logging

from .. import constants as C
from ..analysis.lanes import lane_score, projected_lane_score
from ..models import SectionStatus, Side, Unit
from .base import ActionEvaluator, Evaluation, MoveAction

logger = logging.getLogger(__name__)


def evaluate_move(unit: Unit, from_lane: int, to_lane: int, ctx) -> Evaluation:
    """Score moving `unit` from one lane to another (also used by move cards)"""
    result = Evaluation()

    from_before = lane_score(from_lane, ctx)
    to_before = lane_score(to_lane, ctx)
    moved = ctx.friendly.with_unit_moved(unit.id, to_lane)
    from_after = projected_lane_score(from_lane, ctx, Side.FRIENDLY, moved)
    to_after = projected_lane_score(to_lane, ctx, Side.FRIENDLY, moved)

    result.add_reasoning(f"Lane {to_lane + 1} impact ({to_before:.0f} -> {to_after:.0f})", to_after - to_before)
    result.add_reasoning(f"Lane {from_lane + 1} impact ({from_before:.0f} -> {from_after:.0f})", from_after - from_before)
    result.add_reasoning("Move cost", -C.MOVE_COST)

    if ctx.section_status(ctx.own_section(to_lane)).is_degraded and to_before < 0:
        result.add_reasoning("Defends damaged section", C.DEFENSIVE_MOVE_BONUS)

    definition = ctx.definition(unit)
    for ability in definition.triggered("ON_MOVE"):
        for mod in ability.stat_mods:
            if mod.stat == 'attack' and mod.value > 0:
                result.add_reasoning(f"{ability.name}: +{mod.value} attack on move", mod.value * C.ON_MOVE_ATTACK_BONUS)
            elif mod.stat == 'speed' and mod.value > 0:
                result.add_reasoning(f"{ability.name}: +{mod.value} speed on move", mod.value * C.ON_MOVE_SPEED_BONUS)

    enemy_section = ctx.enemy_section(to_lane)
    if enemy_section is not None and to_before > 0:
        status = ctx.section_status(enemy_section)
        if status is SectionStatus.DAMAGED:
            result.add_reasoning("Presses damaged enemy section", C.OFFENSIVE_MOVE_BONUS)
        elif status is SectionStatus.CRITICAL:
            result.add_reasoning("Overkill on critical enemy section", C.MOVE_OVERKILL_PENALTY)

    return result


class MoveEvaluator(ActionEvaluator):

    def __init__(self):
        super().__init__("Move")

    def can_evaluate(self, action) -> bool:
        return isinstance(action, MoveAction)

    def evaluate(self, action: MoveAction, ctx) -> Evaluation:
        return evaluate_move(action.unit, action.from_lane, action.to_lane, ctx)
