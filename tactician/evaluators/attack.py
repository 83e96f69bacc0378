"""
Attack Evaluators

Unit-vs-unit attacks and attacks on enemy ship sections.

Unit attack factors:
- Target class, favorable trade, ready target
- Lane score gained by removing the target (lethal attacks only)
- Anti-ship units wasted on unit targets
- Piercing against shielded targets
- RETALIATE damage taken when the target survives

Section attack factors:
- Ship damage, section health state, shield state
- Piercing, and pushing the section across a health threshold
"""

import logging

from .. import constants as C
from ..analysis.lanes import lane_score, project_section_damage, projected_lane_score
from ..analysis.targeting import is_lethal
from ..models import DamageType, Keyword, SectionStatus, Side
from .base import ActionEvaluator, Evaluation, SectionAttackAction, UnitAttackAction

logger = logging.getLogger(__name__)


class UnitAttackEvaluator(ActionEvaluator):

    def __init__(self):
        super().__init__("UnitAttack")

    def can_evaluate(self, action) -> bool:
        return isinstance(action, UnitAttackAction)

    def evaluate(self, action: UnitAttackAction, ctx) -> Evaluation:
        result = Evaluation()
        lane = action.lane
        attacker = ctx.stats(action.attacker, lane)
        target = ctx.stats(action.target, lane)

        result.add_reasoning(f"Target class {target.unit_class}", target.unit_class * C.TARGET_CLASS_WEIGHT)
        if attacker.unit_class < target.unit_class:
            result.add_reasoning("Favorable trade", C.FAVORABLE_TRADE_BONUS)
        if action.target.is_ready:
            result.add_reasoning("Ready target", C.READY_TARGET_BONUS)

        if attacker.bonus_ship_damage > 0:
            result.add_reasoning("Anti-ship unit attacking a unit", C.ANTI_SHIP_DENIAL_PENALTY)

        if attacker.damage_type is DamageType.PIERCING and target.shields > 0:
            result.add_reasoning("Piercing bypass", target.shields * C.PIERCING_SHIELD_BONUS)

        lethal = is_lethal(attacker.attack, target, attacker.damage_type)
        if not lethal and target.has(Keyword.RETALIATE):
            retaliation = target.attack
            if retaliation >= attacker.durability:
                result.add_reasoning(f"Retaliation kills attacker ({retaliation})", C.RETALIATE_LETHAL_PENALTY)
            elif retaliation > 0:
                result.add_reasoning(f"Retaliation damage {retaliation}", retaliation * C.RETALIATE_DAMAGE_PENALTY)

        if lethal:
            result.add_reasoning("Lethal", C.LETHAL_ATTACK_BONUS)
            current = lane_score(lane, ctx)
            projected = projected_lane_score(lane, ctx, Side.ENEMY, ctx.enemy.without_unit(action.target.id))
            result.add_reasoning("Lane impact", (projected - current) * C.LANE_IMPACT_WEIGHT)

        return result


class SectionAttackEvaluator(ActionEvaluator):

    def __init__(self):
        super().__init__("SectionAttack")

    def can_evaluate(self, action) -> bool:
        return isinstance(action, SectionAttackAction)

    def evaluate(self, action: SectionAttackAction, ctx) -> Evaluation:
        result = Evaluation()
        lane = action.lane
        attacker = ctx.stats(action.attacker, lane)
        section = action.target.section
        damage = attacker.ship_threat

        result.add_reasoning(f"Ship damage {damage}", damage * C.SECTION_ATTACK_WEIGHT)

        status = ctx.section_status(section)
        if status is SectionStatus.DAMAGED:
            result.add_reasoning("Damaged section", C.SECTION_DAMAGED_BONUS)
        elif status is SectionStatus.CRITICAL:
            result.add_reasoning("Critical section", C.SECTION_CRITICAL_BONUS)

        if section.shields == 0:
            result.add_reasoning("No shields", C.SECTION_NO_SHIELDS_BONUS)
        elif damage >= section.shields:
            result.add_reasoning("Breaks shields", C.SECTION_SHIELD_BREAK_BONUS)

        if attacker.attack >= C.HIGH_ATTACK_THRESHOLD:
            result.add_reasoning("High attack", C.HIGH_ATTACK_BONUS)

        piercing = attacker.damage_type is DamageType.PIERCING
        if piercing and section.shields > 0:
            result.add_reasoning("Piercing bypass", section.shields * C.PIERCING_SECTION_BONUS)

        incoming = damage + section.shields if piercing else damage
        projection = project_section_damage(section, incoming, ctx)
        if projection.crosses_threshold:
            if status is SectionStatus.HEALTHY:
                result.add_reasoning("Pushes section to damaged", C.CROSS_TO_DAMAGED_BONUS)
            else:
                result.add_reasoning("Pushes section to critical", C.CROSS_TO_CRITICAL_BONUS)

        return result
