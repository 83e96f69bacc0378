"""
Ability Evaluator

Scores activating a ready unit's ACTIVE ability on one target.
"""

import logging

from .. import constants as C
from ..models import Unit
from .base import AbilityAction, ActionEvaluator, Evaluation

logger = logging.getLogger(__name__)

CROSS_LANE_LOCATIONS = ('ANY_LANE', 'OTHER_LANES')


class AbilityEvaluator(ActionEvaluator):

    def __init__(self):
        super().__init__("Ability")

    def can_evaluate(self, action) -> bool:
        return isinstance(action, AbilityAction)

    def evaluate(self, action: AbilityAction, ctx) -> Evaluation:
        ability = action.ability
        target = action.target
        result = Evaluation()

        if ability.effect_type == 'HEAL':
            if not isinstance(target, Unit):
                return Evaluation.invalid("Heal needs a unit target")
            stats = ctx.stats(target)
            healed = min(ability.value, stats.max_hull - stats.hull)
            if healed <= 0:
                return Evaluation.invalid(f"{target.name} has no hull damage")
            result.add_reasoning(f"Heals {healed} hull",
                                 healed * C.ABILITY_HEAL_PER_POINT + stats.unit_class * C.ABILITY_HEAL_CLASS_WEIGHT)

        elif ability.effect_type == 'DAMAGE':
            if not isinstance(target, Unit):
                return Evaluation.invalid("Damage needs a unit target")
            stats = ctx.stats(target)
            result.add_reasoning(f"Deals {ability.value} damage", ability.value * C.ABILITY_DAMAGE_PER_POINT)
            if ability.value >= stats.durability:
                result.add_reasoning("Lethal", C.ABILITY_LETHAL_BONUS + stats.unit_class * C.ABILITY_LETHAL_CLASS_WEIGHT)
            if ability.location in CROSS_LANE_LOCATIONS:
                result.add_reasoning("Cross-lane reach", C.ABILITY_CROSS_LANE_BONUS)

        elif ability.effect_type == 'DESTROY_TOKEN_SELF':
            result.add_reasoning("Purge token", C.PURGE_TOKEN_BASE_SCORE)

        else:
            result.add_reasoning(ability.effect_type, C.ABILITY_DEFAULT_SCORE)

        if ability.energy_cost:
            result.add_reasoning(f"Energy {ability.energy_cost}", -ability.energy_cost * C.ABILITY_ENERGY_WEIGHT)
        return result
