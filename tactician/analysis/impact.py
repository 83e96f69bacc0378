"""
Impact Valuator

One scalar "how valuable is this unit" used wherever two units are compared
(trades, sacrifices, interceptor ordering). Always fed effective stats.
"""

from typing import Optional

from ..constants import IMPACT_ATTACK_WEIGHT, IMPACT_CLASS_WEIGHT, IMPACT_DURABILITY_WEIGHT
from ..models import Unit, UnitStats


def impact_from_stats(stats: UnitStats) -> float:
    """
    impact = (attack + bonus ship damage) * 4 + class * 2 + (hull + shields) * 0.5

    Offense and role outweigh raw toughness.
    """
    offense = max(0, stats.attack) + stats.bonus_ship_damage
    return (offense * IMPACT_ATTACK_WEIGHT
            + stats.unit_class * IMPACT_CLASS_WEIGHT
            + stats.durability * IMPACT_DURABILITY_WEIGHT)


def unit_impact(unit: Unit, ctx, lane: Optional[int] = None) -> float:
    """Impact of a unit on the board, using its effective stats in `lane`"""
    return impact_from_stats(ctx.stats(unit, lane))
