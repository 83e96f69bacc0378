"""
Unified target value for damage/destroy effects.

Priority order: jammer blocking, active interception blocking, ready state,
threat tier, damage efficiency, damage-type fit. Every single-target damage
evaluation goes through target_value() so units are ranked consistently.
"""

import logging
from math import ceil
from typing import List, Optional, Tuple

from .. import constants as C
from ..models import DamageType, Keyword, Unit, UnitStats

logger = logging.getLogger(__name__)

DESTROY_DAMAGE = 999


def is_lethal(damage: int, stats: UnitStats, damage_type: DamageType = DamageType.NORMAL) -> bool:
    """
    Would `damage` of this type destroy a unit with these stats?

    ION only strips shields, KINETIC is stopped by any shield, SHIELD_BREAKER
    removes two shield points per damage point before hitting hull.
    """
    hull = stats.hull
    shields = 0 if damage_type is DamageType.PIERCING else stats.shields

    if damage_type is DamageType.ION:
        return False
    if damage_type is DamageType.KINETIC:
        return shields == 0 and damage >= hull
    if damage_type is DamageType.SHIELD_BREAKER:
        shield_damage = min(damage * 2, shields)
        used_on_shields = ceil(shield_damage / 2)
        return damage - used_on_shields >= hull
    return damage >= hull + shields


def _threat_tier(stats: UnitStats, reasons: List[str]) -> int:
    value = 0
    tiers = C.CLASS_TIER_BONUS
    class_bonus = tiers[stats.unit_class] if 0 <= stats.unit_class < len(tiers) else 0
    if class_bonus > 0:
        value += class_bonus
        reasons.append(f"Class {stats.unit_class}: +{class_bonus}")

    if stats.attack >= 4:
        attack_bonus = C.HIGH_TARGET_ATTACK_BONUS
    elif stats.attack >= 2:
        attack_bonus = C.MED_ATTACK_BONUS
    else:
        attack_bonus = 0
    if attack_bonus > 0:
        value += attack_bonus
        reasons.append(f"Attack {stats.attack}: +{attack_bonus}")

    if stats.has(Keyword.GUARDIAN):
        value += C.GUARDIAN_TARGET_BONUS
        reasons.append(f"Guardian: +{C.GUARDIAN_TARGET_BONUS}")
    if stats.has(Keyword.DEFENDER):
        value += C.DEFENDER_TARGET_BONUS
        reasons.append(f"Defender: +{C.DEFENDER_TARGET_BONUS}")
    if stats.bonus_ship_damage > 0:
        value += C.ANTI_SHIP_TARGET_BONUS
        reasons.append(f"Anti-Ship: +{C.ANTI_SHIP_TARGET_BONUS}")
    return value


def _damage_type_fit(stats: UnitStats, damage: int, damage_type: DamageType, reasons: List[str]) -> int:
    shields = stats.shields
    value = 0

    if damage_type is DamageType.SHIELD_BREAKER:
        if shields >= 3:
            value += C.SHIELD_BREAKER_HIGH_SHIELD_BONUS
            reasons.append(f"Shield-Breaker vs high shields: +{C.SHIELD_BREAKER_HIGH_SHIELD_BONUS}")
        elif shields <= 1:
            value += C.SHIELD_BREAKER_LOW_SHIELD_PENALTY
            reasons.append(f"Shield-Breaker vs low shields: {C.SHIELD_BREAKER_LOW_SHIELD_PENALTY}")

    elif damage_type is DamageType.ION:
        if shields == 0:
            value += C.ION_NO_SHIELDS_PENALTY
            reasons.append(f"Ion vs no shields: {C.ION_NO_SHIELDS_PENALTY}")
        else:
            stripped = min(damage, shields)
            value += stripped * C.ION_PER_SHIELD_VALUE
            reasons.append(f"Ion strips {stripped} shields: +{stripped * C.ION_PER_SHIELD_VALUE}")
            if damage >= shields:
                value += C.ION_FULL_STRIP_BONUS
                reasons.append(f"Ion full strip: +{C.ION_FULL_STRIP_BONUS}")
            wasted = max(0, damage - shields)
            if wasted > 0:
                value += wasted * C.ION_WASTED_PENALTY
                reasons.append(f"Ion wasted damage: {wasted * C.ION_WASTED_PENALTY}")

    elif damage_type is DamageType.KINETIC:
        if shields > 0:
            value += C.KINETIC_BLOCKED_PENALTY
            reasons.append(f"Kinetic blocked by shields: {C.KINETIC_BLOCKED_PENALTY}")
        else:
            value += C.KINETIC_UNSHIELDED_BONUS
            reasons.append(f"Kinetic vs unshielded: +{C.KINETIC_UNSHIELDED_BONUS}")

    return value


def target_value(target: Unit, ctx, damage: int = DESTROY_DAMAGE,
                 damage_type: DamageType = DamageType.NORMAL,
                 lane: Optional[int] = None) -> Tuple[float, List[str]]:
    """
    Score an enemy unit as the target of a damage/destroy effect.

    Args:
        target: Enemy unit being hit
        ctx: EvaluationContext
        damage: Damage dealt (DESTROY_DAMAGE for destroy effects)
        damage_type: Damage type of the effect
        lane: Lane context for jammer/interception checks (None skips them)

    Returns:
        (score, reasons)
    """
    reasons: List[str] = []
    score = 0
    stats = ctx.stats(target)

    if lane is not None and target.is_ready:
        if stats.has(Keyword.JAMMER):
            others = [u for u in ctx.enemy.units_in(lane) if u.id != target.id]
            if others:
                protected = sum(ctx.stats(u, lane).unit_class * C.JAMMER_PROTECTED_CLASS_WEIGHT
                                + (C.JAMMER_PROTECTED_READY_BONUS if u.is_ready else 0)
                                for u in others)
                bonus = C.JAMMER_BLOCKING_BASE + protected
                score += bonus
                reasons.append(f"Jammer blocking {len(others)} target(s): +{bonus}")
        else:
            blocked = [u for u in ctx.friendly.ready_units(lane)
                       if stats.speed >= ctx.stats(u, lane).speed]
            if blocked:
                bonus = len(blocked) * C.INTERCEPTION_BLOCKER_BONUS
                score += bonus
                reasons.append(f"Blocking {len(blocked)} attacker(s): +{bonus}")

    if target.is_ready:
        score += C.TARGET_READY_BONUS
        reasons.append(f"Ready target: +{C.TARGET_READY_BONUS}")

    score += _threat_tier(stats, reasons)

    piercing = damage_type is DamageType.PIERCING
    durability = stats.hull + (0 if piercing else stats.shields)
    if damage >= durability:
        score += C.TARGET_LETHAL_BONUS
        reasons.append(f"Lethal: +{C.TARGET_LETHAL_BONUS}")
    if piercing and stats.shields > 0:
        score += C.PIERCING_BYPASS_BONUS
        reasons.append(f"Piercing bypass: +{C.PIERCING_BYPASS_BONUS}")

    if damage_type not in (DamageType.NORMAL, DamageType.PIERCING):
        score += _damage_type_fit(stats, damage, damage_type, reasons)

    return score, reasons
