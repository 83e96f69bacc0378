"""
Interception Responder

Decides, for one incoming enemy attack, whether to intercept and with which
unit. Interceptors are tried cheapest first (lowest impact); the first one
worth using is chosen. No interceptors, or none worth using, is a decline.

Per-candidate flow:
1. Opportunity gate: if another ready enemy in the lane is a bigger blockable
   ship threat (more than 1.5x this attack), save the interceptor for it.
2. Survives the hit (hull + shields > base attack): accept cheap trades
   outright, otherwise only when what we protect is worth it.
3. Dies to the hit: accept only when what we protect clearly outweighs the
   interceptor.
4. DOGFIGHT interceptors that were accepted get a bonus for the damage they
   deal back.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from . import constants as C
from .analysis.impact import unit_impact
from .models import AttackContext, Keyword, SectionRef, Unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Verdict:
    accept: bool
    score: float
    reason: str


@dataclass(frozen=True)
class InterceptionTrace:
    """Audit entry for one interceptor considered (or for 'no interceptors')"""
    interceptor: Optional[Unit]
    score: float
    reasoning: Tuple[str, ...] = ()
    chosen: bool = False

    @property
    def label(self) -> str:
        if self.interceptor is None:
            return "No interception"
        return f"Intercept with {self.interceptor.name} [{self.interceptor.id}]"


@dataclass(frozen=True)
class InterceptionDecision:
    interceptor: Optional[Unit]
    trace: Tuple[InterceptionTrace, ...] = field(default_factory=tuple)

    @property
    def declined(self) -> bool:
        return self.interceptor is None


def judge_interception(survives: bool, interceptor_impact: float, attacker_impact: float,
                       protection_value: float) -> Verdict:
    """
    Accept/decline for one interceptor, before retaliation bonuses.

    Args:
        survives: Interceptor's hull + shields exceed the attacker's base attack
        interceptor_impact: Impact of the interceptor
        attacker_impact: Impact of the attacker
        protection_value: Value of what the attack would hit
    """
    if survives:
        ratio = interceptor_impact / attacker_impact if attacker_impact > 0 else float('inf')
        if ratio < C.EXCELLENT_TRADE_RATIO:
            return Verdict(True, C.EXCELLENT_TRADE_SCORE, f"Excellent trade (ratio {ratio:.2f})")
        if ratio < C.GOOD_TRADE_RATIO:
            return Verdict(True, C.GOOD_TRADE_SCORE, f"Good trade (ratio {ratio:.2f})")
        if protection_value > interceptor_impact * C.PROTECTION_WORTH_RATIO:
            return Verdict(True, C.WORTHWHILE_TRADE_SCORE,
                           f"Protection worth it ({protection_value:.0f} vs {interceptor_impact:.0f})")
        return Verdict(False, C.INVALID_SCORE, f"Not worth it (ratio {ratio:.2f})")

    ratio = protection_value / interceptor_impact if interceptor_impact > 0 else float('inf')
    if ratio > C.EXCELLENT_SACRIFICE_RATIO:
        return Verdict(True, C.EXCELLENT_SACRIFICE_SCORE, f"Excellent sacrifice (ratio {ratio:.2f})")
    if ratio > C.GOOD_SACRIFICE_RATIO:
        return Verdict(True, C.GOOD_SACRIFICE_SCORE, f"Good sacrifice (ratio {ratio:.2f})")
    return Verdict(False, C.INVALID_SCORE, f"Sacrifice not worth it (ratio {ratio:.2f})")


def protection_value(attack: AttackContext, ship_threat: int, ctx) -> float:
    """Value of what the attack would hit"""
    target = attack.target
    if isinstance(target, SectionRef):
        if target.section.shields > 0:
            return ship_threat * C.SHIELD_PROTECTION_WEIGHT
        return ship_threat * C.HULL_PROTECTION_WEIGHT
    if isinstance(target, Unit):
        return unit_impact(target, ctx, attack.lane)
    return ship_threat * C.DEFAULT_PROTECTION_WEIGHT


def max_blockable_threat(attack: AttackContext, interceptors: Sequence[Unit], ctx) -> int:
    """Largest ship threat among the other ready enemies in the lane that we could block"""
    lane = attack.lane
    speeds = [ctx.stats(i, lane).speed for i in interceptors]
    largest = 0
    for enemy in ctx.enemy.ready_units(lane):
        if enemy.id == attack.attacker.id:
            continue
        stats = ctx.stats(enemy, lane)
        if not any(speed > stats.speed for speed in speeds):
            continue
        threat = (stats.attack or 1) + stats.bonus_ship_damage
        largest = max(largest, threat)
    return largest


def respond_to_attack(attack: AttackContext, interceptors: Sequence[Unit], ctx) -> InterceptionDecision:
    """
    Choose an interceptor for `attack`, or decline.

    Args:
        attack: The incoming attack (attacker is an enemy unit)
        interceptors: Friendly units already filtered for interception legality
        ctx: EvaluationContext with the defending side as `friendly`
    """
    if not interceptors:
        return InterceptionDecision(None, (
            InterceptionTrace(None, C.INVALID_SCORE, ("No interceptors available",)),
        ))

    lane = attack.lane
    attacker_stats = ctx.stats(attack.attacker, lane)
    base_attack = attacker_stats.attack or 1
    ship_threat = base_attack + attacker_stats.bonus_ship_damage if attack.targets_section else base_attack
    attacker_impact = unit_impact(attack.attacker, ctx, lane)
    protecting = protection_value(attack, ship_threat, ctx)
    biggest_other = max_blockable_threat(attack, interceptors, ctx)

    ranked = sorted(interceptors, key=lambda u: unit_impact(u, ctx, lane))
    trace: List[InterceptionTrace] = []

    for interceptor in ranked:
        reasons = [f"Attacker {attack.attacker.name}: attack {base_attack}, ship threat {ship_threat}"]

        if biggest_other > 0 and biggest_other > ship_threat * C.OPPORTUNITY_THREAT_RATIO:
            reasons.append(f"Saving for bigger threat ({biggest_other} vs {ship_threat})")
            trace.append(InterceptionTrace(interceptor, C.INVALID_SCORE, tuple(reasons)))
            continue

        stats = ctx.stats(interceptor, lane)
        impact = unit_impact(interceptor, ctx, lane)
        survives = stats.durability > base_attack
        reasons.append(f"{'Survives' if survives else 'Dies'} ({stats.durability} vs {base_attack}), "
                       f"impact {impact:.1f} vs {attacker_impact:.1f}, protecting {protecting:.0f}")

        verdict = judge_interception(survives, impact, attacker_impact, protecting)
        reasons.append(verdict.reason)
        score = verdict.score

        if verdict.accept and stats.has(Keyword.DOGFIGHT) and stats.attack > 0:
            if stats.attack >= attacker_stats.durability:
                score += C.DOGFIGHT_LETHAL_BONUS
                reasons.append(f"Dogfight kills attacker (+{C.DOGFIGHT_LETHAL_BONUS})")
            else:
                bonus = stats.attack * C.DOGFIGHT_DAMAGE_BONUS
                score += bonus
                reasons.append(f"Dogfight damage {stats.attack} (+{bonus})")

        trace.append(InterceptionTrace(interceptor, score, tuple(reasons), chosen=verdict.accept))
        if verdict.accept:
            logger.debug(f"Intercepting {attack.attacker.name} with {interceptor.name} ({score:.0f})")
            return InterceptionDecision(interceptor, tuple(trace))

    return InterceptionDecision(None, tuple(trace))
