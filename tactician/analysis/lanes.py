"""
Lane / Threat Analysis

Per-lane interception categories, the "threats kept in check" by a friendly
unit, section damage projection, and the lane favorability score used by
deployment, movement and stat-buff evaluation.

Interception is decided by speed: a unit can intercept an attacker whose
speed is less than or equal to its own. A side whose fastest ready unit has
speed 0 (including an empty or fully exhausted side) poses no interception
threat at all.
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple

from ..constants import (
    ENEMY_SECTION_CRITICAL_BONUS, ENEMY_SECTION_DAMAGED_BONUS, LANE_SPEED_WEIGHT,
    OWN_SECTION_CRITICAL_PENALTY, OWN_SECTION_DAMAGED_PENALTY,
)
from ..models import PlayerState, SectionStatus, ShipSection, Side, Unit
from .impact import unit_impact

logger = logging.getLogger(__name__)


# =============================================================================
# INTERCEPTION CATEGORIES
# =============================================================================

@dataclass(frozen=True)
class LaneAnalysis:
    """
    Interception categories for one lane, by unit id.

    slow_attackers: friendly units the enemy can intercept
    unchecked_threats: friendly units faster than every ready enemy
    defensive_interceptors: friendly units at least as fast as some ready enemy
    enemy_interceptors: enemy units that can intercept our fastest attacker

    Units under a cannot-intercept status are never counted as interceptors.
    """
    lane: int
    slow_attackers: FrozenSet[str] = frozenset()
    unchecked_threats: FrozenSet[str] = frozenset()
    defensive_interceptors: FrozenSet[str] = frozenset()
    enemy_interceptors: FrozenSet[str] = frozenset()

    @property
    def is_quiet(self) -> bool:
        return not (self.slow_attackers or self.unchecked_threats
                    or self.defensive_interceptors or self.enemy_interceptors)


def analyze_lane(lane: int, ctx) -> LaneAnalysis:
    """Classify the ready units of both sides in `lane`"""
    friendly_ready = ctx.friendly.ready_units(lane)
    enemy_ready = ctx.enemy.ready_units(lane)

    friendly_max = ctx.max_ready_speed(ctx.friendly, lane)
    enemy_max = ctx.max_ready_speed(ctx.enemy, lane)
    enemy_speeds = [ctx.stats(e, lane).speed for e in enemy_ready]

    slow, unchecked, defensive = set(), set(), set()
    if enemy_max > 0:
        for unit in friendly_ready:
            speed = ctx.stats(unit, lane).speed
            if speed <= enemy_max:
                slow.add(unit.id)
            else:
                unchecked.add(unit.id)
            if not unit.cannot_intercept and any(speed >= s for s in enemy_speeds):
                defensive.add(unit.id)

    enemy_interceptors = set()
    if friendly_max > 0:
        enemy_interceptors = {e.id for e in enemy_ready
                              if not e.cannot_intercept and ctx.stats(e, lane).speed >= friendly_max}

    return LaneAnalysis(
        lane=lane,
        slow_attackers=frozenset(slow),
        unchecked_threats=frozenset(unchecked),
        defensive_interceptors=frozenset(defensive),
        enemy_interceptors=frozenset(enemy_interceptors),
    )


# =============================================================================
# SECTION DAMAGE PROJECTION
# =============================================================================

@dataclass(frozen=True)
class SectionProjection:
    """Outcome of `incoming` damage against one section (shields absorb first)"""
    damage: int
    hull_damage: int
    projected_hull: int
    current_status: SectionStatus
    crosses_threshold: bool


def would_cross_threshold(status: SectionStatus, projected_hull: int, section: ShipSection) -> bool:
    """Healthy -> damaged or damaged -> critical; a critical section has nowhere worse to go"""
    if status is SectionStatus.HEALTHY:
        return projected_hull <= section.damaged_threshold
    if status is SectionStatus.DAMAGED:
        return projected_hull <= section.critical_threshold
    return False


def project_section_damage(section: ShipSection, incoming: int, ctx) -> SectionProjection:
    status = ctx.section_status(section)
    hull_damage = max(0, incoming - section.shields)
    projected = section.hull - hull_damage
    return SectionProjection(
        damage=incoming,
        hull_damage=hull_damage,
        projected_hull=projected,
        current_status=status,
        crosses_threshold=would_cross_threshold(status, projected, section),
    )


def count_degraded_sections(player_state: PlayerState, ctx) -> int:
    return sum(1 for s in player_state.sections
               if s is not None and ctx.section_status(s).is_degraded)


# =============================================================================
# THREATS KEPT IN CHECK
# =============================================================================

@dataclass(frozen=True)
class HeldThreat:
    unit_id: str
    name: str
    ship_threat: int
    impact: float
    speed: int


@dataclass(frozen=True)
class ThreatCheck:
    """What a friendly unit is holding back by staying ready in its lane"""
    threats: Tuple[HeldThreat, ...] = ()
    total_threat_damage: int = 0
    total_impact: float = 0.0
    would_cause_transition: bool = False
    current_status: SectionStatus = SectionStatus.HEALTHY
    damaged_section_count: int = 0

    @property
    def holds_anything(self) -> bool:
        return len(self.threats) > 0


def threats_kept_in_check(defender: Unit, lane: int, ctx) -> ThreatCheck:
    """
    Ship damage the enemy could deal in `lane` if `defender` exhausts.

    Counts every ready enemy no faster than the defender, valued at its
    ship threat (attack plus passive anti-ship bonus).
    """
    if ctx.max_ready_speed(ctx.enemy, lane) <= 0:
        return ThreatCheck(damaged_section_count=count_degraded_sections(ctx.friendly, ctx))

    defender_speed = ctx.stats(defender, lane).speed
    held = []
    for enemy in ctx.enemy.ready_units(lane):
        stats = ctx.stats(enemy, lane)
        if defender_speed >= stats.speed:
            held.append(HeldThreat(
                unit_id=enemy.id,
                name=enemy.name,
                ship_threat=max(0, stats.attack) + stats.bonus_ship_damage,
                impact=unit_impact(enemy, ctx, lane),
                speed=stats.speed,
            ))

    total_damage = sum(t.ship_threat for t in held)
    total_impact = sum(t.impact for t in held)
    damaged_count = count_degraded_sections(ctx.friendly, ctx)

    section = ctx.own_section(lane)
    if section is None:
        return ThreatCheck(tuple(held), total_damage, total_impact, False,
                           SectionStatus.HEALTHY, damaged_count)

    projection = project_section_damage(section, total_damage, ctx)
    return ThreatCheck(
        threats=tuple(held),
        total_threat_damage=total_damage,
        total_impact=total_impact,
        would_cause_transition=projection.crosses_threshold,
        current_status=projection.current_status,
        damaged_section_count=damaged_count,
    )


# =============================================================================
# LANE FAVORABILITY
# =============================================================================

def _lane_power(units, lane: int, ctx) -> int:
    total = 0
    for unit in units:
        stats = ctx.stats(unit, lane)
        total += stats.attack + stats.bonus_ship_damage + stats.hull + stats.shields
    return total


def _max_speed(units, lane: int, ctx) -> int:
    speeds = [ctx.stats(u, lane).speed for u in units]
    return max(speeds) if speeds else 0


def lane_score(lane: int, ctx) -> float:
    """
    Friendly-minus-enemy favorability of a lane.

    Power (attack + ship bonus + hull + shields) difference, plus the speed
    edge, plus section health modifiers for both sides.
    """
    friendly_units = ctx.friendly.units_in(lane)
    enemy_units = ctx.enemy.units_in(lane)

    base = _lane_power(friendly_units, lane, ctx) - _lane_power(enemy_units, lane, ctx)
    speed = (_max_speed(friendly_units, lane, ctx) - _max_speed(enemy_units, lane, ctx)) * LANE_SPEED_WEIGHT

    health = 0
    own_status = ctx.section_status(ctx.own_section(lane))
    if own_status is SectionStatus.DAMAGED:
        health += OWN_SECTION_DAMAGED_PENALTY
    elif own_status is SectionStatus.CRITICAL:
        health += OWN_SECTION_CRITICAL_PENALTY

    enemy_status = ctx.section_status(ctx.enemy_section(lane))
    if enemy_status is SectionStatus.DAMAGED:
        health += ENEMY_SECTION_DAMAGED_BONUS
    elif enemy_status is SectionStatus.CRITICAL:
        health += ENEMY_SECTION_CRITICAL_BONUS

    return base + speed + health


def projected_lane_score(lane: int, ctx, side: Side, player_state: PlayerState) -> float:
    """Lane score after replacing one side's board with a hypothetical one"""
    return lane_score(lane, ctx.with_state(ctx.state.with_side(side, player_state)))


def find_lane_of(unit_id: str, player_state: PlayerState) -> Optional[int]:
    unit = player_state.find_unit(unit_id)
    return unit.lane if unit is not None else None
