"""
Action Enumerator

Builds the candidate list for one decision cycle. Only hard legality is
applied here (energy, exhaustion, status effects, per-lane caps, guardian
blocks, movement locks); everything else is left to the evaluators. Every
candidate starts with score 0 and an empty reasoning trail.
"""

import logging
from typing import List, Optional, Set

from .evaluators.base import (
    AbilityAction, Action, DeployAction, MoveAction, MovePlan, PlayCardAction,
    SectionAttackAction, UnitAttackAction,
)
from .evaluators.deploy import affordability_problem
from .models import Affinity, Card, Keyword, SectionRef, Side, TargetType, Unit

logger = logging.getLogger(__name__)

ENEMY_ONLY_EFFECTS = (
    'DAMAGE', 'DESTROY', 'OVERFLOW_DAMAGE', 'SPLASH_DAMAGE', 'DAMAGE_SCALING', 'EXHAUST_UNIT',
    'APPLY_CANNOT_MOVE', 'APPLY_CANNOT_ATTACK', 'APPLY_CANNOT_INTERCEPT', 'APPLY_DOES_NOT_READY',
    'DESTROY_UPGRADE',
)
FRIENDLY_ONLY_EFFECTS = ('CLEAR_ALL_STATUS', 'MODIFY_UNIT_BASE')


# =============================================================================
# DEPLOYMENT PHASE
# =============================================================================

def enumerate_deployments(ctx) -> List[DeployAction]:
    """
    One candidate per (unit type, lane).

    A unit type that can't be deployed at all this turn yields a single
    lane-less candidate so the evaluator can record why.
    """
    actions: List[DeployAction] = []
    for unit_name in ctx.friendly.deployment_pool:
        definition = ctx.definition(unit_name)
        if affordability_problem(definition, ctx):
            actions.append(DeployAction(unit_name))
            continue
        for lane in ctx.state.lanes:
            actions.append(DeployAction(unit_name, lane))
    logger.debug(f"Enumerated {len(actions)} deployment candidates")
    return actions


# =============================================================================
# ACTION PHASE
# =============================================================================

def _would_exceed_lane_cap(unit: Unit, to_lane: int, ctx) -> bool:
    definition = ctx.definition(unit)
    if definition.max_per_lane is None:
        return False
    return ctx.friendly.count_in_lane(unit.name, to_lane) >= definition.max_per_lane


def _is_movement_locked(lane: int, ctx) -> bool:
    return any(ctx.has_keyword(u, Keyword.INHIBIT_MOVEMENT) for u in ctx.friendly.units_in(lane))


def _card_targets(card: Card, ctx) -> list:
    targets = ctx.queries.valid_targets(ctx.state, Side.FRIENDLY, None, card)
    effect_type = card.effect.type

    if effect_type == 'HEAL_SHIELDS':
        targets = [t for t in targets
                   if isinstance(t, Unit) and ctx.stats(t).shields < ctx.stats(t).max_shields]
    if effect_type == 'HEAL_HULL' and card.target_type is TargetType.SECTION:
        targets = [t for t in targets if t.section.hull < t.section.max_hull]
    if effect_type in ENEMY_ONLY_EFFECTS:
        targets = [t for t in targets if t.owner is Side.ENEMY]
    if effect_type in FRIENDLY_ONLY_EFFECTS:
        targets = [t for t in targets if t.owner is Side.FRIENDLY]
    return targets


def _enumerate_card_plays(ctx) -> List[Action]:
    actions: List[Action] = []
    seen: Set[tuple] = set()
    energy = ctx.friendly.energy

    for card in ctx.friendly.hand:
        if card.cost > energy:
            continue

        if card.effect.type == 'SINGLE_MOVE':
            for unit in ctx.friendly.ready_units():
                if unit.cannot_move:
                    continue
                for to_lane in ctx.state.adjacent_lanes(unit.lane):
                    if _would_exceed_lane_cap(unit, to_lane, ctx):
                        continue
                    key = (card.id, unit.id, unit.lane, to_lane)
                    if key in seen:
                        continue
                    seen.add(key)
                    actions.append(PlayCardAction(card, move=MovePlan(unit, unit.lane, to_lane)))

        elif card.target_type is TargetType.NONE:
            key = (card.id,)
            if key not in seen:
                seen.add(key)
                actions.append(PlayCardAction(card))

        else:
            for target in _card_targets(card, ctx):
                key = (card.id, target)
                if key in seen:
                    continue
                seen.add(key)
                actions.append(PlayCardAction(card, target))

    return actions


def _enumerate_attacks(ctx) -> List[Action]:
    actions: List[Action] = []
    for attacker in ctx.friendly.ready_units():
        lane = attacker.lane
        stats = ctx.stats(attacker, lane)
        if attacker.cannot_attack or stats.has(Keyword.JAMMER) or stats.attack <= 0:
            continue

        enemies = ctx.enemy.units_in(lane)
        for target in enemies:
            actions.append(UnitAttackAction(attacker, target))

        section = ctx.enemy_section(lane)
        if section is None or section.hull <= 0:
            continue
        if any(ctx.stats(e, lane).has(Keyword.GUARDIAN) for e in enemies):
            continue
        actions.append(SectionAttackAction(attacker, SectionRef(section, lane, Side.ENEMY)))
    return actions


def _enumerate_moves(ctx) -> List[Action]:
    actions: List[Action] = []
    for unit in ctx.friendly.ready_units():
        if unit.cannot_move or _is_movement_locked(unit.lane, ctx):
            continue
        for to_lane in ctx.state.adjacent_lanes(unit.lane):
            if _would_exceed_lane_cap(unit, to_lane, ctx):
                continue
            actions.append(MoveAction(unit, unit.lane, to_lane))
    return actions


def ability_targets(unit: Unit, ability, ctx) -> List[Unit]:
    """Units an ACTIVE ability of `unit` may target"""
    if ability.affinity is Affinity.SELF:
        return [unit]

    if ability.affinity is Affinity.FRIENDLY:
        sides = [ctx.friendly]
    elif ability.affinity is Affinity.ENEMY:
        sides = [ctx.enemy]
    else:
        sides = [ctx.friendly, ctx.enemy]

    if ability.location == 'SAME_LANE':
        lanes = [unit.lane]
    elif ability.location == 'OTHER_LANES':
        lanes = [l for l in ctx.state.lanes if l != unit.lane]
    else:
        lanes = list(ctx.state.lanes)

    targets = []
    for side in sides:
        for lane in lanes:
            for candidate in side.units_in(lane):
                if 'DAMAGED_HULL' in ability.restrictions:
                    stats = ctx.stats(candidate, lane)
                    if stats.hull >= stats.max_hull:
                        continue
                targets.append(candidate)
    return targets


def _enumerate_abilities(ctx) -> List[Action]:
    actions: List[Action] = []
    energy = ctx.friendly.energy
    for unit in ctx.friendly.ready_units():
        for ability in ctx.definition(unit).active_abilities:
            if ability.energy_cost > energy:
                continue
            for target in ability_targets(unit, ability, ctx):
                actions.append(AbilityAction(unit, ability, target))
    return actions


def enumerate_actions(ctx, include: Optional[Set[str]] = None) -> List[Action]:
    """
    Every structurally legal action-phase candidate.

    Args:
        ctx: EvaluationContext
        include: Optional subset of {'cards', 'attacks', 'moves', 'abilities'}
    """
    groups = {
        'cards': _enumerate_card_plays,
        'attacks': _enumerate_attacks,
        'moves': _enumerate_moves,
        'abilities': _enumerate_abilities,
    }
    actions: List[Action] = []
    for name, build in groups.items():
        if include is not None and name not in include:
            continue
        actions.extend(build(ctx))
    logger.debug(f"Enumerated {len(actions)} action candidates")
    return actions
