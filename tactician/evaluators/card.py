"""
Card Evaluator

Scores playing one card against one target. evaluate_card_play() is the
single source of card value: the card evaluator, the jammer blocking pass
and the interception pass all call it.

Most effects pay a cost penalty of card cost x 4 (configurable under
evaluator_weights.card.cost_weight); pure utility effects (energy, draw,
heals) are valued net of cost already.
"""

import logging
from dataclasses import replace
from typing import Callable, Dict, Optional

from .. import constants as C
from ..analysis.lanes import analyze_lane, find_lane_of, lane_score, projected_lane_score
from ..analysis.targeting import target_value
from ..models import Card, Condition, DamageType, Keyword, LaneRef, Side, Target, Unit, UnitTypeRef, UpgradeRef
from .base import ActionEvaluator, Evaluation, MovePlan, PlayCardAction
from .deploy import copies_left
from .move import evaluate_move

logger = logging.getLogger(__name__)


def _apply_cost(card: Card, result: Evaluation, ctx):
    weight = ctx.strategy.get_weight('card', 'cost_weight', C.CARD_COST_WEIGHT)
    penalty = card.cost * weight
    if penalty:
        result.add_reasoning(f"Cost {card.cost}", -penalty)


def _meets_filter(stats, effect) -> bool:
    if not effect.filter_stat:
        return True
    value = getattr(stats, effect.filter_stat, 0)
    if effect.filter_comparison == 'GTE':
        return value >= effect.filter_value
    if effect.filter_comparison == 'LTE':
        return value <= effect.filter_value
    return False


def _enemy_unit_lane(target: Target, ctx) -> Optional[int]:
    """Lane of an enemy unit target; None for anything else"""
    if not isinstance(target, Unit):
        return None
    return find_lane_of(target.id, ctx.enemy)


# =============================================================================
# DESTROY / DAMAGE
# =============================================================================

def _weighted_lane_value(units, lane: int, ctx) -> float:
    total = 0.0
    for unit in units:
        stats = ctx.stats(unit, lane)
        value = stats.hull + stats.shields + stats.unit_class * C.FILTERED_CLASS_WEIGHT
        if unit.is_ready:
            value *= C.READY_UNIT_WEIGHT
        total += value
    return total


def _evaluate_destroy(card: Card, target: Target, ctx) -> Evaluation:
    result = Evaluation()
    effect = card.effect

    if isinstance(target, Unit) and effect.scope == 'SINGLE':
        stats = ctx.stats(target)
        result.add_reasoning("Resource value", (stats.hull + stats.shields) * C.RESOURCE_VALUE_WEIGHT)
        priority, reasons = target_value(target, ctx, lane=target.lane)
        result.add_reasoning(f"Target priority [{', '.join(reasons)}]", priority)

    elif isinstance(target, LaneRef) and effect.scope == 'FILTERED':
        total = 0
        for enemy in ctx.enemy.units_in(target.lane):
            stats = ctx.stats(enemy, target.lane)
            if _meets_filter(stats, effect):
                total += stats.hull + stats.shields + stats.unit_class * C.FILTERED_CLASS_WEIGHT
        result.add_reasoning("Filtered targets", total * C.FILTERED_DESTROY_WEIGHT)

    elif isinstance(target, LaneRef):
        lane = target.lane
        enemy_value = _weighted_lane_value(ctx.enemy.units_in(lane), lane, ctx)
        friendly_value = _weighted_lane_value(ctx.friendly.units_in(lane), lane, ctx)
        result.add_reasoning(f"Lane wipe ({enemy_value:.0f} enemy vs {friendly_value:.0f} own)",
                             (enemy_value - friendly_value) * C.LANE_DESTROY_WEIGHT)

    else:
        result.add_reasoning("No destroy target")
        return result

    _apply_cost(card, result, ctx)
    return result


def _lethal_bonus(stats) -> float:
    return stats.unit_class * C.LETHAL_CLASS_WEIGHT + C.LETHAL_BASE_BONUS


def _evaluate_damage(card: Card, target: Target, ctx) -> Evaluation:
    result = Evaluation()
    effect = card.effect

    if isinstance(target, LaneRef) and effect.scope == 'FILTERED':
        hits = [e for e in ctx.enemy.units_in(target.lane)
                if _meets_filter(ctx.stats(e, target.lane), effect)]
        result.add_reasoning(f"Filtered damage ({len(hits)} targets)",
                             effect.value * len(hits) * C.FILTERED_DAMAGE_WEIGHT)
        if len(hits) > 1:
            result.add_reasoning("Multi-hit", len(hits) * C.MULTI_HIT_BONUS_PER_TARGET)

    elif isinstance(target, Unit):
        stats = ctx.stats(target)
        result.add_reasoning("Base damage", effect.value * C.DAMAGE_WEIGHT)
        if effect.value >= stats.hull:
            result.add_reasoning("Lethal", _lethal_bonus(stats))
        priority, reasons = target_value(target, ctx, effect.value, effect.damage_type, target.lane)
        result.add_reasoning(f"Target priority [{', '.join(reasons)}]", priority)

    else:
        result.add_reasoning("No damage target")
        return result

    _apply_cost(card, result, ctx)
    return result


def _evaluate_overflow_damage(card: Card, target: Target, ctx) -> Evaluation:
    """Damage past a kill carries over to the ship section in the lane"""
    lane = _enemy_unit_lane(target, ctx)
    if lane is None:
        return Evaluation.invalid("Needs an enemy unit on the board")

    effect = card.effect
    stats = ctx.stats(target, lane)
    piercing = effect.damage_type is DamageType.PIERCING
    result = Evaluation()
    damage = effect.value
    if target.is_marked and effect.marked_bonus:
        damage += effect.marked_bonus
        result.add_reasoning(f"Marked target (+{effect.marked_bonus} damage)")

    result.add_reasoning(f"{damage} damage", damage * C.DAMAGE_WEIGHT)
    to_kill = stats.hull if piercing else stats.durability
    if damage >= to_kill:
        result.add_reasoning("Lethal", _lethal_bonus(stats))
        overflow = damage - to_kill
        if overflow > 0:
            result.add_reasoning(f"Overflows {overflow} to ship", overflow * C.OVERFLOW_SHIP_DAMAGE_WEIGHT)
    if piercing and stats.shields > 0:
        result.add_reasoning("Bypasses shields", stats.shields * C.PIERCING_SHIELD_BYPASS_WEIGHT)

    _apply_cost(card, result, ctx)
    return result


def _evaluate_splash_damage(card: Card, target: Target, ctx) -> Evaluation:
    """Primary damage to the target, splash damage to the enemy units beside it"""
    lane = _enemy_unit_lane(target, ctx)
    if lane is None:
        return Evaluation.invalid("Needs an enemy unit on the board")

    effect = card.effect
    result = Evaluation()
    bonus = 0
    if effect.bonus_condition is not None and _condition_met(effect.bonus_condition, card, target, ctx):
        bonus = effect.bonus_value
        result.add_reasoning(f"Condition met (+{bonus} damage)")

    primary = effect.value + bonus
    splash = effect.splash_value + bonus
    stats = ctx.stats(target, lane)
    result.add_reasoning(f"Primary {primary} damage", primary * C.DAMAGE_WEIGHT)
    if primary >= stats.hull:
        result.add_reasoning("Lethal", _lethal_bonus(stats))

    enemies = ctx.enemy.units_in(lane)
    index = next(i for i, u in enumerate(enemies) if u.id == target.id)
    adjacent = [enemies[i] for i in (index - 1, index + 1) if 0 <= i < len(enemies)]
    for unit in adjacent:
        adjacent_stats = ctx.stats(unit, lane)
        result.add_reasoning(f"Splash {unit.name}", splash * C.DAMAGE_WEIGHT)
        if splash >= adjacent_stats.hull:
            result.add_reasoning(f"Splash lethal {unit.name}", _lethal_bonus(adjacent_stats))
    if adjacent:
        hits = len(adjacent) + 1
        result.add_reasoning(f"Multi-hit ({hits} targets)", hits * C.MULTI_HIT_BONUS_PER_TARGET)

    _apply_cost(card, result, ctx)
    return result


def _evaluate_damage_scaling(card: Card, target: Target, ctx) -> Evaluation:
    lane = _enemy_unit_lane(target, ctx)
    if lane is None:
        return Evaluation.invalid("Needs an enemy unit on the board")

    effect = card.effect
    if effect.scaling_source == 'READY_UNITS_IN_LANE':
        damage = len(ctx.friendly.ready_units(lane))
    else:
        damage = effect.value

    result = Evaluation()
    if damage <= 0:
        result.add_reasoning("Scales to no damage")
    else:
        stats = ctx.stats(target, lane)
        result.add_reasoning(f"Scaled damage {damage}", damage * C.DAMAGE_WEIGHT)
        if damage >= stats.hull:
            result.add_reasoning("Lethal", _lethal_bonus(stats))

    _apply_cost(card, result, ctx)
    return result


# =============================================================================
# UNIT STATE
# =============================================================================

def _evaluate_ready_unit(card: Card, target: Target, ctx) -> Evaluation:
    if not isinstance(target, Unit):
        return Evaluation.invalid("Ready needs a unit target")
    lane = find_lane_of(target.id, ctx.friendly)
    if lane is None:
        return Evaluation.invalid(f"{target.name} is not on the board")
    if target.is_ready:
        return Evaluation.invalid(f"{target.name} is already ready")

    result = Evaluation()
    stats = ctx.stats(target, lane)
    enemies = ctx.enemy.units_in(lane)

    enemy_section = ctx.enemy_section(lane)
    guarded = any(ctx.stats(e, lane).has(Keyword.GUARDIAN) for e in enemies)
    if enemy_section is not None and enemy_section.hull > 0 and not guarded:
        result.add_reasoning("Ship attack potential", stats.ship_threat * C.READY_SHIP_ATTACK_WEIGHT)

    if enemies and stats.attack > 0:
        result.add_reasoning(f"Can attack {len(enemies)} unit(s)",
                             stats.attack * C.READY_UNIT_ATTACK_WEIGHT * len(enemies))

    slower = [e for e in ctx.enemy.ready_units(lane) if stats.speed > ctx.stats(e, lane).speed]
    if slower:
        result.add_reasoning(f"Can intercept {len(slower)} enemy", len(slower) * C.READY_INTERCEPTION_PER_THREAT)

    if stats.has(Keyword.DEFENDER):
        result.add_reasoning("Defender", C.READY_DEFENDER_BONUS)
    if stats.has(Keyword.GUARDIAN):
        result.add_reasoning("Guardian", C.READY_GUARDIAN_BONUS)

    before = analyze_lane(lane, ctx)
    readied = ctx.friendly.without_unit(target.id).with_unit(replace(target, is_exhausted=False))
    after = analyze_lane(lane, ctx.with_state(ctx.state.with_side(Side.FRIENDLY, readied)))
    if target.id in after.unchecked_threats:
        result.add_reasoning("Attacks unchecked", C.READY_UNCHECKED_BONUS)
    outpaced = before.enemy_interceptors - after.enemy_interceptors
    if outpaced:
        result.add_reasoning(f"Outpaces {len(outpaced)} enemy interceptor(s)",
                             len(outpaced) * C.READY_OUTPACED_INTERCEPTOR_BONUS)

    _apply_cost(card, result, ctx)
    return result


# =============================================================================
# STATUS EFFECTS
# =============================================================================

def _scale(result: Evaluation, factor: float, reason: str):
    result.add_reasoning(reason, result.score * factor - result.score)


def _class_bonus(unit_class: int, table) -> int:
    return table[max(0, min(unit_class, len(table) - 1))]


def _has_ability(definition, kinds=(), triggers=()) -> bool:
    return any(a.kind in kinds or (a.kind == "TRIGGERED" and a.trigger in triggers)
               for a in definition.abilities)


def _evaluate_cannot_move(card: Card, target: Target, ctx) -> Evaluation:
    lane = _enemy_unit_lane(target, ctx)
    if lane is None:
        return Evaluation.invalid("Needs an enemy unit on the board")
    if target.cannot_move:
        return Evaluation.invalid(f"{target.name} already cannot move")

    result = Evaluation()
    stats = ctx.stats(target, lane)
    if stats.attack > 0:
        result.add_reasoning(f"Locks {stats.attack} attack in lane", stats.attack * C.STATUS_MOVE_DENY_WEIGHT)
    if ctx.definition(target).triggered("ON_MOVE"):
        result.add_reasoning("Denies ON_MOVE ability", C.STATUS_ON_MOVE_BONUS)
    if target.is_exhausted:
        _scale(result, C.EXHAUSTED_MOVE_DENY_FACTOR, "Target exhausted")

    _apply_cost(card, result, ctx)
    return result


def _evaluate_cannot_attack(card: Card, target: Target, ctx) -> Evaluation:
    lane = _enemy_unit_lane(target, ctx)
    if lane is None:
        return Evaluation.invalid("Needs an enemy unit on the board")
    if target.cannot_attack:
        return Evaluation.invalid(f"{target.name} already cannot attack")

    result = Evaluation()
    stats = ctx.stats(target, lane)
    if stats.attack > 0:
        result.add_reasoning(f"Denies {stats.attack} attack", stats.attack * C.STATUS_ATTACK_DENY_WEIGHT)
    if stats.has(Keyword.GUARDIAN):
        result.add_reasoning("Guardian", C.STATUS_GUARDIAN_BONUS)
    if stats.has(Keyword.DEFENDER):
        result.add_reasoning("Defender", C.STATUS_DEFENDER_BONUS)
    class_bonus = _class_bonus(stats.unit_class, C.STATUS_CLASS_BONUS)
    if class_bonus:
        result.add_reasoning(f"Class {stats.unit_class}", class_bonus)
    if ctx.definition(target).triggered("AFTER_ATTACK"):
        result.add_reasoning("Denies AFTER_ATTACK ability", C.STATUS_AFTER_ATTACK_BONUS)
    if target.is_exhausted:
        _scale(result, C.EXHAUSTED_ATTACK_DENY_FACTOR, "Target exhausted")

    _apply_cost(card, result, ctx)
    return result


def _evaluate_cannot_intercept(card: Card, target: Target, ctx) -> Evaluation:
    lane = _enemy_unit_lane(target, ctx)
    if lane is None:
        return Evaluation.invalid("Needs an enemy unit on the board")
    if target.cannot_intercept:
        return Evaluation.invalid(f"{target.name} already cannot intercept")

    result = Evaluation()
    stats = ctx.stats(target, lane)
    result.add_reasoning(f"Speed {stats.speed} interceptor", stats.speed * C.STATUS_INTERCEPT_DENY_WEIGHT)
    if stats.has(Keyword.ALWAYS_INTERCEPTS):
        result.add_reasoning("Always intercepts", C.STATUS_ALWAYS_INTERCEPTS_BONUS)
    if stats.has(Keyword.DOGFIGHT):
        result.add_reasoning("Dogfighter", C.STATUS_DOGFIGHT_BONUS)
    attackers = [u for u in ctx.friendly.ready_units(lane)
                 if not u.cannot_attack and ctx.stats(u, lane).attack > 0]
    if attackers:
        result.add_reasoning(f"Frees {len(attackers)} attacker(s)",
                             len(attackers) * C.STATUS_FREED_ATTACKER_BONUS)
    if target.is_exhausted:
        _scale(result, C.EXHAUSTED_INTERCEPT_DENY_FACTOR, "Target exhausted")

    _apply_cost(card, result, ctx)
    return result


def _evaluate_does_not_ready(card: Card, target: Target, ctx) -> Evaluation:
    lane = _enemy_unit_lane(target, ctx)
    if lane is None:
        return Evaluation.invalid("Needs an enemy unit on the board")
    if target.does_not_ready:
        return Evaluation.invalid(f"{target.name} already does not ready")

    result = Evaluation()
    stats = ctx.stats(target, lane)
    if stats.attack > 0:
        result.add_reasoning(f"Delays {stats.attack} attack a turn",
                             stats.attack * C.STATUS_READY_DENY_WEIGHT * C.STATUS_READY_DURATION)
    class_bonus = _class_bonus(stats.unit_class, C.STATUS_READY_CLASS_BONUS)
    if class_bonus:
        result.add_reasoning(f"Class {stats.unit_class}", class_bonus)
    if _has_ability(ctx.definition(target), kinds=("ACTIVE",), triggers=("ON_ROUND_START", "ON_ATTACK")):
        result.add_reasoning("Powerful ability", C.STATUS_POWERFUL_ABILITY_BONUS)
    if target.is_ready:
        result.add_reasoning("Currently ready", C.STATUS_READY_TARGET_BONUS)
    else:
        _scale(result, C.EXHAUSTED_READY_DENY_FACTOR, "Already exhausted")

    _apply_cost(card, result, ctx)
    return result


def _evaluate_clear_status(card: Card, target: Target, ctx) -> Evaluation:
    if not isinstance(target, Unit) or find_lane_of(target.id, ctx.friendly) is None:
        return Evaluation.invalid("Needs a friendly unit on the board")
    if not target.status_count and not target.is_marked:
        return Evaluation.invalid(f"{target.name} has no status effects")

    result = Evaluation()
    if target.status_count:
        result.add_reasoning(f"Clears {target.status_count} status effect(s)",
                             target.status_count * C.STATUS_CLEAR_PER_EFFECT)
    if target.is_marked:
        result.add_reasoning("Clears mark", C.STATUS_MARKED_CLEAR)
    if ctx.stats(target).unit_class >= 2:
        result.add_reasoning("High-class unit", C.STATUS_CLEAR_CLASS_BONUS)
    if card.effect.go_again:
        result.add_reasoning("Go again", C.STATUS_CLEAR_GO_AGAIN_BONUS)

    _apply_cost(card, result, ctx)
    return result


def _evaluate_exhaust(card: Card, target: Target, ctx) -> Evaluation:
    lane = _enemy_unit_lane(target, ctx)
    if lane is None:
        return Evaluation.invalid("Needs an enemy unit on the board")
    if target.is_exhausted:
        return Evaluation.invalid(f"{target.name} is already exhausted")

    result = Evaluation()
    stats = ctx.stats(target, lane)
    if stats.attack > 0:
        result.add_reasoning(f"Denies {stats.attack} attack", stats.attack * C.EXHAUST_ATTACK_WEIGHT)

    before = analyze_lane(lane, ctx)
    if target.id in before.enemy_interceptors or stats.has(Keyword.ALWAYS_INTERCEPTS):
        result.add_reasoning("Interceptor", C.EXHAUST_INTERCEPTOR_BONUS)
    if stats.has(Keyword.DEFENDER):
        result.add_reasoning("Defender", C.EXHAUST_DEFENDER_BONUS)
    if stats.has(Keyword.GUARDIAN):
        result.add_reasoning("Guardian", C.EXHAUST_GUARDIAN_BONUS)
    if _has_ability(ctx.definition(target), kinds=("ACTIVE",), triggers=("ON_ATTACK", "ON_DAMAGE_DEALT")):
        result.add_reasoning("Ability denied", C.EXHAUST_ABILITY_BONUS)

    exhausted = ctx.enemy.without_unit(target.id).with_unit(replace(target, is_exhausted=True))
    after = analyze_lane(lane, ctx.with_state(ctx.state.with_side(Side.ENEMY, exhausted)))
    freed = before.slow_attackers - after.slow_attackers
    if freed:
        result.add_reasoning(f"Frees {len(freed)} attacker(s) from interception",
                             len(freed) * C.EXHAUST_FREED_ATTACKER_BONUS)

    _apply_cost(card, result, ctx)
    return result


def _evaluate_modify_stat(card: Card, target: Target, ctx) -> Evaluation:
    effect = card.effect
    mod = effect.mod
    if mod is None:
        return Evaluation(C.UNKNOWN_CARD_SCORE, ["No stat modification"])

    result = Evaluation()

    if isinstance(target, LaneRef):
        lane = target.lane
        ready = ctx.friendly.ready_units(lane)
        if not ready:
            return Evaluation.invalid("No ready units to buff")
        current = lane_score(lane, ctx)
        buffed = replace(ctx.friendly, units=tuple(
            replace(u, stat_mods=u.stat_mods + (mod,)) if u.lane == lane else u
            for u in ctx.friendly.units))
        projected = projected_lane_score(lane, ctx, Side.FRIENDLY, buffed)
        result.add_reasoning("Lane impact", (projected - current) * C.LANE_BUFF_IMPACT_WEIGHT)
        result.add_reasoning(f"Buffs {len(ready)} ready unit(s)", len(ready) * C.MULTI_BUFF_BONUS_PER_UNIT)

    elif isinstance(target, Unit):
        if target.is_exhausted:
            return Evaluation(C.EXHAUSTED_TARGET_SCORE, ["Target exhausted"])
        stats = ctx.stats(target)
        if mod.stat == 'attack' and mod.value > 0:
            result.add_reasoning("Attack buff",
                                 stats.unit_class * C.CLASS_VALUE_WEIGHT + mod.value * C.ATTACK_BUFF_WEIGHT)
        elif mod.stat == 'attack' and mod.value < 0:
            result.add_reasoning("Threat reduction", stats.attack * C.THREAT_REDUCTION_WEIGHT)
        elif mod.stat == 'speed' and mod.value > 0:
            speeds = [ctx.stats(e, target.lane).speed for e in ctx.enemy.units_in(target.lane)]
            fastest_enemy = max(speeds) if speeds else -1
            if stats.speed <= fastest_enemy < stats.speed + mod.value:
                result.add_reasoning("Outpaces interceptors", C.INTERCEPTOR_OVERCOME_BONUS)
            else:
                result.add_reasoning("Speed buff", C.SPEED_BUFF_BONUS)
        else:
            result.add_reasoning(f"{mod.stat} modification", C.GENERIC_STAT_BONUS)

    else:
        return Evaluation(C.UNKNOWN_CARD_SCORE, ["No stat target"])

    if result.score > 0:
        if mod.permanent:
            result.add_reasoning("Permanent", result.score * (C.PERMANENT_MOD_MULTIPLIER - 1))
        if effect.go_again:
            result.add_reasoning("Go again", C.GO_AGAIN_BONUS)

    _apply_cost(card, result, ctx)
    return result


def _evaluate_heal_shields(card: Card, target: Target, ctx) -> Evaluation:
    if not isinstance(target, Unit):
        return Evaluation(C.UNKNOWN_CARD_SCORE, ["No shield target"])
    stats = ctx.stats(target)
    restored = min(card.effect.value, stats.max_shields - stats.shields)
    return Evaluation(restored * C.SHIELD_HEAL_PER_POINT, [f"Restores {restored} shields"])


def _evaluate_heal_hull(card: Card, target: Target, ctx) -> Evaluation:
    return Evaluation(C.SECTION_HEAL_VALUE, ["Repairs section hull"])


# =============================================================================
# UPGRADES
# =============================================================================

def _upgrade_base(card: Card, definition, result: Evaluation) -> bool:
    """Value of the upgrade itself; False when the upgrade is pointless"""
    effect = card.effect
    mod = effect.mod

    if effect.keyword:
        result.add_reasoning(f"Grants {effect.keyword}", C.UPGRADE_ABILITY_GRANT_BASE)
        if effect.keyword == 'PIERCING' and definition.attack >= 3:
            result.add_reasoning("Piercing on heavy hitter", C.UPGRADE_PIERCING_ON_HEAVY)
    elif mod is None:
        return False
    elif mod.stat == 'attack':
        result.add_reasoning(f"+{mod.value} attack", mod.value * C.UPGRADE_ATTACK_BASE)
        if definition.speed >= 4:
            result.add_reasoning("Attack on fast unit", C.UPGRADE_ATTACK_ON_FAST)
    elif mod.stat == 'speed':
        result.add_reasoning(f"+{mod.value} speed", mod.value * C.UPGRADE_SPEED_BASE)
        if definition.attack >= 3:
            result.add_reasoning("Speed on heavy hitter", C.UPGRADE_SPEED_ON_HEAVY)
    elif mod.stat == 'shields':
        result.add_reasoning(f"+{mod.value} shields", mod.value * C.UPGRADE_SHIELDS_BASE)
    elif mod.stat == 'limit':
        result.add_reasoning(f"+{mod.value} limit", mod.value * C.UPGRADE_LIMIT_BASE)
    elif mod.stat == 'cost':
        result.add_reasoning(f"{mod.value} cost", abs(mod.value) * C.UPGRADE_COST_REDUCTION_BASE)
    else:
        result.add_reasoning(f"{mod.stat} upgrade", C.UPGRADE_GENERIC_BASE)
    return True


def _evaluate_modify_unit_base(card: Card, target: Target, ctx) -> Evaluation:
    """
    Permanent upgrade for every unit of one type.

    Worth more on types already on the board (and ready to use it), on
    higher classes, and while copies remain to deploy.
    """
    if not isinstance(target, UnitTypeRef) or target.owner is not Side.FRIENDLY:
        return Evaluation.invalid("Needs a friendly unit type")
    definition = ctx.catalog.get(target.unit_name)
    if definition is None:
        return Evaluation.invalid(f"Unknown unit type {target.unit_name}")

    player = ctx.friendly
    installed = player.upgrades_for(definition.name)
    keyword = card.effect.keyword
    if keyword and any(u.keyword == keyword for u in installed):
        return Evaluation.invalid(f"{definition.name} already upgraded with {keyword}")
    slots_left = definition.upgrade_slots - len(installed)
    if slots_left <= 0:
        return Evaluation.invalid(f"{definition.name} has no upgrade slots left")

    result = Evaluation()
    if not _upgrade_base(card, definition, result):
        return Evaluation(C.UNKNOWN_CARD_SCORE, ["No upgrade"])

    result.add_reasoning(f"Class {definition.unit_class}", definition.unit_class * C.UPGRADE_CLASS_WEIGHT)

    on_board = player.units_named(definition.name)
    if on_board:
        result.add_reasoning(f"{len(on_board)} deployed", len(on_board) * C.UPGRADE_DEPLOYED_BONUS)
        ready = sum(1 for u in on_board if u.is_ready)
        if ready:
            result.add_reasoning(f"{ready} ready", ready * C.UPGRADE_READY_BONUS)
    else:
        result.add_reasoning("None deployed", C.UPGRADE_NONE_DEPLOYED_PENALTY)

    remaining = copies_left(definition, player)
    if remaining > 0:
        result.add_reasoning(f"{remaining} copies left to deploy", remaining * C.UPGRADE_REMAINING_COPY_BONUS)
    elif card.effect.mod is None or card.effect.mod.stat != 'limit':
        result.add_reasoning("At deployment limit", C.UPGRADE_AT_LIMIT_PENALTY)

    if slots_left == 1:
        result.add_reasoning("Last upgrade slot", C.UPGRADE_LAST_SLOT_BONUS)

    _apply_cost(card, result, ctx)
    if card.effect.go_again:
        result.add_reasoning("Go again", C.GO_AGAIN_BONUS)
    return result


def _evaluate_destroy_upgrade(card: Card, target: Target, ctx) -> Evaluation:
    if not isinstance(target, UpgradeRef) or target.owner is not Side.ENEMY:
        return Evaluation.invalid("Needs an enemy upgrade")

    upgrade = target.upgrade
    mod = upgrade.mod
    result = Evaluation()
    if mod is not None and mod.stat == 'attack':
        result.add_reasoning(f"Removes +{mod.value} attack", mod.value * C.DESTROY_UPGRADE_ATTACK_WEIGHT)
    elif mod is not None and mod.stat == 'speed':
        result.add_reasoning(f"Removes +{mod.value} speed", mod.value * C.DESTROY_UPGRADE_SPEED_WEIGHT)
    elif mod is not None:
        result.add_reasoning(f"Removes {mod.stat} upgrade", mod.value * C.DESTROY_UPGRADE_OTHER_WEIGHT)
    elif upgrade.keyword:
        result.add_reasoning(f"Removes {upgrade.keyword}", C.DESTROY_UPGRADE_KEYWORD_VALUE)
    else:
        result.add_reasoning("Removes upgrade", C.DESTROY_UPGRADE_UNKNOWN_VALUE)

    _apply_cost(card, result, ctx)
    return result


# =============================================================================
# RESOURCES
# =============================================================================

def _evaluate_gain_energy(card: Card, target: Target, ctx) -> Evaluation:
    energy = ctx.friendly.energy
    projected = energy - card.cost + card.effect.value
    enabled = [c for c in ctx.friendly.hand
               if c.id != card.id and energy < c.cost <= projected]
    if enabled:
        best = max(c.cost for c in enabled)
        return Evaluation(C.ENABLES_CARD_BASE + best * C.ENABLES_CARD_PER_COST,
                          [f"Enables {len(enabled)} card(s), best cost {best}"])
    return Evaluation(C.LOW_PRIORITY_SCORE, ["Enables nothing new"])


def _evaluate_draw(card: Card, target: Target, ctx) -> Evaluation:
    left = ctx.friendly.energy - card.cost
    if left > 0:
        return Evaluation(C.DRAW_BASE_VALUE + left * C.ENERGY_REMAINING_WEIGHT,
                          [f"Draw with {left} energy left"])
    return Evaluation(C.LOW_PRIORITY_SCORE, ["Draw leaves no energy"])


def _evaluate_search_and_draw(card: Card, target: Target, ctx) -> Evaluation:
    effect = card.effect
    left = ctx.friendly.energy - card.cost
    if left >= 0:
        return Evaluation(effect.draw_count * C.SEARCH_DRAW_PER_CARD
                          + effect.search_count * C.SEARCH_BONUS_PER_SEARCH
                          + left * C.ENERGY_REMAINING_WEIGHT,
                          [f"Search {effect.search_count}, draw {effect.draw_count}"])
    return Evaluation(C.SEARCH_LOW_PRIORITY_SCORE, ["Cannot afford search"])


def _evaluate_repeating(card: Card, target: Target, ctx) -> Evaluation:
    repeats = 1
    if card.effect.repeat_condition == 'OWN_DAMAGED_SECTIONS':
        repeats += sum(1 for s in ctx.friendly.sections
                       if s is not None and ctx.section_status(s).is_degraded)
    result = Evaluation()
    result.add_reasoning(f"Repeating effect x{repeats}", repeats * C.REPEAT_VALUE_PER_REPEAT)
    _apply_cost(card, result, ctx)
    return result


def _evaluate_create_tokens(card: Card, target: Target, ctx) -> Evaluation:
    lanes = ctx.state.lanes
    free_lanes = sum(1 for lane in lanes
                     if not any(ctx.stats(u, lane).has(Keyword.JAMMER) for u in ctx.friendly.units_in(lane)))
    if free_lanes == 0:
        return Evaluation.invalid("Every lane already has a jammer")

    result = Evaluation()
    classes = [ctx.stats(u).unit_class for u in ctx.friendly.units]
    result.add_reasoning("Jammer base", C.JAMMER_BASE_VALUE)
    result.add_reasoning(f"Protects {sum(classes)} CPU", sum(classes) * C.JAMMER_CPU_WEIGHT)
    high_value = sum(1 for c in classes if c >= C.JAMMER_HIGH_VALUE_CLASS)
    if high_value:
        result.add_reasoning(f"{high_value} high-value unit(s)", high_value * C.JAMMER_HIGH_VALUE_UNIT_BONUS)
    _apply_cost(card, result, ctx)

    scale = free_lanes / len(lanes)
    result.add_reasoning(f"Available lanes {free_lanes}/{len(lanes)}", result.score * scale - result.score)
    return result


def _evaluate_single_move(card: Card, target: Target, ctx, move: Optional[MovePlan]) -> Evaluation:
    if move is None:
        return Evaluation(C.UNKNOWN_CARD_SCORE, ["No move selected"])
    result = evaluate_move(move.unit, move.from_lane, move.to_lane, ctx)
    _apply_cost(card, result, ctx)
    return result


EffectScorer = Callable[[Card, Target, object], Evaluation]

_SCORERS: Dict[str, EffectScorer] = {
    'DESTROY': _evaluate_destroy,
    'DAMAGE': _evaluate_damage,
    'READY_UNIT': _evaluate_ready_unit,
    'MODIFY_STAT': _evaluate_modify_stat,
    'HEAL_SHIELDS': _evaluate_heal_shields,
    'HEAL_HULL': _evaluate_heal_hull,
    'GAIN_ENERGY': _evaluate_gain_energy,
    'DRAW': _evaluate_draw,
    'SEARCH_AND_DRAW': _evaluate_search_and_draw,
    'REPEATING_EFFECT': _evaluate_repeating,
    'CREATE_TOKENS': _evaluate_create_tokens,
    'OVERFLOW_DAMAGE': _evaluate_overflow_damage,
    'SPLASH_DAMAGE': _evaluate_splash_damage,
    'DAMAGE_SCALING': _evaluate_damage_scaling,
    'EXHAUST_UNIT': _evaluate_exhaust,
    'APPLY_CANNOT_MOVE': _evaluate_cannot_move,
    'APPLY_CANNOT_ATTACK': _evaluate_cannot_attack,
    'APPLY_CANNOT_INTERCEPT': _evaluate_cannot_intercept,
    'APPLY_DOES_NOT_READY': _evaluate_does_not_ready,
    'CLEAR_ALL_STATUS': _evaluate_clear_status,
    'MODIFY_UNIT_BASE': _evaluate_modify_unit_base,
    'DESTROY_UPGRADE': _evaluate_destroy_upgrade,
}


# =============================================================================
# CONDITIONAL EFFECTS
# =============================================================================

_STAT_COMPARISONS = {
    'TARGET_STAT_LT': lambda a, b: a < b,
    'TARGET_STAT_LTE': lambda a, b: a <= b,
    'TARGET_STAT_GT': lambda a, b: a > b,
    'TARGET_STAT_GTE': lambda a, b: a >= b,
}


def _condition_met(condition: Condition, card: Card, target: Optional[Target], ctx) -> bool:
    if not isinstance(target, Unit):
        return False
    kind = condition.type

    if kind in _STAT_COMPARISONS:
        value = getattr(ctx.stats(target), condition.stat or '', 0)
        return _STAT_COMPARISONS[kind](value, condition.value)
    if kind == 'TARGET_IS_MARKED':
        return target.is_marked
    if kind == 'TARGET_IS_EXHAUSTED':
        return target.is_exhausted
    if kind == 'TARGET_IS_READY':
        return target.is_ready
    if kind == 'OPPONENT_HAS_MORE_IN_LANE':
        if target.owner is not Side.FRIENDLY:
            return False
        return len(ctx.enemy.units_in(target.lane)) > len(ctx.friendly.units_in(target.lane))
    if kind == 'FRIENDLY_COUNT_IN_LANE':
        return len(ctx.friendly.units_in(target.lane)) >= condition.value

    # Outcome conditions only follow from plain damage
    effect = card.effect
    if effect.type != 'DAMAGE' or effect.value <= 0:
        return False
    stats = ctx.stats(target)
    if kind == 'ON_DESTROY':
        return effect.value >= stats.durability
    if kind == 'ON_HULL_DAMAGE':
        return effect.value > stats.shields

    logger.warning(f"Unknown card condition {kind} on {card.name}")
    return False


def _granted_value(conditional, target: Optional[Target], ctx) -> float:
    grant = conditional.grant_type
    value = conditional.grant_value

    if grant == 'DESTROY' and isinstance(target, Unit):
        stats = ctx.stats(target)
        return stats.durability * C.RESOURCE_VALUE_WEIGHT + _lethal_bonus(stats)
    if grant == 'BONUS_DAMAGE':
        return value * C.DAMAGE_WEIGHT
    if grant == 'GO_AGAIN':
        return C.GO_AGAIN_BONUS
    if grant == 'DRAW':
        return max(value, 1) * C.DRAW_BASE_VALUE
    if grant == 'GAIN_ENERGY':
        return max(value, 1) * C.CONDITIONAL_ENERGY_WEIGHT
    if grant == 'MODIFY_STAT' and conditional.grant_mod is not None:
        mod = conditional.grant_mod
        if mod.stat == 'attack' and mod.value > 0:
            return mod.value * C.ATTACK_BUFF_WEIGHT
        return abs(mod.value) * C.GENERIC_STAT_BONUS

    logger.warning(f"Unknown granted effect {grant}")
    return 0


def _apply_conditionals(card: Card, target: Optional[Target], ctx, result: Evaluation):
    """Add the value of every conditional effect whose condition holds"""
    for conditional in card.conditionals:
        if _condition_met(conditional.condition, card, target, ctx):
            result.add_reasoning(f"If {conditional.condition.type.lower()}: {conditional.grant_type}",
                                 _granted_value(conditional, target, ctx))


def evaluate_card_play(card: Card, target: Optional[Target], ctx,
                       move: Optional[MovePlan] = None) -> Evaluation:
    """
    Score playing `card` on `target`.

    Args:
        card: Card from the acting side's hand
        target: Unit / LaneRef / SectionRef / UnitTypeRef / UpgradeRef, or
            None for untargeted cards
        ctx: EvaluationContext
        move: Unit and lanes for SINGLE_MOVE cards

    Returns:
        Evaluation (unknown effect types score a neutral value); conditional
        effects whose condition holds are added on top of a valid result
    """
    effect_type = card.effect.type
    if effect_type == 'SINGLE_MOVE':
        return _evaluate_single_move(card, target, ctx, move)

    scorer = _SCORERS.get(effect_type)
    if scorer is None:
        logger.debug(f"No card scorer for effect {effect_type} ({card.name})")
        return Evaluation(C.UNKNOWN_CARD_SCORE, [f"Unscored effect {effect_type}"])
    result = scorer(card, target, ctx)
    if card.conditionals and not result.is_invalid:
        _apply_conditionals(card, target, ctx, result)
    return result


class CardEvaluator(ActionEvaluator):

    def __init__(self):
        super().__init__("Card")

    def can_evaluate(self, action) -> bool:
        return isinstance(action, PlayCardAction)

    def evaluate(self, action: PlayCardAction, ctx) -> Evaluation:
        return evaluate_card_play(action.card, action.target, ctx, action.move)
