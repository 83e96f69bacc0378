"""
Deploy Evaluator

Scores deploying one unit type into one lane.

Decision factors:
- Affordability (budget + energy, ready copies, deployment limit, CPU
  limit, energy reserved for the most expensive card in hand)
- Per-lane caps and the ION stacking guard
- Lane score delta (projected - current)
- Strategic fit for losing / winning / balanced lanes (effective stats
  of the deployed unit)
- Randomized stabilization and dominance bonuses
- ON_DEPLOY / round-start ability value
- Overkill when the enemy section in the lane is already degraded
"""

import logging
from typing import Optional

from .. import constants as C
from ..analysis.lanes import lane_score, projected_lane_score
from ..models import DamageType, Keyword, PlayerState, Side, Unit, UnitDefinition, UnitStats
from .base import ActionEvaluator, DeployAction, Evaluation

logger = logging.getLogger(__name__)


def total_deploy_resources(ctx) -> int:
    player = ctx.friendly
    budget = player.initial_deployment_budget if ctx.state.turn == 1 else player.deployment_budget
    return budget + player.energy


def effective_limit(definition: UnitDefinition, player: PlayerState) -> int:
    """Deployment limit including the player's limit upgrades for the type"""
    return definition.limit + sum(u.mod.value for u in player.upgrades_for(definition.name)
                                  if u.mod is not None and u.mod.stat == 'limit')


def copies_left(definition: UnitDefinition, player: PlayerState) -> int:
    return effective_limit(definition, player) - player.deployed_counts.get(definition.name, 0)


def affordability_problem(definition: UnitDefinition, ctx) -> Optional[str]:
    """
    Reason this unit type can't be deployed at all this turn, or None.

    Checks run in order: resources, ready copies, deployment limit, CPU
    limit, energy reserve.
    """
    player = ctx.friendly
    cost = definition.unit_class

    if total_deploy_resources(ctx) < cost:
        return f"Not enough resources ({total_deploy_resources(ctx)} < {cost})"

    ready = player.ready_copies.get(definition.name)
    if ready is not None and ready <= 0:
        return "No copies available"

    limit = effective_limit(definition, player)
    deployed = player.deployed_counts.get(definition.name, 0)
    if deployed >= limit:
        return f"Deployment limit reached ({deployed}/{limit})"

    on_board = sum(1 for u in player.units if not ctx.is_token(u))
    if on_board >= player.cpu_limit:
        return f"CPU limit reached ({on_board}/{player.cpu_limit})"

    budget = player.initial_deployment_budget if ctx.state.turn == 1 else player.deployment_budget
    energy_after = player.energy - (cost - min(budget, cost))
    reserved = max((card.cost for card in player.hand), default=0)
    if energy_after < reserved:
        return f"Reserving energy for cards ({energy_after} < {reserved})"

    return None


def ion_stacking_problem(definition: UnitDefinition, lane: int, ctx) -> Optional[str]:
    """
    A second ION unit in a lane only pays off with enough shielded targets
    and a friendly unit that can follow up on hull.
    """
    if definition.damage_type is not DamageType.ION:
        return None

    existing_ion = [u for u in ctx.friendly.units_in(lane)
                    if ctx.stats(u, lane).damage_type is DamageType.ION]
    if not existing_ion:
        return None

    worthwhile = sum(1 for e in ctx.enemy.units_in(lane)
                     if ctx.stats(e, lane).shields >= C.ION_SHIELD_TARGET_MIN)
    enemy_section = ctx.enemy_section(lane)
    if enemy_section is not None and enemy_section.shields >= C.ION_SHIELD_TARGET_MIN:
        worthwhile += 1

    if worthwhile <= len(existing_ion):
        return f"ION stacking: {worthwhile} shield target(s) for {len(existing_ion) + 1} ION units"

    has_hull_dealer = any(
        ctx.stats(u, lane).damage_type is not DamageType.ION and ctx.stats(u, lane).attack > 0
        for u in ctx.friendly.units_in(lane)
    )
    if not has_hull_dealer:
        return "ION stacking: no hull damage dealer in lane"
    return None


class DeployEvaluator(ActionEvaluator):
    """
    Evaluates deployment candidates.

    Unavailable units (lane None) and blocked lanes come back as invalid
    evaluations with the blocking reason, so the decision log shows why.
    """

    def __init__(self):
        super().__init__("Deploy")

    def can_evaluate(self, action) -> bool:
        return isinstance(action, DeployAction)

    def evaluate(self, action: DeployAction, ctx) -> Evaluation:
        definition = ctx.definition(action.unit_name)

        problem = affordability_problem(definition, ctx)
        if problem:
            return Evaluation.invalid(problem)
        if action.lane is None:
            return Evaluation.invalid("No lane selected")

        lane = action.lane
        if definition.max_per_lane is not None:
            count = ctx.friendly.count_in_lane(definition.name, lane)
            if count >= definition.max_per_lane:
                return Evaluation.invalid(f"Max per lane reached ({count}/{definition.max_per_lane})")

        problem = ion_stacking_problem(definition, lane, ctx)
        if problem:
            return Evaluation.invalid(problem)

        return self._score_lane(definition, lane, ctx)

    def _score_lane(self, definition: UnitDefinition, lane: int, ctx) -> Evaluation:
        result = Evaluation()

        current = lane_score(lane, ctx)
        hypothetical = Unit(id=f"deploy:{definition.name}", name=definition.name, lane=lane, owner=Side.FRIENDLY)
        deployed = ctx.friendly.with_unit(hypothetical)
        projected = projected_lane_score(lane, ctx, Side.FRIENDLY, deployed)

        result.add_reasoning(f"LaneScore {current:.0f} -> {projected:.0f}")
        result.add_reasoning("Impact", projected - current)

        deployed_ctx = ctx.with_state(ctx.state.with_side(Side.FRIENDLY, deployed))
        self._strategic_bonus(deployed_ctx.stats(hypothetical, lane), current, result)

        stab_lo = ctx.setting('deployment', 'stabilization_min', C.STABILIZATION_BONUS_MIN)
        stab_hi = ctx.setting('deployment', 'stabilization_max', C.STABILIZATION_BONUS_MAX)
        if current < 0 <= projected:
            result.add_reasoning("Stabilizes lane", ctx.rng.randint(stab_lo, stab_hi))

        dom_lo = ctx.setting('deployment', 'dominance_min', C.DOMINANCE_BONUS_MIN)
        dom_hi = ctx.setting('deployment', 'dominance_max', C.DOMINANCE_BONUS_MAX)
        if projected > C.DOMINANT_LANE_THRESHOLD >= current:
            result.add_reasoning("Dominates lane", ctx.rng.randint(dom_lo, dom_hi))

        for ability in definition.triggered("ON_DEPLOY"):
            if ability.effect_type == "MARK_RANDOM_ENEMY":
                if any(not e.is_marked for e in ctx.enemy.units_in(lane)):
                    result.add_reasoning("Marks an enemy on deploy", C.ON_DEPLOY_MARK_BONUS)

        if any(a.effect_type == "INCREASE_THREAT" for a in definition.triggered("ON_ROUND_START")):
            result.add_reasoning("Threat every round", C.THREAT_DEPLOY_BONUS)

        enemy_status = ctx.section_status(ctx.enemy_section(lane))
        if enemy_status.is_degraded and current > C.OVERKILL_LANE_THRESHOLD:
            result.add_reasoning(f"Overkill: enemy section {enemy_status.value}", C.OVERKILL_PENALTY)

        return result

    def _strategic_bonus(self, stats: UnitStats, current: float, result: Evaluation):
        """Fit for the lane's situation, judged on the deployed unit's effective stats"""
        keywords = stats.keywords
        if current < C.LOSING_LANE_THRESHOLD:
            if stats.speed >= 4:
                result.add_reasoning("Fast unit for losing lane", C.DEFENSIVE_SPEED_BONUS)
            if Keyword.ALWAYS_INTERCEPTS in keywords or Keyword.GUARDIAN in keywords:
                result.add_reasoning("Defensive keyword for losing lane", C.DEFENSIVE_KEYWORD_BONUS)
        elif current > C.WINNING_LANE_THRESHOLD:
            if stats.attack >= 4:
                result.add_reasoning("Hard hitter for winning lane", C.OFFENSIVE_ATTACK_BONUS)
            if stats.bonus_ship_damage > 0:
                result.add_reasoning("Anti-ship for winning lane", C.OFFENSIVE_ANTI_SHIP_BONUS)
        elif stats.unit_class <= 1:
            result.add_reasoning("Cheap unit for balanced lane", C.BALANCED_CHEAP_UNIT_BONUS)
