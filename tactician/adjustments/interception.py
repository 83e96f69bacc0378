"""
Interception Adjustment Pass

Pass 1 (defense and ship-attack risk):
- Attacking exhausts the attacker. If it is currently a defensive
  interceptor, attacking gives up the threats it holds in check. The penalty
  depends on what the unblocked damage would do to our section in that lane:
  nothing if the section is already critical or no threshold is crossed or
  it would only be the first degraded section; SECOND_SECTION_DAMAGE_PENALTY
  for the second; LOSS_SECTION_DAMAGE_PENALTY for the third.
- Section attacks by interceptable attackers take INTERCEPTION_RISK_PENALTY;
  section attacks by attackers faster than every ready enemy get
  UNCHECKED_ATTACK_BONUS.

Pass 2 (interceptor removal), reading the pass-1 scores:
- Lethal unit attacks, single-target DESTROY cards and lethal single-target
  DAMAGE cards against an enemy interceptor gain the best section attack
  value that interceptor is currently blocking.
"""

import logging
from typing import Dict, List

from .. import constants as C
from ..analysis.lanes import LaneAnalysis, analyze_lane, threats_kept_in_check
from ..analysis.targeting import is_lethal
from ..evaluators.base import Action, AttackAction, PlayCardAction, SectionAttackAction, UnitAttackAction
from ..models import SectionStatus, Side, Unit

logger = logging.getLogger(__name__)


def defensive_penalty(check) -> float:
    """Section-count based penalty for giving up the threats in `check`"""
    if not check.holds_anything:
        return 0
    if check.current_status is SectionStatus.CRITICAL or not check.would_cause_transition:
        return 0
    if check.current_status is SectionStatus.DAMAGED:
        # Damaged -> critical does not add a degraded section
        return 0
    degraded_after = check.damaged_section_count + 1
    if degraded_after >= 3:
        return C.LOSS_SECTION_DAMAGE_PENALTY
    if degraded_after == 2:
        return C.SECOND_SECTION_DAMAGE_PENALTY
    return 0


def _best_unblocked_value(lane: int, analysis: LaneAnalysis, actions: List[Action]) -> float:
    best = 0.0
    for action in actions:
        if (isinstance(action, SectionAttackAction) and action.lane == lane
                and action.attacker.id in analysis.slow_attackers):
            best = max(best, action.score - C.INTERCEPTION_RISK_PENALTY)
    return max(0.0, best)


def _first_pass(action: Action, analysis: LaneAnalysis, ctx) -> Action:
    attacker = action.attacker
    if attacker.id in analysis.defensive_interceptors:
        check = threats_kept_in_check(attacker, action.lane, ctx)
        if check.holds_anything:
            names = ", ".join(f"{t.name} ({t.ship_threat} ship dmg)" for t in check.threats)
            action = action.adjusted(f"Threats in check: {len(check.threats)} [{names}]")
            penalty = defensive_penalty(check)
            if penalty:
                action = action.adjusted(
                    f"Defense: {check.total_threat_damage} dmg would degrade section "
                    f"#{check.damaged_section_count + 1}", penalty)

    if isinstance(action, SectionAttackAction):
        if attacker.id in analysis.slow_attackers:
            action = action.adjusted("Interception risk", C.INTERCEPTION_RISK_PENALTY)
        if attacker.id in analysis.unchecked_threats:
            action = action.adjusted("Unchecked threat", C.UNCHECKED_ATTACK_BONUS)
    return action


def _second_pass(action: Action, analyses: Dict[int, LaneAnalysis], scored: List[Action], ctx) -> Action:
    if isinstance(action, UnitAttackAction):
        analysis = analyses[action.lane]
        if action.target.id in analysis.enemy_interceptors:
            stats = ctx.stats(action.attacker, action.lane)
            if is_lethal(stats.attack, ctx.stats(action.target, action.lane), stats.damage_type):
                best = _best_unblocked_value(action.lane, analysis, scored)
                if best > 0:
                    action = action.adjusted("Interceptor removal", best)
        return action

    if isinstance(action, PlayCardAction) and isinstance(action.target, Unit):
        target = action.target
        effect = action.card.effect
        if target.owner is not Side.ENEMY or effect.scope != 'SINGLE':
            return action
        analysis = analyses.get(target.lane)
        if analysis is None or target.id not in analysis.enemy_interceptors:
            return action

        if effect.type == 'DESTROY':
            reason = "Interceptor removal (destroy)"
        elif effect.type == 'DAMAGE' and is_lethal(effect.value, ctx.stats(target), effect.damage_type):
            reason = "Interceptor removal (lethal damage)"
        else:
            return action

        best = _best_unblocked_value(target.lane, analysis, scored)
        if best > 0:
            action = action.adjusted(reason, round(best * C.INTERCEPTOR_CARD_PREMIUM))
    return action


def apply_interception(actions: List[Action], ctx) -> List[Action]:
    analyses = {lane: analyze_lane(lane, ctx) for lane in ctx.state.lanes}

    scored = [
        _first_pass(a, analyses[a.lane], ctx) if isinstance(a, AttackAction) and not a.is_invalid else a
        for a in actions
    ]
    return [a if a.is_invalid else _second_pass(a, analyses, scored, ctx) for a in scored]
