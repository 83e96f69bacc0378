"""
Decision entry points.

The turn state machine calls these once per decision:
- decide_deployment(state, catalog) during the deployment phase
- decide_action(state, catalog) during the action phase
- decide_interception(attack, interceptors, state, catalog) per incoming attack

Each builds one EvaluationContext, runs the pipeline and returns a plain
value. The caller applies the result to the authoritative game state.
"""

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Tuple

from . import constants as C
from . import decision_logger
from .adjustments import run_adjustments
from .catalog import UnitCatalog
from .config import config
from .context import EvaluationContext
from .enumerator import enumerate_actions, enumerate_deployments
from .evaluators import default_evaluator
from .evaluators.base import Action
from .interception import InterceptionDecision, respond_to_attack
from .models import AttackContext, GameState, Unit
from .queries import GameQueries
from .selection import select_action, select_deployment
from .strategy_config import StrategyConfig

logger = logging.getLogger(__name__)


class DecisionKind(Enum):
    DEPLOY = "deploy"
    ACTION = "action"
    PASS = "pass"


@dataclass(frozen=True)
class Decision:
    """Outcome of one decision cycle, with every scored candidate for audit"""
    kind: DecisionKind
    chosen: Optional[Action] = None
    candidates: Tuple[Action, ...] = field(default_factory=tuple)

    @property
    def is_pass(self) -> bool:
        return self.kind is DecisionKind.PASS


def resolve_rng(state: GameState, rng: Optional[random.Random] = None) -> random.Random:
    """Caller's rng, else one seeded from the state, else from config (unseeded if neither)"""
    if rng is not None:
        return rng
    if state.seed is not None:
        return random.Random(state.seed)
    return random.Random(config.RNG_SEED)


def build_context(state: GameState, catalog: UnitCatalog,
                  queries: Optional[GameQueries] = None,
                  rng: Optional[random.Random] = None,
                  strategy: Optional[StrategyConfig] = None) -> EvaluationContext:
    return EvaluationContext.build(state, catalog, queries=queries,
                                   rng=resolve_rng(state, rng), strategy=strategy)


def _log_outcome(kind: str, ctx: EvaluationContext, candidates, outcome: str):
    if config.DECISION_LOG_ENABLED:
        decision_logger.log_decision(kind, ctx.state.turn, candidates, outcome)


def _report(decision: Decision, label: str):
    if decision.is_pass:
        top = max((c.score for c in decision.candidates), default=None)
        top_str = f"{top:.1f}" if top is not None else "n/a"
        logger.info(f"🛑 {label}: pass ({len(decision.candidates)} candidates, best {top_str})")
        return
    chosen = decision.chosen
    logger.info(f"✅ {label}: {chosen.label} (score: {chosen.score:.1f})")
    logger.info(f"   Reasoning: {' | '.join(chosen.reasoning)}")


def decide_deployment(state: GameState, catalog: UnitCatalog,
                      queries: Optional[GameQueries] = None,
                      rng: Optional[random.Random] = None,
                      strategy: Optional[StrategyConfig] = None) -> Decision:
    """
    Pick one unit and lane to deploy, or pass.

    Raises:
        UnknownUnitError: a unit in the pool or on the board has no definition
    """
    ctx = build_context(state, catalog, queries, rng, strategy)

    candidates = default_evaluator().score_all(enumerate_deployments(ctx), ctx)
    min_score = ctx.setting('selection', 'min_deploy_score', C.MIN_DEPLOY_SCORE)
    chosen, marked = select_deployment(candidates, ctx.rng, min_score)

    if chosen is None:
        decision = Decision(DecisionKind.PASS, None, tuple(marked))
    else:
        decision = Decision(DecisionKind.DEPLOY, chosen, tuple(marked))

    _report(decision, f"Deployment (turn {state.turn})")
    _log_outcome('deployment', ctx, marked, "pass" if decision.is_pass else chosen.label)
    return decision


def decide_action(state: GameState, catalog: UnitCatalog,
                  queries: Optional[GameQueries] = None,
                  rng: Optional[random.Random] = None,
                  strategy: Optional[StrategyConfig] = None) -> Decision:
    """
    Pick one action-phase action, or pass.

    Raises:
        UnknownUnitError: a unit on the board has no definition
    """
    ctx = build_context(state, catalog, queries, rng, strategy)

    scored = default_evaluator().score_all(enumerate_actions(ctx), ctx)
    adjusted = run_adjustments(scored, ctx)

    min_score = ctx.setting('selection', 'min_action_score', C.MIN_ACTION_SCORE)
    pool_range = ctx.setting('selection', 'action_pool_range', C.ACTION_POOL_RANGE)
    chosen, marked = select_action(adjusted, ctx.rng, min_score, pool_range)

    if chosen is None:
        decision = Decision(DecisionKind.PASS, None, tuple(marked))
    else:
        decision = Decision(DecisionKind.ACTION, chosen, tuple(marked))

    _report(decision, f"Action (turn {state.turn})")
    _log_outcome('action', ctx, marked, "pass" if decision.is_pass else chosen.label)
    return decision


def decide_interception(attack: AttackContext, interceptors: Sequence[Unit],
                        state: GameState, catalog: UnitCatalog,
                        queries: Optional[GameQueries] = None) -> InterceptionDecision:
    """
    Choose an interceptor for one incoming attack, or decline.

    `state.player` is the defending side; `interceptors` must already be
    legal (speed/keyword checks done by the caller).
    """
    ctx = build_context(state, catalog, queries)
    decision = respond_to_attack(attack, interceptors, ctx)

    if decision.declined:
        logger.info(f"🛡️  No interception of {attack.attacker.name} ({len(interceptors)} available)")
    else:
        logger.info(f"🛡️  Intercepting {attack.attacker.name} with {decision.interceptor.name}")
    outcome = "decline" if decision.declined else f"intercept with {decision.interceptor.name}"
    _log_outcome('interception', ctx, decision.trace, outcome)
    return decision
