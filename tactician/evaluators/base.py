"""
Base Classes for Evaluator System

Action candidates, the reasoning/score builder and the evaluator interface.

Candidates are immutable: evaluators return an Evaluation that is folded into
a fresh copy of the candidate, and adjustment passes produce adjusted copies.
Nothing ever changes a candidate's kind, actor or target.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import ClassVar, List, Optional, Tuple
import logging

from ..constants import INVALID_SCORE
from ..models import Ability, Card, LaneRef, SectionRef, Target, Unit, UnitTypeRef, UpgradeRef

logger = logging.getLogger(__name__)


class ActionKind(Enum):
    """Types of actions the engine can choose"""
    DEPLOY = "deploy"
    PLAY_CARD = "play_card"
    ATTACK_UNIT = "attack_unit"
    ATTACK_SECTION = "attack_section"
    MOVE = "move"
    USE_ABILITY = "use_ability"
    PASS = "pass"


def describe_target(target: Optional[Target]) -> str:
    if target is None:
        return "no target"
    if isinstance(target, Unit):
        return f"{target.name} [{target.id}]"
    if isinstance(target, SectionRef):
        return f"section {target.name}"
    if isinstance(target, LaneRef):
        return target.name
    if isinstance(target, UnitTypeRef):
        return f"unit type {target.name}"
    if isinstance(target, UpgradeRef):
        return f"upgrade {target.name}"
    return str(target)


def format_reason(reason: str, score_delta: float = 0.0) -> str:
    if score_delta != 0:
        return f"{reason} ({score_delta:+.1f})"
    return reason


# =============================================================================
# SCORING
# =============================================================================

@dataclass
class Evaluation:
    """
    Score and reasoning produced by one evaluator for one candidate.

    Builders accumulate with add_reasoning(); the candidate only sees the
    finished result.
    """
    score: float = 0.0
    reasoning: List[str] = field(default_factory=list)

    def add_reasoning(self, reason: str, score_delta: float = 0.0):
        """Add reasoning with optional score adjustment"""
        self.reasoning.append(format_reason(reason, score_delta))
        self.score += score_delta

    def set_invalid(self, reason: str) -> "Evaluation":
        self.score = INVALID_SCORE
        self.reasoning.append(reason)
        return self

    @classmethod
    def invalid(cls, reason: str) -> "Evaluation":
        return cls().set_invalid(reason)

    @property
    def is_invalid(self) -> bool:
        return self.score <= INVALID_SCORE


# =============================================================================
# ACTION CANDIDATES
# =============================================================================

@dataclass(frozen=True)
class Action:
    """
    One candidate action for the current decision cycle.

    score/reasoning start empty; exactly one evaluator fills them, then the
    adjustment passes may shift the score and append to the trail.
    """
    kind: ClassVar[ActionKind] = ActionKind.PASS

    score: float = field(default=0.0, kw_only=True)
    reasoning: Tuple[str, ...] = field(default=(), kw_only=True)
    chosen: bool = field(default=False, kw_only=True)

    @property
    def label(self) -> str:
        return self.kind.value

    @property
    def is_invalid(self) -> bool:
        return self.score <= INVALID_SCORE

    def rescored(self, evaluation: Evaluation) -> "Action":
        return replace(self, score=evaluation.score, reasoning=tuple(evaluation.reasoning))

    def adjusted(self, reason: str, score_delta: float = 0.0) -> "Action":
        return replace(self, score=self.score + score_delta,
                       reasoning=self.reasoning + (format_reason(reason, score_delta),))

    def with_score(self, score: float, reason: str) -> "Action":
        return replace(self, score=score, reasoning=self.reasoning + (reason,))

    def invalidated(self, reason: str) -> "Action":
        return self.with_score(INVALID_SCORE, reason)

    def marked_chosen(self) -> "Action":
        return replace(self, chosen=True)

    def __repr__(self):
        return f"{type(self).__name__}({self.label}, score={self.score:.1f})"


@dataclass(frozen=True)
class DeployAction(Action):
    """Deploy a unit type into a lane (lane None = unit unavailable this turn)"""
    kind: ClassVar[ActionKind] = ActionKind.DEPLOY

    unit_name: str
    lane: Optional[int] = None

    @property
    def label(self) -> str:
        if self.lane is None:
            return f"Deploy {self.unit_name} (unavailable)"
        return f"Deploy {self.unit_name} -> Lane {self.lane + 1}"


@dataclass(frozen=True)
class MovePlan:
    """Unit/lane choice for a card that moves a unit"""
    unit: Unit
    from_lane: int
    to_lane: int


@dataclass(frozen=True)
class PlayCardAction(Action):
    kind: ClassVar[ActionKind] = ActionKind.PLAY_CARD

    card: Card
    target: Optional[Target] = None
    move: Optional[MovePlan] = None

    @property
    def label(self) -> str:
        if self.move is not None:
            return (f"Play {self.card.name}: move {self.move.unit.name} "
                    f"Lane {self.move.from_lane + 1} -> Lane {self.move.to_lane + 1}")
        return f"Play {self.card.name} on {describe_target(self.target)}"


@dataclass(frozen=True)
class UnitAttackAction(Action):
    kind: ClassVar[ActionKind] = ActionKind.ATTACK_UNIT

    attacker: Unit
    target: Unit

    @property
    def lane(self) -> int:
        return self.attacker.lane

    @property
    def label(self) -> str:
        return f"{self.attacker.name} attacks {describe_target(self.target)}"


@dataclass(frozen=True)
class SectionAttackAction(Action):
    kind: ClassVar[ActionKind] = ActionKind.ATTACK_SECTION

    attacker: Unit
    target: SectionRef

    @property
    def lane(self) -> int:
        return self.attacker.lane

    @property
    def label(self) -> str:
        return f"{self.attacker.name} attacks {describe_target(self.target)}"


@dataclass(frozen=True)
class MoveAction(Action):
    kind: ClassVar[ActionKind] = ActionKind.MOVE

    unit: Unit
    from_lane: int
    to_lane: int

    @property
    def label(self) -> str:
        return f"Move {self.unit.name} Lane {self.from_lane + 1} -> Lane {self.to_lane + 1}"


@dataclass(frozen=True)
class AbilityAction(Action):
    kind: ClassVar[ActionKind] = ActionKind.USE_ABILITY

    unit: Unit
    ability: Ability
    target: Optional[Target] = None

    @property
    def label(self) -> str:
        return f"{self.unit.name} uses {self.ability.name} on {describe_target(self.target)}"


AttackAction = (UnitAttackAction, SectionAttackAction)


# =============================================================================
# EVALUATORS
# =============================================================================

class ActionEvaluator(ABC):
    """
    Base class for per-action evaluators.

    Each evaluator scores one action kind. Evaluators are side-effect free:
    they read the EvaluationContext and return an Evaluation.
    """

    def __init__(self, name: str):
        self.name = name
        self.enabled = True
        self.logger = logging.getLogger(f"{__name__}.{name}")

    @abstractmethod
    def can_evaluate(self, action: Action) -> bool:
        """True if this evaluator scores this kind of action"""
        pass

    @abstractmethod
    def evaluate(self, action: Action, ctx) -> Evaluation:
        """
        Score one candidate.

        Args:
            action: Candidate produced by the enumerator
            ctx: EvaluationContext for this decision cycle

        Returns:
            Evaluation with the base score and reasoning
        """
        pass

    def score(self, action: Action, ctx) -> Action:
        scored = action.rescored(self.evaluate(action, ctx))
        self.log_evaluation(scored)
        return scored

    def log_evaluation(self, action: Action):
        """Log evaluation for debugging"""
        reasons = " | ".join(action.reasoning)
        self.logger.debug(f"  [{self.name}] {action.label}: {action.score:.1f} - {reasons}")


class CombinedEvaluator:
    """
    Routes every candidate to the single evaluator that handles its kind.
    """

    def __init__(self, evaluators: List[ActionEvaluator]):
        self.evaluators = evaluators
        self.logger = logging.getLogger(__name__)

    def score_all(self, actions: List[Action], ctx) -> List[Action]:
        scored = []
        for action in actions:
            evaluator = self._evaluator_for(action)
            if evaluator is None:
                self.logger.warning(f"⚠️  No evaluator for {action.label}")
                scored.append(action.adjusted("No evaluator for action"))
                continue
            scored.append(evaluator.score(action, ctx))
        return scored

    def _evaluator_for(self, action: Action) -> Optional[ActionEvaluator]:
        for evaluator in self.evaluators:
            if evaluator.enabled and evaluator.can_evaluate(action):
                return evaluator
        return None
