"""
Per-action evaluators.

One evaluator per action kind; default_evaluator() wires them together.
"""

from .ability import AbilityEvaluator
from .attack import SectionAttackEvaluator, UnitAttackEvaluator
from .base import (
    AbilityAction, Action, ActionEvaluator, ActionKind, AttackAction, CombinedEvaluator,
    DeployAction, Evaluation, MoveAction, MovePlan, PlayCardAction, SectionAttackAction,
    UnitAttackAction,
)
from .card import CardEvaluator, evaluate_card_play
from .deploy import DeployEvaluator
from .move import MoveEvaluator, evaluate_move


def default_evaluator() -> CombinedEvaluator:
    return CombinedEvaluator([
        DeployEvaluator(),
        CardEvaluator(),
        UnitAttackEvaluator(),
        SectionAttackEvaluator(),
        MoveEvaluator(),
        AbilityEvaluator(),
    ])


__all__ = [
    'AbilityAction',
    'Action',
    'ActionEvaluator',
    'ActionKind',
    'AttackAction',
    'CombinedEvaluator',
    'DeployAction',
    'Evaluation',
    'MoveAction',
    'MovePlan',
    'PlayCardAction',
    'SectionAttackAction',
    'UnitAttackAction',
    'AbilityEvaluator',
    'CardEvaluator',
    'DeployEvaluator',
    'MoveEvaluator',
    'SectionAttackEvaluator',
    'UnitAttackEvaluator',
    'default_evaluator',
    'evaluate_card_play',
    'evaluate_move',
]
