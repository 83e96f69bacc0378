"""
Lane tactician: the computer opponent's decision engine for the lane-based
drone card game.

Entry points:
    decide_deployment(state, catalog)
    decide_action(state, catalog)
    decide_interception(attack, interceptors, state, catalog)
"""

from .catalog import UnitCatalog, load_catalog
from .decisions import Decision, DecisionKind, decide_action, decide_deployment, decide_interception
from .errors import ConfigurationError, TacticianError, UnknownUnitError
from .interception import InterceptionDecision

__version__ = "1.0.0"

__all__ = [
    'Decision',
    'DecisionKind',
    'InterceptionDecision',
    'UnitCatalog',
    'load_catalog',
    'decide_action',
    'decide_deployment',
    'decide_interception',
    'ConfigurationError',
    'TacticianError',
    'UnknownUnitError',
]
