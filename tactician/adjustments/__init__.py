"""
Adjustment passes, applied in this exact order to the scored action list.
Later passes read scores written by earlier ones.
"""

import logging
from typing import Callable, List, Sequence, Tuple

from ..evaluators.base import Action
from .blocking import apply_blocking
from .denial import apply_denial_removal
from .interception import apply_interception
from .mobility import apply_mobility_lock
from .pacing import apply_pacing

logger = logging.getLogger(__name__)

AdjustmentPass = Callable[[List[Action], object], List[Action]]

PASSES: Tuple[AdjustmentPass, ...] = (
    apply_blocking,
    apply_interception,
    apply_denial_removal,
    apply_mobility_lock,
    apply_pacing,
)


def run_adjustments(actions: List[Action], ctx,
                    passes: Sequence[AdjustmentPass] = PASSES) -> List[Action]:
    for adjustment in passes:
        actions = adjustment(actions, ctx)
        logger.debug(f"After {adjustment.__name__}: top score "
                     f"{max((a.score for a in actions), default=0):.1f}")
    return actions


__all__ = [
    'PASSES',
    'apply_blocking',
    'apply_denial_removal',
    'apply_interception',
    'apply_mobility_lock',
    'apply_pacing',
    'run_adjustments',
]
