"""
Selection Policy

Deployment: decline below the pass threshold, otherwise pick uniformly
among the candidates tied at the top score.

Actions: decline unless the top score is positive, otherwise pick uniformly
from every positive candidate within the pool range of the top score, so
several near-best actions get played instead of always the same one.
"""

import logging
import random
from typing import List, Optional, Tuple

from . import constants as C
from .evaluators.base import Action

logger = logging.getLogger(__name__)


def _top_score(candidates: List[Action]) -> Optional[float]:
    return max((c.score for c in candidates), default=None)


def deployment_pool(candidates: List[Action], min_score: float = C.MIN_DEPLOY_SCORE) -> List[Action]:
    top = _top_score(candidates)
    if top is None or top < min_score:
        return []
    return [c for c in candidates if c.score == top]


def action_pool(candidates: List[Action], min_score: float = C.MIN_ACTION_SCORE,
                pool_range: float = C.ACTION_POOL_RANGE) -> List[Action]:
    top = _top_score(candidates)
    if top is None or top <= min_score:
        return []
    return [c for c in candidates if c.score >= top - pool_range and c.score > 0]


def _choose(candidates: List[Action], pool: List[Action],
            rng: random.Random) -> Tuple[Optional[Action], List[Action]]:
    if not pool:
        return None, list(candidates)
    chosen = rng.choice(pool)
    marked = [c.marked_chosen() if c is chosen else c for c in candidates]
    return next(c for c in marked if c.chosen), marked


def select_deployment(candidates: List[Action], rng: random.Random,
                      min_score: float = C.MIN_DEPLOY_SCORE) -> Tuple[Optional[Action], List[Action]]:
    """
    Returns:
        (chosen candidate or None to pass, candidates with the chosen one marked)
    """
    pool = deployment_pool(candidates, min_score)
    if not pool:
        logger.debug(f"Deployment pass: top score {_top_score(candidates)} below {min_score}")
    return _choose(candidates, pool, rng)


def select_action(candidates: List[Action], rng: random.Random,
                  min_score: float = C.MIN_ACTION_SCORE,
                  pool_range: float = C.ACTION_POOL_RANGE) -> Tuple[Optional[Action], List[Action]]:
    pool = action_pool(candidates, min_score, pool_range)
    if pool:
        logger.debug(f"Action pool: {len(pool)} of {len(candidates)} candidates")
    return _choose(candidates, pool, rng)
