"""
Evaluation Context

One immutable value object per decision cycle. Every evaluator and
adjustment pass receives the same instance; nothing reads global state.
"""

import logging
import random
from dataclasses import dataclass, replace
from typing import Optional

from .catalog import UnitCatalog
from .models import GameState, PlayerState, SectionStatus, ShipSection, Unit, UnitDefinition, UnitStats
from .queries import BoardQueries, GameQueries
from .strategy_config import StrategyConfig, get_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationContext:
    """
    Everything needed to score actions for one decision.

    `state.player` is the side deciding (friendly), `state.opponent` the enemy.
    """
    state: GameState
    queries: GameQueries
    catalog: UnitCatalog
    rng: random.Random
    strategy: StrategyConfig

    @classmethod
    def build(cls, state: GameState, catalog: UnitCatalog,
              queries: Optional[GameQueries] = None,
              rng: Optional[random.Random] = None,
              strategy: Optional[StrategyConfig] = None) -> "EvaluationContext":
        return cls(
            state=state,
            queries=queries if queries is not None else BoardQueries(catalog),
            catalog=catalog,
            rng=rng if rng is not None else random.Random(state.seed),
            strategy=strategy if strategy is not None else get_config(),
        )

    def with_state(self, state: GameState) -> "EvaluationContext":
        """Same queries/rng against a hypothetical board"""
        return replace(self, state=state)

    # ------------------------------------------------------------------
    # Board shortcuts
    # ------------------------------------------------------------------

    @property
    def friendly(self) -> PlayerState:
        return self.state.player

    @property
    def enemy(self) -> PlayerState:
        return self.state.opponent

    def stats(self, unit: Unit, lane: Optional[int] = None) -> UnitStats:
        return self.queries.effective_stats(unit, unit.lane if lane is None else lane, self.state)

    def definition(self, unit_or_name) -> UnitDefinition:
        name = unit_or_name if isinstance(unit_or_name, str) else unit_or_name.name
        return self.catalog.require(name)

    def has_keyword(self, unit: Unit, keyword: str) -> bool:
        return keyword in self.stats(unit).keywords

    def is_anti_ship(self, unit: Unit) -> bool:
        return self.definition(unit).bonus_ship_damage > 0

    def is_token(self, unit: Unit) -> bool:
        return self.definition(unit).is_token

    def section_status(self, section: Optional[ShipSection]) -> SectionStatus:
        if section is None:
            return SectionStatus.HEALTHY
        return self.queries.section_status(section)

    def own_section(self, lane: int) -> Optional[ShipSection]:
        return self.friendly.section_in(lane)

    def enemy_section(self, lane: int) -> Optional[ShipSection]:
        return self.enemy.section_in(lane)

    def max_ready_speed(self, player_state: PlayerState, lane: int) -> int:
        """Fastest ready unit in a lane; 0 when nothing is ready"""
        speeds = [self.stats(u, lane).speed for u in player_state.ready_units(lane)]
        return max(speeds) if speeds else 0

    # ------------------------------------------------------------------
    # Strategy knobs
    # ------------------------------------------------------------------

    def setting(self, section: str, key: str, default):
        return self.strategy.get(section, key, default)
