"""
Game Queries

The read-only questions the decision engine asks the rules engine:
effective stats, legal targets, and ship section status. GameQueries is the
contract; BoardQueries answers it from the snapshot and the unit catalog
alone (definition stats, per-unit stat modifiers and upgrades), which is enough for
tests and offline replays. A live game plugs in its own resolver that knows
about auras.
"""

import logging
from typing import List, Optional, Protocol

from .catalog import UnitCatalog
from .models import (
    Affinity, Card, GameState, LaneRef, SectionRef, SectionStatus, ShipSection,
    Side, Target, TargetType, Unit, UnitStats, UnitTypeRef, UpgradeRef,
)

logger = logging.getLogger(__name__)


class GameQueries(Protocol):
    """Read-only rules queries. Implementations must be pure."""

    def effective_stats(self, unit: Unit, lane: int, state: Optional[GameState] = None) -> UnitStats:
        ...

    def valid_targets(self, state: GameState, acting_side: Side, source: Optional[Unit],
                      card: Card) -> List[Target]:
        ...

    def section_status(self, section: Optional[ShipSection]) -> SectionStatus:
        ...


def section_status_from_thresholds(section: Optional[ShipSection]) -> SectionStatus:
    """Classify a section by its hull thresholds (missing section counts as healthy)"""
    if section is None:
        return SectionStatus.HEALTHY
    if section.hull <= section.critical_threshold:
        return SectionStatus.CRITICAL
    if section.hull <= section.damaged_threshold:
        return SectionStatus.DAMAGED
    return SectionStatus.HEALTHY


class BoardQueries:
    """
    GameQueries over the snapshot and catalog.

    Stat modifiers on the unit, and the owner's upgrades for its type when
    a state is given, are applied additively on top of the definition;
    current hull/shields come from the unit when set.
    """

    def __init__(self, catalog: UnitCatalog):
        self.catalog = catalog

    def effective_stats(self, unit: Unit, lane: int, state: Optional[GameState] = None) -> UnitStats:
        definition = self.catalog.require(unit.name)

        attack = definition.attack
        speed = definition.speed
        max_shields = definition.shields
        max_hull = definition.hull
        keywords = definition.keywords
        mods = list(unit.stat_mods)
        if state is not None:
            for upgrade in state.side(unit.owner).upgrades_for(unit.name):
                if upgrade.mod is not None:
                    mods.append(upgrade.mod)
                if upgrade.keyword:
                    keywords = keywords | {upgrade.keyword}

        for mod in mods:
            if mod.stat == 'attack':
                attack += mod.value
            elif mod.stat == 'speed':
                speed += mod.value
            elif mod.stat == 'shields':
                max_shields += mod.value
            elif mod.stat == 'hull':
                max_hull += mod.value

        hull = unit.hull if unit.hull is not None else max_hull
        shields = unit.shields if unit.shields is not None else max_shields

        return UnitStats(
            attack=attack,
            speed=speed,
            hull=hull,
            shields=shields,
            max_hull=max_hull,
            max_shields=max_shields,
            unit_class=definition.unit_class,
            bonus_ship_damage=definition.bonus_ship_damage,
            keywords=keywords,
            damage_type=definition.damage_type,
        )

    def valid_targets(self, state: GameState, acting_side: Side, source: Optional[Unit],
                      card: Card) -> List[Target]:
        sides = self._sides_for(card.affinity, acting_side)
        targets: List[Target] = []

        if card.target_type is TargetType.UNIT:
            for side in sides:
                targets.extend(state.side(side).units)
        elif card.target_type is TargetType.LANE:
            for side in sides:
                targets.extend(LaneRef(lane=lane, owner=side) for lane in state.lanes)
        elif card.target_type is TargetType.SECTION:
            for side in sides:
                player_state = state.side(side)
                for lane in state.lanes:
                    section = player_state.section_in(lane)
                    if section is not None and section.hull > 0:
                        targets.append(SectionRef(section=section, lane=lane, owner=side))
        elif card.target_type is TargetType.UNIT_TYPE:
            for side in sides:
                targets.extend(UnitTypeRef(unit_name=name, owner=side)
                               for name in state.side(side).deployment_pool)
        elif card.target_type is TargetType.UPGRADE:
            for side in sides:
                targets.extend(UpgradeRef(upgrade=upgrade, owner=side)
                               for upgrade in state.side(side).upgrades)

        return targets

    def section_status(self, section: Optional[ShipSection]) -> SectionStatus:
        return section_status_from_thresholds(section)

    @staticmethod
    def _sides_for(affinity: Affinity, acting_side: Side) -> List[Side]:
        if affinity is Affinity.ENEMY:
            return [acting_side.opposite]
        if affinity in (Affinity.FRIENDLY, Affinity.SELF):
            return [acting_side]
        return [acting_side, acting_side.opposite]
