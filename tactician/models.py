"""
Data models for the board snapshot.

These are the read-only structures the decision engine consumes. The turn
state machine builds one GameState per decision cycle from the authoritative
game state; nothing in this package mutates them.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple, Union


class Side(Enum):
    """Board side, relative to the side making the decision"""
    FRIENDLY = "friendly"
    ENEMY = "enemy"

    @property
    def opposite(self) -> "Side":
        return Side.ENEMY if self is Side.FRIENDLY else Side.FRIENDLY


class SectionStatus(Enum):
    """Two-tier ship section health state"""
    HEALTHY = "healthy"
    DAMAGED = "damaged"
    CRITICAL = "critical"

    @property
    def is_degraded(self) -> bool:
        return self is not SectionStatus.HEALTHY


class DamageType(Enum):
    NORMAL = "NORMAL"
    PIERCING = "PIERCING"
    SHIELD_BREAKER = "SHIELD_BREAKER"
    ION = "ION"
    KINETIC = "KINETIC"


class Keyword(str, Enum):
    """Unit keywords the heuristics care about"""
    GUARDIAN = "GUARDIAN"                  # Always blocks section attacks in its lane
    JAMMER = "JAMMER"                      # Forced target for single-target cards
    ALWAYS_INTERCEPTS = "ALWAYS_INTERCEPTS"
    DEFENDER = "DEFENDER"
    DOGFIGHT = "DOGFIGHT"                  # Deals damage back when intercepting
    RETALIATE = "RETALIATE"                # Deals damage back when attacked
    INHIBIT_MOVEMENT = "INHIBIT_MOVEMENT"  # Lane lock token


class TargetType(Enum):
    """What a card asks the player to pick"""
    NONE = "NONE"
    UNIT = "UNIT"
    LANE = "LANE"
    SECTION = "SECTION"
    UNIT_TYPE = "UNIT_TYPE"  # A unit type from the deployment pool (upgrades)
    UPGRADE = "UPGRADE"      # An installed upgrade


class Affinity(Enum):
    FRIENDLY = "FRIENDLY"
    ENEMY = "ENEMY"
    ANY = "ANY"
    SELF = "SELF"


@dataclass(frozen=True)
class StatMod:
    """A stat modification (e.g. +1 attack until end of turn)"""
    stat: str
    value: int
    permanent: bool = False


@dataclass(frozen=True)
class Ability:
    """
    A unit ability.

    kind is ACTIVE, PASSIVE or TRIGGERED. Active abilities are enumerated as
    use_ability actions; passive and triggered ones only feed the heuristics.
    """
    name: str
    kind: str
    effect_type: str
    value: int = 0
    trigger: Optional[str] = None
    energy_cost: int = 0
    affinity: Affinity = Affinity.ENEMY
    location: str = "SAME_LANE"  # SAME_LANE, OTHER_LANES, ANY_LANE
    restrictions: FrozenSet[str] = frozenset()
    stat_mods: Tuple[StatMod, ...] = ()


@dataclass(frozen=True)
class UnitDefinition:
    """Static unit data, looked up by name in the UnitCatalog"""
    name: str
    unit_class: int
    attack: int
    speed: int
    hull: int
    shields: int = 0
    limit: int = 99
    max_per_lane: Optional[int] = None
    keywords: FrozenSet[str] = frozenset()
    abilities: Tuple[Ability, ...] = ()
    damage_type: DamageType = DamageType.NORMAL
    is_token: bool = False
    upgrade_slots: int = 1

    @property
    def bonus_ship_damage(self) -> int:
        return sum(a.value for a in self.abilities
                   if a.kind == "PASSIVE" and a.effect_type == "BONUS_DAMAGE_VS_SHIP")

    @property
    def active_abilities(self) -> Tuple[Ability, ...]:
        return tuple(a for a in self.abilities if a.kind == "ACTIVE")

    def triggered(self, trigger: str) -> Tuple[Ability, ...]:
        """Triggered abilities for one trigger (ON_DEPLOY, ON_MOVE, ON_ROUND_START...)"""
        return tuple(a for a in self.abilities if a.kind == "TRIGGERED" and a.trigger == trigger)


@dataclass(frozen=True)
class Unit:
    """
    A unit instance on the board.

    hull/shields are the current values; None means "undamaged" and the stat
    resolver falls back to the definition.
    """
    id: str
    name: str
    lane: int
    owner: Side = Side.FRIENDLY
    hull: Optional[int] = None
    shields: Optional[int] = None
    is_exhausted: bool = False
    is_marked: bool = False
    stat_mods: Tuple[StatMod, ...] = ()
    cannot_move: bool = False
    cannot_attack: bool = False
    cannot_intercept: bool = False
    does_not_ready: bool = False

    @property
    def is_ready(self) -> bool:
        return not self.is_exhausted

    @property
    def status_count(self) -> int:
        """Number of negative status effects (mark not included)"""
        return sum((self.cannot_move, self.cannot_attack, self.cannot_intercept, self.does_not_ready))

    def moved_to(self, lane: int) -> "Unit":
        return replace(self, lane=lane)


@dataclass(frozen=True)
class UnitStats:
    """Effective (aura/upgrade adjusted) stats returned by the stat query"""
    attack: int = 0
    speed: int = 0
    hull: int = 0
    shields: int = 0
    max_hull: int = 0
    max_shields: int = 0
    unit_class: int = 0
    bonus_ship_damage: int = 0
    keywords: FrozenSet[str] = frozenset()
    damage_type: DamageType = DamageType.NORMAL

    @property
    def durability(self) -> int:
        return self.hull + self.shields

    @property
    def ship_threat(self) -> int:
        """Damage this unit deals to an unprotected ship section"""
        return self.attack + self.bonus_ship_damage

    def has(self, keyword: str) -> bool:
        return keyword in self.keywords


@dataclass(frozen=True)
class ShipSection:
    """One ship section; thresholds are hull values at/below which the state degrades"""
    name: str
    hull: int
    max_hull: int
    shields: int = 0
    damaged_threshold: int = 0
    critical_threshold: int = 0


@dataclass(frozen=True)
class Condition:
    """
    A card condition, checked against the target before the card resolves.

    type is one of TARGET_STAT_LT / LTE / GT / GTE (uses stat and value),
    TARGET_IS_MARKED, TARGET_IS_EXHAUSTED, TARGET_IS_READY,
    OPPONENT_HAS_MORE_IN_LANE, FRIENDLY_COUNT_IN_LANE (value is the minimum),
    ON_DESTROY or ON_HULL_DAMAGE.
    """
    type: str
    stat: Optional[str] = None
    value: int = 0


@dataclass(frozen=True)
class ConditionalEffect:
    """An extra effect granted when `condition` holds (timing PRE or POST)"""
    timing: str
    condition: Condition
    grant_type: str
    grant_value: int = 0
    grant_mod: Optional[StatMod] = None


@dataclass(frozen=True)
class CardEffect:
    type: str
    value: int = 0
    scope: str = "SINGLE"  # SINGLE, FILTERED, LANE, ALL
    damage_type: DamageType = DamageType.NORMAL
    mod: Optional[StatMod] = None
    go_again: bool = False
    filter_stat: Optional[str] = None
    filter_comparison: Optional[str] = None  # GTE / LTE
    filter_value: int = 0
    draw_count: int = 0
    search_count: int = 0
    repeat_condition: Optional[str] = None
    keyword: Optional[str] = None          # Keyword granted by an ability upgrade
    marked_bonus: int = 0                  # Extra damage against marked targets
    splash_value: int = 0                  # Damage to units adjacent to the target
    bonus_condition: Optional[Condition] = None
    bonus_value: int = 0                   # Extra primary damage when bonus_condition holds
    scaling_source: Optional[str] = None   # READY_UNITS_IN_LANE


@dataclass(frozen=True)
class Card:
    id: str
    name: str
    cost: int
    effect: CardEffect
    target_type: TargetType = TargetType.NONE
    affinity: Affinity = Affinity.ANY
    conditionals: Tuple[ConditionalEffect, ...] = ()

    @property
    def is_single_target_vs_units(self) -> bool:
        return (self.target_type is TargetType.UNIT
                and self.effect.scope == "SINGLE"
                and self.effect.type in ("DAMAGE", "DESTROY"))


@dataclass(frozen=True)
class LaneRef:
    """A whole lane as a card target"""
    lane: int
    owner: Side

    @property
    def name(self) -> str:
        return f"Lane {self.lane + 1}"


@dataclass(frozen=True)
class SectionRef:
    """A ship section as an attack or card target"""
    section: ShipSection
    lane: int
    owner: Side

    @property
    def name(self) -> str:
        return self.section.name


@dataclass(frozen=True)
class Upgrade:
    """A permanent upgrade installed on every unit of one type"""
    name: str
    unit_name: str
    mod: Optional[StatMod] = None
    keyword: Optional[str] = None


@dataclass(frozen=True)
class UnitTypeRef:
    """A unit type as a card target"""
    unit_name: str
    owner: Side

    @property
    def name(self) -> str:
        return self.unit_name


@dataclass(frozen=True)
class UpgradeRef:
    """An installed upgrade as a card target"""
    upgrade: Upgrade
    owner: Side

    @property
    def name(self) -> str:
        return f"{self.upgrade.name} on {self.upgrade.unit_name}"


Target = Union[Unit, LaneRef, SectionRef, UnitTypeRef, UpgradeRef]


@dataclass(frozen=True)
class PlayerState:
    """
    One side's board, hand and resources.

    ready_copies tracks copies available to deploy per unit type; a type
    missing from it falls back to the deployment limit.
    """
    name: str
    units: Tuple[Unit, ...] = ()
    sections: Tuple[Optional[ShipSection], ...] = ()  # indexed by lane
    hand: Tuple[Card, ...] = ()
    energy: int = 0
    deployment_budget: int = 0
    initial_deployment_budget: int = 0
    deployed_counts: Dict[str, int] = field(default_factory=dict)
    deployment_pool: Tuple[str, ...] = ()
    cpu_limit: int = 10
    upgrades: Tuple[Upgrade, ...] = ()
    ready_copies: Dict[str, int] = field(default_factory=dict)

    def units_in(self, lane: int) -> Tuple[Unit, ...]:
        return tuple(u for u in self.units if u.lane == lane)

    def upgrades_for(self, unit_name: str) -> Tuple[Upgrade, ...]:
        return tuple(u for u in self.upgrades if u.unit_name == unit_name)

    def units_named(self, unit_name: str) -> Tuple[Unit, ...]:
        return tuple(u for u in self.units if u.name == unit_name)

    def ready_units(self, lane: Optional[int] = None) -> Tuple[Unit, ...]:
        return tuple(u for u in self.units
                     if u.is_ready and (lane is None or u.lane == lane))

    def section_in(self, lane: int) -> Optional[ShipSection]:
        if 0 <= lane < len(self.sections):
            return self.sections[lane]
        return None

    def count_in_lane(self, unit_name: str, lane: int) -> int:
        return sum(1 for u in self.units_in(lane) if u.name == unit_name)

    def find_unit(self, unit_id: str) -> Optional[Unit]:
        for unit in self.units:
            if unit.id == unit_id:
                return unit
        return None

    def with_unit(self, unit: Unit) -> "PlayerState":
        return replace(self, units=self.units + (unit,))

    def without_unit(self, unit_id: str) -> "PlayerState":
        return replace(self, units=tuple(u for u in self.units if u.id != unit_id))

    def with_unit_moved(self, unit_id: str, to_lane: int) -> "PlayerState":
        return replace(self, units=tuple(u.moved_to(to_lane) if u.id == unit_id else u
                                         for u in self.units))


@dataclass(frozen=True)
class GameState:
    """
    Full visible state for one decision cycle.

    `player` is always the side deciding; `opponent` the other side.
    """
    player: PlayerState
    opponent: PlayerState
    turn: int = 1
    lane_count: int = 3
    seed: Optional[int] = None

    @property
    def lanes(self) -> range:
        return range(self.lane_count)

    def side(self, side: Side) -> PlayerState:
        return self.player if side is Side.FRIENDLY else self.opponent

    def adjacent_lanes(self, lane: int) -> Tuple[int, ...]:
        return tuple(l for l in (lane - 1, lane + 1) if 0 <= l < self.lane_count)

    def with_side(self, side: Side, player_state: PlayerState) -> "GameState":
        if side is Side.FRIENDLY:
            return replace(self, player=player_state)
        return replace(self, opponent=player_state)


@dataclass(frozen=True)
class AttackContext:
    """One incoming attack, as seen by the interception responder"""
    attacker: Unit
    target: Union[Unit, SectionRef]
    lane: int

    @property
    def targets_section(self) -> bool:
        return isinstance(self.target, SectionRef)
