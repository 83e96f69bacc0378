"""
Unit Catalog

Static unit definitions keyed by unit name. The heuristics resolve class,
keywords, abilities and damage type through here; a name that does not
resolve is a data-integrity bug and raises UnknownUnitError.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

from .errors import ConfigurationError, UnknownUnitError
from .models import Ability, Affinity, DamageType, StatMod, UnitDefinition

logger = logging.getLogger(__name__)


class UnitCatalog:
    """
    Lookup table of UnitDefinitions.
    """

    def __init__(self, definitions: Iterable[UnitDefinition] = ()):
        self.definitions: Dict[str, UnitDefinition] = {}
        for definition in definitions:
            self.add(definition)

    def add(self, definition: UnitDefinition):
        if definition.name in self.definitions:
            logger.warning(f"Duplicate unit definition '{definition.name}', replacing")
        self.definitions[definition.name] = definition

    def get(self, unit_name: str) -> Optional[UnitDefinition]:
        return self.definitions.get(unit_name)

    def require(self, unit_name: str) -> UnitDefinition:
        """
        Get a definition that must exist.

        Raises:
            UnknownUnitError: if the name is not in the catalog
        """
        definition = self.definitions.get(unit_name)
        if definition is None:
            logger.error(f"Unit '{unit_name}' not found in catalog ({len(self.definitions)} definitions)")
            raise UnknownUnitError(unit_name)
        return definition

    def __contains__(self, unit_name: str) -> bool:
        return unit_name in self.definitions

    def __len__(self) -> int:
        return len(self.definitions)


def _parse_stat_mods(raw_mods) -> tuple:
    return tuple(StatMod(stat=m['stat'], value=int(m.get('value', 0)),
                         permanent=bool(m.get('permanent', False)))
                 for m in raw_mods or [])


def _parse_ability(data: dict) -> Ability:
    return Ability(
        name=data.get('name', 'Unnamed'),
        kind=data.get('kind', 'PASSIVE'),
        effect_type=data.get('effect', ''),
        value=int(data.get('value', 0) or 0),
        trigger=data.get('trigger'),
        energy_cost=int(data.get('energyCost', 0) or 0),
        affinity=Affinity(data.get('affinity', 'ENEMY')),
        location=data.get('location', 'SAME_LANE'),
        restrictions=frozenset(data.get('restrictions', [])),
        stat_mods=_parse_stat_mods(data.get('statMods')),
    )


def _parse_definition(data: dict) -> UnitDefinition:
    max_per_lane = data.get('maxPerLane')
    return UnitDefinition(
        name=data['name'],
        unit_class=int(data.get('class', 0)),
        attack=int(data.get('attack', 0)),
        speed=int(data.get('speed', 0)),
        hull=int(data.get('hull', 1)),
        shields=int(data.get('shields', 0)),
        limit=int(data.get('limit', 99)),
        max_per_lane=int(max_per_lane) if max_per_lane is not None else None,
        keywords=frozenset(data.get('keywords', [])),
        abilities=tuple(_parse_ability(a) for a in data.get('abilities', [])),
        damage_type=DamageType(data.get('damageType', 'NORMAL')),
        is_token=bool(data.get('isToken', False)),
        upgrade_slots=int(data.get('upgradeSlots', 1)),
    )


def load_catalog(path) -> UnitCatalog:
    """
    Load unit definitions from a JSON file.

    Expected shape: {"units": [{"name": ..., "class": ..., "attack": ..., ...}]}

    Raises:
        ConfigurationError: if the file is missing, unreadable, or an entry is malformed
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Unit catalog not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in unit catalog {path}: {e}") from e

    catalog = UnitCatalog()
    for entry in data.get('units', []):
        try:
            catalog.add(_parse_definition(entry))
        except (KeyError, ValueError, TypeError) as e:
            raise ConfigurationError(f"Malformed unit entry {entry.get('name', '?')}: {e}") from e

    logger.info(f"Loaded {len(catalog)} unit definitions from {path.name}")
    return catalog
