"""
Strategy Configuration

Tunable strategy knobs (selection thresholds, deployment bonus ranges,
pacing, card cost weight) read from a JSON file. Every knob has a built-in
default in constants.py; a missing or unreadable file, or a missing key,
falls back to it.

The file is config.STRATEGY_CONFIG (set from the STRATEGY_CONFIG environment
variable) when given, otherwise the packaged configs/baseline.json.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .config import config

logger = logging.getLogger(__name__)

BASELINE_PATH = Path(__file__).parent / "configs" / "baseline.json"


class StrategyConfig:
    """
    Strategy knobs from one JSON file.

    Cached as a module-level singleton via get_config().
    """

    def __init__(self, config_path: Optional[str] = None):
        path = config_path or config.STRATEGY_CONFIG
        self.path = Path(path) if path else BASELINE_PATH
        self._knobs: Dict[str, Any] = {}
        self._loaded = False
        self._load()

    def _load(self):
        self._knobs = {}
        self._loaded = False
        if not self.path.exists():
            logger.warning(f"Strategy config not found: {self.path}, using built-in defaults")
            return
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                self._knobs = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in strategy config {self.path}: {e}")
            return
        except OSError as e:
            logger.error(f"Error reading strategy config {self.path}: {e}")
            return

        self._loaded = True
        logger.info(f"Loaded strategy '{self.name}' from {self.path}")
        for section, knobs in self._knobs.items():
            if isinstance(knobs, dict):
                logger.debug(f"  [{section}] {knobs}")

    def reload(self):
        self._load()

    @property
    def name(self) -> str:
        return self._knobs.get('name', 'default')

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a knob.

        Args:
            section: Config section ('selection', 'deployment', 'pacing')
            key: Knob within the section (e.g. 'action_pool_range')
            default: Built-in value used when the knob is not set
        """
        return self._knobs.get(section, {}).get(key, default)

    def get_weight(self, evaluator: str, key: str, default: float = 0.0) -> float:
        """An evaluator weight from the evaluator_weights section, as a float"""
        weights = self._knobs.get('evaluator_weights', {}).get(evaluator, {})
        return float(weights.get(key, default))


_config: Optional[StrategyConfig] = None


def get_config() -> StrategyConfig:
    """The process-wide StrategyConfig, loaded on first use"""
    global _config
    if _config is None:
        _config = StrategyConfig()
    return _config


def set_config_path(path: str):
    """Switch to another strategy file (tests, offline tuning runs)"""
    global _config
    _config = StrategyConfig(path)


def reload_config():
    """Re-read the current strategy file"""
    if _config is not None:
        _config.reload()
