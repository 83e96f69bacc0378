import os
from dataclasses import dataclass
from typing import Optional


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == '':
        return None
    return int(value)


@dataclass
class Config:
    """Runtime configuration for the decision engine"""

    # Paths
    BASE_DIR: str = os.path.dirname(os.path.abspath(__file__))
    LOG_DIR: str = os.environ.get('TACTICIAN_LOG_DIR', os.path.join(os.getcwd(), 'logs'))

    # Decision trace log (one block per decision, see decision_logger.py)
    DECISION_LOG_ENABLED: bool = os.environ.get('TACTICIAN_DECISION_LOG', 'False').lower() == 'true'
    DECISION_LOG_NAME: str = 'decisions.log'

    # Strategy knobs file; None means the packaged configs/baseline.json
    STRATEGY_CONFIG: Optional[str] = os.environ.get('STRATEGY_CONFIG')

    # Seed for the decision RNG when neither the caller nor the game state supplies one
    RNG_SEED: Optional[int] = _optional_int(os.environ.get('TACTICIAN_RNG_SEED'))


config = Config()
