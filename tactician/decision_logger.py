"""
Decision Trace Logger

Writes every decision cycle (all candidates, their scores, the chosen one and
the full reasoning trail) to a dedicated log file for replay and tuning.
Decisions never depend on this; it is an audit trail only.

Log files are rotated per game by the caller.
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from .config import config

# Create dedicated decision logger
decision_logger = logging.getLogger("decision_trace")
decision_logger.setLevel(logging.INFO)
decision_logger.propagate = False  # Don't propagate to root logger

LOG_DIR = Path(config.LOG_DIR)
DECISION_LOG_PATH = LOG_DIR / config.DECISION_LOG_NAME

# File handler for decision log
_file_handler: Optional[logging.FileHandler] = None


def _ensure_handler():
    """Lazily initialize the file handler."""
    global _file_handler
    if _file_handler is None:
        DECISION_LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
        _file_handler = logging.FileHandler(str(DECISION_LOG_PATH))
        _file_handler.setFormatter(logging.Formatter('%(message)s'))  # Raw format
        decision_logger.addHandler(_file_handler)


def _close_handler():
    global _file_handler
    if _file_handler is not None:
        _file_handler.flush()
        _file_handler.close()
        decision_logger.removeHandler(_file_handler)
        _file_handler = None


def set_log_dir(log_dir):
    """Point the decision log at another directory (closes the current file)."""
    global LOG_DIR, DECISION_LOG_PATH
    _close_handler()
    LOG_DIR = Path(log_dir)
    DECISION_LOG_PATH = LOG_DIR / config.DECISION_LOG_NAME


def log_decision(kind: str, turn: int, candidates: Iterable, outcome: str):
    """
    Log one decision cycle.

    Args:
        kind: 'deployment', 'action' or 'interception'
        turn: Current turn number
        candidates: Scored candidates (anything with label, score, chosen, reasoning)
        outcome: One-line summary of the result
    """
    _ensure_handler()

    timestamp = datetime.now().isoformat()
    candidates = list(candidates)

    entry_lines = [
        f"=== DECISION {kind.upper()} @ {timestamp} ===",
        f"Turn: {turn}, Candidates: {len(candidates)}",
        f"Outcome: {outcome}",
        "",
    ]

    for candidate in sorted(candidates, key=lambda c: c.score, reverse=True):
        marker = "*" if candidate.chosen else " "
        entry_lines.append(f"{marker} {candidate.score:8.1f}  {candidate.label}")
        for reason in candidate.reasoning:
            entry_lines.append(f"              - {reason}")

    entry_lines.append("=" * 50)
    entry_lines.append("")  # Blank line between entries

    decision_logger.info('\n'.join(entry_lines))


def rotate_decision_log(label: str = None):
    """
    Rotate the decision log file after a game ends.

    Args:
        label: Free-form tag for the archived filename (opponent, result...)
    """
    global _file_handler

    try:
        if _file_handler is None:
            return  # No log to rotate

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        label_str = label.replace(' ', '_') if label else "game"
        new_path = LOG_DIR / f"{timestamp}_{label_str}_decisions.log"

        _close_handler()

        # Rename if file exists and has content
        if DECISION_LOG_PATH.exists() and DECISION_LOG_PATH.stat().st_size > 0:
            shutil.move(str(DECISION_LOG_PATH), str(new_path))

        _ensure_handler()

    except OSError as e:
        # Use standard logging for errors (decision_logger might be broken)
        logging.getLogger(__name__).error(f"Error rotating decision log: {e}")


def flush():
    """Flush the decision log."""
    if _file_handler:
        _file_handler.flush()
