"""
Exception hierarchy.

Only data-integrity problems are exceptions. "Nothing worth doing" is a
normal PASS decision, never an error.
"""


class TacticianError(Exception):
    """Base class for all decision engine errors"""


class ConfigurationError(TacticianError):
    """Static game data is missing or inconsistent"""


class UnknownUnitError(ConfigurationError):
    """A unit name could not be resolved to a definition"""

    def __init__(self, unit_name: str):
        super().__init__(f"No unit definition for '{unit_name}'")
        self.unit_name = unit_name
