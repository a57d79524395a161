"""
Vocabulary enums - the shared language of the generator.

Levels, data types, process types and driver states referenced by the
metadata models, the triggers and the generation driver.
"""

from enum import Enum


# =============================================================================
# METADATA
# =============================================================================

class LevelType(str, Enum):
    """
    Table level in the insurance-line table assignment hierarchy.

    The value is the single-character code stored with control mappings.
    """
    PREMIUM = "$"
    FORM = "F"
    PRIMARY = "P"
    COVERAGE = "C"
    SUPPORT = "S"

    @classmethod
    def parse(cls, text: str) -> "LevelType":
        """Accept either the stored code (`P`) or the member name (`primary`)."""
        candidate = text.strip()
        for level in cls:
            if candidate == level.value or candidate.upper() == level.name:
                return level
        raise ValueError(f"Unknown level: {text!r}")


class DataType(str, Enum):
    """Single-character field data type codes from the field definitions."""
    CHARACTER = "C"
    SMALLINT = "S"
    INTEGER = "I"
    DECIMAL = "D"
    FLOAT = "F"
    TIMESTAMP = "T"
    DATE = "A"
    BINARY = "B"


# Element codes run 01..27 for every level.
MIN_ELEMENT_CODE = 1
MAX_ELEMENT_CODE = 27


# =============================================================================
# GENERATION
# =============================================================================

class ProcessType(str, Enum):
    """Kind of program a target variant produces."""
    RATING = "RATING"
    EDITS = "EDITS"
    UNDERWRITING = "UNDERWRITING"
    KEYSET = "KEYSET"
    IO = "IO"
    ISSUANCE = "ISSUANCE"
    RENEWAL = "RENEWAL"


class DriverState(str, Enum):
    """
    States of a single generation run.

    LOADING -> SCANNING -> RESOLVING -> EMITTING -> DONE, with FAILED
    reachable from any state.
    """
    LOADING = "LOADING"
    SCANNING = "SCANNING"
    RESOLVING = "RESOLVING"
    EMITTING = "EMITTING"
    DONE = "DONE"
    FAILED = "FAILED"


# Transitions a run may take; anything else is a driver bug.
LEGAL_TRANSITIONS: dict[DriverState, set[DriverState]] = {
    DriverState.LOADING: {DriverState.SCANNING, DriverState.DONE, DriverState.FAILED},
    DriverState.SCANNING: {DriverState.RESOLVING, DriverState.EMITTING, DriverState.FAILED},
    DriverState.RESOLVING: {DriverState.EMITTING, DriverState.FAILED},
    DriverState.EMITTING: {DriverState.SCANNING, DriverState.DONE, DriverState.FAILED},
    DriverState.DONE: set(),
    DriverState.FAILED: set(),
}
