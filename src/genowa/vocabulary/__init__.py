"""
Vocabulary - Enumerated types shared across the generator.
"""

from genowa.vocabulary.enums import (
    # Metadata
    LevelType,
    DataType,
    MIN_ELEMENT_CODE,
    MAX_ELEMENT_CODE,
    # Generation
    ProcessType,
    DriverState,
    LEGAL_TRANSITIONS,
)

__all__ = [
    "LevelType",
    "DataType",
    "MIN_ELEMENT_CODE",
    "MAX_ELEMENT_CODE",
    "ProcessType",
    "DriverState",
    "LEGAL_TRANSITIONS",
]

from genowa.vocabulary.keywords import (
    CONDITIONAL_KEYWORDS,
    is_valid_keyword,
)

__all__ += [
    "CONDITIONAL_KEYWORDS",
    "is_valid_keyword",
]
