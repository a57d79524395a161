"""
Marker keyword grammar shared by the scanner and the trigger registry.
"""

MARKER_START = "&"
DELIMITER = "|"
ESCAPE = "\\"

# Single-character keywords used by the include/exclude guards.
CONDITIONAL_KEYWORDS = frozenset({"<", "!"})


def is_keyword_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == "_")


def is_valid_keyword(keyword: str) -> bool:
    """True if `keyword` could appear between `&` and `|`."""
    if keyword in CONDITIONAL_KEYWORDS:
        return True
    return bool(keyword) and all(is_keyword_char(ch) for ch in keyword)
