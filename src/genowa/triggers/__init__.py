"""
Triggers - Marker handlers and the registry that resolves them.
"""

from genowa.triggers.base import (
    Trigger,
    BaseTrigger,
    TokenTrigger,
    LineTrigger,
    TriggerResult,
    TokenReplacement,
    LinesEmitted,
)
from genowa.triggers.registry import (
    TriggerRegistry,
    Singleton,
    Factory,
    Binding,
    create_registry,
    normalize_keyword,
)
from genowa.triggers.common import register_common
from genowa.triggers.cobol import register_cobol
from genowa.triggers.java import register_java
from genowa.triggers.defaults import (
    create_cobol_registry,
    create_java_registry,
    create_default_registry,
)


__all__ = [
    # Contract
    "Trigger",
    "BaseTrigger",
    "TokenTrigger",
    "LineTrigger",
    "TriggerResult",
    "TokenReplacement",
    "LinesEmitted",
    # Registry
    "TriggerRegistry",
    "Singleton",
    "Factory",
    "Binding",
    "create_registry",
    "normalize_keyword",
    # Standard sets
    "register_common",
    "register_cobol",
    "register_java",
    "create_cobol_registry",
    "create_java_registry",
    "create_default_registry",
]
