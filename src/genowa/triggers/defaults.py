"""
Default Registries - Standard keyword sets per target language.
"""

from genowa.triggers.cobol import register_cobol
from genowa.triggers.common import register_common
from genowa.triggers.java import register_java
from genowa.triggers.registry import TriggerRegistry


def create_cobol_registry() -> TriggerRegistry:
    """Common keywords plus the COBOL set."""
    registry = TriggerRegistry()
    register_common(registry)
    register_cobol(registry)
    return registry


def create_java_registry() -> TriggerRegistry:
    """Common keywords plus the Java set."""
    registry = TriggerRegistry()
    register_common(registry)
    register_java(registry)
    return registry


def create_default_registry() -> TriggerRegistry:
    """
    Every standard keyword.

    The COBOL and Java sets share no keywords, so one registry can serve
    runs for both targets.
    """
    registry = TriggerRegistry()
    register_common(registry)
    register_cobol(registry)
    register_java(registry)
    return registry
