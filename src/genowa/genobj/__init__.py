"""
Generation Objects - Target variants and per-request generation objects.
"""

from genowa.genobj.objects import (
    TargetVariant,
    GenerationObject,
    COBOL_RATING_DRIVER,
    JAVA_RATING_DRIVER,
    register_variant,
    get_variant,
    list_variants,
    cobol_rating_driver,
    java_rating_driver,
    create_generation_object,
)

__all__ = [
    "TargetVariant",
    "GenerationObject",
    "COBOL_RATING_DRIVER",
    "JAVA_RATING_DRIVER",
    "register_variant",
    "get_variant",
    "list_variants",
    "cobol_rating_driver",
    "java_rating_driver",
    "create_generation_object",
]
