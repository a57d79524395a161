"""
Generator - Marker scanning, per-run context and the generation driver.
"""

from genowa.generator.scanner import (
    LiteralSpan,
    MarkerSpan,
    Span,
    LineScan,
    scan_line,
)
from genowa.generator.context import (
    GenerationContext,
    create_context,
)
from genowa.generator.driver import (
    GenerationRun,
    GenerationResult,
    GenerationDriver,
    create_driver,
)

__all__ = [
    # Scanner
    "LiteralSpan",
    "MarkerSpan",
    "Span",
    "LineScan",
    "scan_line",
    # Context
    "GenerationContext",
    "create_context",
    # Driver
    "GenerationRun",
    "GenerationResult",
    "GenerationDriver",
    "create_driver",
]
