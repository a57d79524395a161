"""
Templates - Template text and the repositories that supply it.
"""

from genowa.templates.models import (
    Template,
    split_lines,
    split_terminator,
    template_directory,
)
from genowa.templates.repository import (
    TemplateRepository,
    InMemoryTemplateRepository,
    FileTemplateRepository,
)

__all__ = [
    "Template",
    "split_lines",
    "split_terminator",
    "template_directory",
    "TemplateRepository",
    "InMemoryTemplateRepository",
    "FileTemplateRepository",
]
