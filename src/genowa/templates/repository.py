"""
Template Repository - Where templates come from.

Names are `/`-separated paths relative to the repository root, e.g.
`cobol/cobol_rating_main.tpl`.
"""

from pathlib import Path
from typing import Protocol, runtime_checkable

from genowa.errors import GenerationError, TemplateNotFound
from genowa.templates.models import Template


@runtime_checkable
class TemplateRepository(Protocol):
    """
    Protocol for template sources.
    """

    def load(self, name: str) -> Template:
        """Load a template; raises TemplateNotFound on a miss."""
        ...

    def exists(self, name: str) -> bool:
        ...


class InMemoryTemplateRepository:
    """
    Template source for tests and embedded use.
    """

    def __init__(self, templates: dict[str, str] | None = None):
        self._templates: dict[str, Template] = {}
        for name, text in (templates or {}).items():
            self.add(name, text)

    def add(self, name: str, text: str) -> Template:
        template = Template.from_text(name, text)
        self._templates[name] = template
        return template

    def load(self, name: str) -> Template:
        template = self._templates.get(name)
        if template is None:
            raise TemplateNotFound(name)
        return template

    def exists(self, name: str) -> bool:
        return name in self._templates

    def list_templates(self) -> list[str]:
        return sorted(self._templates)


class FileTemplateRepository:
    """
    Loads templates from a directory tree.

    Files are read as text with newline translation disabled so CRLF
    templates generate CRLF output.
    """

    def __init__(self, root: str | Path, encoding: str = "utf-8"):
        self.root = Path(root)
        self.encoding = encoding

    def _path_for(self, name: str) -> Path | None:
        root = self.root.resolve()
        path = (root / name).resolve()
        # Names may not escape the template root.
        if path != root and root not in path.parents:
            return None
        return path

    def load(self, name: str) -> Template:
        path = self._path_for(name)
        if path is None or not path.is_file():
            raise TemplateNotFound(name)
        try:
            with open(path, encoding=self.encoding, newline="") as fh:
                text = fh.read()
        except UnicodeDecodeError as e:
            raise GenerationError(
                f"Template is not valid {self.encoding}: {e.reason}",
                template_name=name,
            ) from e
        except OSError as e:
            raise GenerationError(f"Cannot read template: {e}", template_name=name) from e
        return Template.from_text(name, text)

    def exists(self, name: str) -> bool:
        path = self._path_for(name)
        return path is not None and path.is_file()
