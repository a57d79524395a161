"""
Template Models - Immutable template text split into lines.

Lines keep their original terminators so a template without markers
reproduces its source byte-for-byte.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


def split_terminator(raw: str) -> tuple[str, str]:
    """Split a raw line into (content, line terminator)."""
    content = raw.rstrip("\r\n")
    return content, raw[len(content):]


def split_lines(text: str) -> tuple[str, ...]:
    """
    Split text into raw lines, breaking only after `\\n`.

    Form feeds and other Unicode line boundaries stay inside their line so
    line numbers match what an editor shows.
    """
    pieces = text.split("\n")
    lines = [piece + "\n" for piece in pieces[:-1]]
    if pieces[-1]:
        lines.append(pieces[-1])
    return tuple(lines)


def template_directory(name: str) -> str:
    """Directory part of a template name; "" for a top-level name."""
    head, sep, _ = name.rpartition("/")
    return head if sep else ""


class Template(BaseModel):
    """
    A named template: an ordered, immutable sequence of raw lines.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Repository-relative template name")
    lines: tuple[str, ...] = Field(default=(), description="Raw lines with terminators")

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("template name cannot be empty")
        return v

    @classmethod
    def from_text(cls, name: str, text: str) -> "Template":
        return cls(name=name, lines=split_lines(text))

    @property
    def text(self) -> str:
        return "".join(self.lines)

    @property
    def newline(self) -> str:
        """Terminator used for lines that triggers emit."""
        for raw in self.lines:
            _, terminator = split_terminator(raw)
            if terminator:
                return terminator
        return "\n"

    def __len__(self) -> int:
        return len(self.lines)
