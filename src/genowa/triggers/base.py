"""
Trigger Infrastructure - Contract and base classes for marker handlers.

A trigger answers one keyword. Its result says how the marker's line is
emitted:

- TokenReplacement(text): the text replaces just the marker; the literal
  text around it is kept.
- LinesEmitted(count): the trigger already wrote the line's output into
  the context; the rest of the line is discarded.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Sequence, runtime_checkable

from genowa.errors import InvalidParameter

if TYPE_CHECKING:
    from genowa.generator.context import GenerationContext


@dataclass(frozen=True)
class TokenReplacement:
    """Replace the marker span with `text`."""
    text: str


@dataclass(frozen=True)
class LinesEmitted:
    """The trigger owns the whole line and has written `count` lines."""
    count: int = 0


TriggerResult = TokenReplacement | LinesEmitted


@runtime_checkable
class Trigger(Protocol):
    """
    Protocol for marker handlers.

    Handlers bound as singletons are shared by concurrent runs and must keep
    per-run state in the context, never on themselves.
    """

    @property
    def keyword(self) -> str:
        """Keyword this handler answers to (uppercase)."""
        ...

    @property
    def replaces_line(self) -> bool:
        """Whether results replace the whole line rather than the marker."""
        ...

    def process(self, context: "GenerationContext", params: Sequence[str]) -> TriggerResult:
        """Handle one marker occurrence."""
        ...


class BaseTrigger(ABC):
    """
    Abstract base class for trigger implementations.

    Provides parameter validation helpers; subclasses implement process().
    """

    keyword: str = ""

    @property
    def replaces_line(self) -> bool:
        return False

    @abstractmethod
    def process(self, context: "GenerationContext", params: Sequence[str]) -> TriggerResult:
        pass

    # -------------------------------------------------------------------------
    # Parameter helpers
    # -------------------------------------------------------------------------

    def invalid(self, message: str) -> InvalidParameter:
        return InvalidParameter(message, keyword=self.keyword)

    def expect_params(self, params: Sequence[str], minimum: int, maximum: int | None = None) -> None:
        """Raise InvalidParameter unless minimum <= len(params) <= maximum."""
        maximum = minimum if maximum is None else maximum
        if minimum <= len(params) <= maximum:
            return
        if minimum == maximum:
            expected = f"{minimum}"
        else:
            expected = f"{minimum} to {maximum}"
        raise self.invalid(f"expected {expected} parameter(s), got {len(params)}")

    def non_empty_param(self, params: Sequence[str], index: int, name: str) -> str:
        value = params[index].strip()
        if not value:
            raise self.invalid(f"{name} cannot be empty")
        return value

    def __repr__(self) -> str:
        kind = "line" if self.replaces_line else "token"
        return f"<Trigger:{self.keyword} {kind}>"


class TokenTrigger(BaseTrigger):
    """
    Trigger whose output replaces only its marker.
    """

    @abstractmethod
    def replace(self, context: "GenerationContext", params: Sequence[str]) -> str:
        pass

    def process(self, context: "GenerationContext", params: Sequence[str]) -> TriggerResult:
        return TokenReplacement(self.replace(context, params))


class LineTrigger(BaseTrigger):
    """
    Trigger that writes a variable number of lines in place of its line.
    """

    @property
    def replaces_line(self) -> bool:
        return True

    @abstractmethod
    def emit(self, context: "GenerationContext", params: Sequence[str]) -> None:
        pass

    def process(self, context: "GenerationContext", params: Sequence[str]) -> TriggerResult:
        before = context.line_count
        self.emit(context, params)
        return LinesEmitted(context.line_count - before)
