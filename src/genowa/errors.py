"""
Errors - Failure taxonomy for generation runs.

Every error is fatal to the run that raised it. Location fields are filled
in as the error travels up through the driver, so the message can point a
template author at the offending marker.
"""

from typing import Any


class GenerationError(Exception):
    """
    Base class for all generation failures.

    Carries the template position (when known) and renders it as
    `template:line:column [KEYWORD]: message`.
    """

    def __init__(
        self,
        message: str,
        *,
        template_name: str | None = None,
        line_number: int | None = None,
        column: int | None = None,
        keyword: str | None = None,
    ):
        self.message = message
        self.template_name = template_name
        self.line_number = line_number
        self.column = column
        self.keyword = keyword
        super().__init__(message)

    def locate(
        self,
        template_name: str | None = None,
        line_number: int | None = None,
        keyword: str | None = None,
        column: int | None = None,
    ) -> "GenerationError":
        """Fill in location fields that are still unknown. Returns self."""
        if self.template_name is None:
            self.template_name = template_name
        if self.line_number is None:
            self.line_number = line_number
        if self.column is None:
            self.column = column
        if self.keyword is None:
            self.keyword = keyword
        return self

    @property
    def location(self) -> str:
        parts = [self.template_name or "<template>"]
        if self.line_number is not None:
            parts.append(str(self.line_number))
            if self.column is not None:
                parts.append(str(self.column))
        return ":".join(parts)

    def __str__(self) -> str:
        keyword = f" [{self.keyword}]" if self.keyword else ""
        return f"{self.location}{keyword}: {self.message}"


class ParseError(GenerationError):
    """Malformed marker: empty keyword or missing closing delimiter."""
    pass


class UnknownTrigger(GenerationError):
    """No trigger is registered for a marker's keyword."""

    def __init__(self, keyword: str, **kwargs: Any):
        super().__init__(f"No trigger registered for keyword '{keyword}'", keyword=keyword, **kwargs)


class TemplateNotFound(GenerationError):
    """The template repository has no template under the requested name."""

    def __init__(self, name: str, **kwargs: Any):
        self.name = name
        super().__init__(f"Template not found: {name}", **kwargs)


class MissingMapping(GenerationError):
    """
    Metadata lookup miss.

    `keys` holds the lookup keys that produced the miss, e.g.
    {"ins_line": "BOP", "level": "P", "table": "POLICY_V", "element": "04"}.
    """

    def __init__(self, what: str, keys: dict[str, Any], **kwargs: Any):
        self.what = what
        self.keys = dict(keys)
        rendered = ", ".join(f"{k}={v!r}" for k, v in self.keys.items())
        super().__init__(f"No {what} for {rendered}", **kwargs)


class TriggerExecutionError(GenerationError):
    """
    A trigger could not produce its output.

    `cause` is the underlying exception when the failure originated
    somewhere else (a metadata miss, a bug in a trigger).
    """

    def __init__(self, message: str, *, cause: BaseException | None = None, **kwargs: Any):
        self.cause = cause
        super().__init__(message, **kwargs)


class InvalidParameter(TriggerExecutionError):
    """A trigger rejected one of its marker parameters."""
    pass


class IncludeCycleError(TriggerExecutionError):
    """A template includes itself, directly or through other templates."""
    pass
