"""
COBOL Triggers - Keywords for COBOL rating programs.

Line triggers lay their output out in fixed COBOL columns: Area A starts
at column 8, Area B at column 12, and program text ends at column 72.
Statements that do not fit are continued on the next line, four columns
further in. Text that cannot be laid out within column 72 fails the
trigger; generated COBOL is never cut short.
"""

from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Sequence

from genowa.errors import MissingMapping, TriggerExecutionError
from genowa.metadata import FieldDefinition
from genowa.naming import cobol_picture, field_cobol_name, to_cobol_name
from genowa.triggers.base import LineTrigger, TokenTrigger

if TYPE_CHECKING:
    from genowa.generator.context import GenerationContext
    from genowa.triggers.registry import TriggerRegistry


AREA_A = 8
AREA_B = 12
LINE_END = 72
CONTINUATION_INDENT = 4
HOST_PREFIX = "H-"


# =============================================================================
# Line layout
# =============================================================================

def cobol_line(content: str, start_column: int = AREA_B) -> str:
    """
    Place content at a 1-based start column.

    Raises:
        TriggerExecutionError: the content would pass column 72
    """
    if start_column - 1 + len(content) > LINE_END:
        raise TriggerExecutionError(
            f"COBOL text passes column {LINE_END} when started in column {start_column}: {content!r}"
        )
    return " " * (start_column - 1) + content


def area_a(content: str) -> str:
    return cobol_line(content, AREA_A)


def area_b(content: str) -> str:
    return cobol_line(content, AREA_B)


def cobol_comment(text: str) -> str:
    """Comment line: indicator `*` in column 7."""
    return "      *" + text


def wrap_statement(text: str, start_column: int = AREA_B) -> list[str]:
    """
    Break a statement at blanks so no line passes column 72.

    A statement that fits is kept as written. A single word that does not
    fit on a continuation line is an error.
    """
    if start_column - 1 + len(text) <= LINE_END:
        return [cobol_line(text, start_column)]
    lines: list[str] = []
    column = start_column
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if current and column - 1 + len(candidate) > LINE_END:
            lines.append(cobol_line(current, column))
            column = start_column + CONTINUATION_INDENT
            current = word
        else:
            current = candidate
    if current:
        lines.append(cobol_line(current, column))
    return lines


def host_variable(name: str) -> str:
    return HOST_PREFIX + to_cobol_name(name)


def field_host_variable(fld: FieldDefinition) -> str:
    return HOST_PREFIX + field_cobol_name(fld)


# =============================================================================
# Token triggers
# =============================================================================

class ProgramIdTrigger(TokenTrigger):
    """&PGM| - program id: the output file name without extension, uppercased."""
    keyword = "PGM"

    def replace(self, context: "GenerationContext", params: Sequence[str]) -> str:
        self.expect_params(params, 0)
        return PurePosixPath(context.gen_object.resolved_file_name()).stem.upper()


class LinkagePrefixTrigger(TokenTrigger):
    """&PREFIX| / &LINKPR| - linkage-section prefix of the run."""

    def __init__(self, keyword: str = "PREFIX"):
        self.keyword = keyword.upper()

    def replace(self, context: "GenerationContext", params: Sequence[str]) -> str:
        self.expect_params(params, 0)
        return context.linkage_prefix


class HostVariableTrigger(TokenTrigger):
    """
    &HOST_|column| - host variable reference, e.g. `:H-POLICY-NBR`.

    Without a column only the `:H-` prefix is emitted.
    """
    keyword = "HOST_"

    def replace(self, context: "GenerationContext", params: Sequence[str]) -> str:
        self.expect_params(params, 0, 1)
        if not params:
            return ":" + HOST_PREFIX
        return ":" + host_variable(self.non_empty_param(params, 0, "column"))


# =============================================================================
# Line triggers
# =============================================================================

class TableLineTrigger(LineTrigger):
    """Line trigger over the fields of `&KW|table|` or of the current table."""

    def target_fields(self, context: "GenerationContext", params: Sequence[str]) -> list[FieldDefinition]:
        self.expect_params(params, 0, 1)
        return context.fields(params[0] if params else None)


class WorkingStorageTrigger(TableLineTrigger):
    """&WSVARS| - `05` host-variable entries with PIC clauses."""
    keyword = "WSVARS"

    def emit(self, context: "GenerationContext", params: Sequence[str]) -> None:
        for fld in self.target_fields(context, params):
            picture = cobol_picture(fld)
            clause = picture if picture.startswith("COMP") else f"PIC {picture}"
            context.emit_lines(wrap_statement(f"05  {field_host_variable(fld)} {clause}."))


class SqlColumnsTrigger(TableLineTrigger):
    """&SQLC| - comma-separated column list, one column per line."""
    keyword = "SQLC"

    def emit(self, context: "GenerationContext", params: Sequence[str]) -> None:
        fields = self.target_fields(context, params)
        for index, fld in enumerate(fields):
            separator = "," if index < len(fields) - 1 else ""
            context.emit(area_b(f"    {fld.name}{separator}"))


class SqlHostValuesTrigger(TableLineTrigger):
    """&SQLI| - host-variable value list matching &SQLC|."""
    keyword = "SQLI"

    def emit(self, context: "GenerationContext", params: Sequence[str]) -> None:
        fields = self.target_fields(context, params)
        for index, fld in enumerate(fields):
            separator = "," if index < len(fields) - 1 else ""
            context.emit(area_b(f"    :{field_host_variable(fld)}{separator}"))


class KeyTrigger(TableLineTrigger):
    """Line trigger over key fields; a table without keys is a metadata miss."""

    def target_keys(self, context: "GenerationContext", params: Sequence[str]) -> list[FieldDefinition]:
        self.expect_params(params, 0, 1)
        table = context.table(params[0] if params else None)
        keys = context.key_fields(table)
        if not keys:
            raise MissingMapping("key fields", {"table": table.name})
        return keys


class FullKeyTrigger(KeyTrigger):
    """&FULLKEY| - WHERE predicate over every key column."""
    keyword = "FULLKEY"

    def emit(self, context: "GenerationContext", params: Sequence[str]) -> None:
        for index, fld in enumerate(self.target_keys(context, params)):
            verb = "WHERE" if index == 0 else "  AND"
            context.emit_lines(wrap_statement(f"{verb} {fld.name} = :{field_host_variable(fld)}"))


class SetKeyTrigger(KeyTrigger):
    """&SETKEY| - MOVE key fields from the linkage area into host variables."""
    keyword = "SETKEY"

    def emit(self, context: "GenerationContext", params: Sequence[str]) -> None:
        prefix = f"{context.linkage_prefix}-" if context.linkage_prefix else ""
        for fld in self.target_keys(context, params):
            name = field_cobol_name(fld)
            context.emit_lines(wrap_statement(f"MOVE {prefix}{name} TO {HOST_PREFIX}{name}"))


class MoveHostVariablesTrigger(TableLineTrigger):
    """&MOVEHV2| - MOVE every field of the table record to its host variable."""
    keyword = "MOVEHV2"

    def emit(self, context: "GenerationContext", params: Sequence[str]) -> None:
        fields = self.target_fields(context, params)
        record = to_cobol_name(context.table(params[0] if params else None).name)
        for fld in fields:
            name = field_cobol_name(fld)
            context.emit_lines(wrap_statement(f"MOVE {name} OF {record} TO {HOST_PREFIX}{name}"))


def register_cobol(registry: "TriggerRegistry") -> None:
    """Register the COBOL keywords."""
    registry.register_singleton("PGM", ProgramIdTrigger())
    registry.register_singleton("PREFIX", LinkagePrefixTrigger("PREFIX"))
    registry.register_singleton("LINKPR", LinkagePrefixTrigger("LINKPR"))
    registry.register_singleton("HOST_", HostVariableTrigger())
    registry.register_singleton("WSVARS", WorkingStorageTrigger())
    registry.register_singleton("SQLC", SqlColumnsTrigger())
    registry.register_singleton("SQLI", SqlHostValuesTrigger())
    registry.register_singleton("FULLKEY", FullKeyTrigger())
    registry.register_singleton("SETKEY", SetKeyTrigger())
    registry.register_singleton("MOVEHV2", MoveHostVariablesTrigger())
