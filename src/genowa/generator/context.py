"""
Generation Context - Per-run state shared by every trigger of one pass.

The driver creates one context per run and drops it when the run ends.
Triggers read the insurance line and metadata through it, keep run
variables and exclusions in it, and line-replacing triggers write their
output lines into it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable
from uuid import UUID, uuid4

from genowa.errors import MissingMapping, TriggerExecutionError
from genowa.genobj import GenerationObject
from genowa.metadata import FieldDefinition, MetadataProvider, TableDefinition
from genowa.vocabulary import LevelType


@dataclass
class GenerationContext:
    """
    Mutable state for one generation run.

    Output lines are stored with their terminators so the joined buffer is
    exactly the generated file.
    """
    gen_object: GenerationObject
    metadata: MetadataProvider | None = None
    linkage_prefix: str = ""
    newline: str = "\n"

    # Run identity
    run_id: UUID = field(default_factory=uuid4)
    started_at: datetime = field(default_factory=datetime.now)

    # Position of the line being processed, maintained by the driver
    template_name: str | None = None
    line_number: int | None = None
    line_indent: str = ""
    template_stack: list[str] = field(default_factory=list)

    # Output accumulator
    output: list[str] = field(default_factory=list)

    # Trigger state
    variables: dict[str, str] = field(default_factory=dict)
    exclusions: set[str] = field(default_factory=set)
    current_table: TableDefinition | None = None

    # Lookups already answered during this run
    _tables: dict[str, TableDefinition] = field(default_factory=dict, repr=False)
    _fields: dict[int, list[FieldDefinition]] = field(default_factory=dict, repr=False)
    _columns: dict[tuple[LevelType, str, str], str] = field(default_factory=dict, repr=False)

    # Installed by the driver so INCLUDE can run a sub-template in this context
    includer: Callable[[str], int] | None = field(default=None, repr=False)

    @property
    def ins_line_cd(self) -> str:
        return self.gen_object.ins_line_cd

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def emit(self, text: str = "") -> None:
        """Append one output line."""
        self.output.append(text + self.newline)

    def emit_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.emit(line)

    def append_raw(self, raw: str) -> None:
        """Append text that already carries its own terminator (or none)."""
        self.output.append(raw)

    @property
    def line_count(self) -> int:
        return len(self.output)

    @property
    def lines(self) -> list[str]:
        """Output lines without terminators."""
        return [line.rstrip("\r\n") for line in self.output]

    @property
    def text(self) -> str:
        return "".join(self.output)

    # -------------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------------

    def _require_metadata(self) -> MetadataProvider:
        if self.metadata is None:
            raise MissingMapping("metadata provider", {"ins_line": self.ins_line_cd})
        return self.metadata

    def table(self, name: str | None = None) -> TableDefinition:
        """Look up a table by name, or return the current table."""
        if not name:
            if self.current_table is None:
                raise TriggerExecutionError("No current table; select one with &USETBL|name| first")
            return self.current_table
        key = name.strip().upper()
        if key not in self._tables:
            self._tables[key] = self._require_metadata().lookup_table(name)
        return self._tables[key]

    def use_table(self, name: str) -> TableDefinition:
        self.current_table = self.table(name)
        return self.current_table

    def fields(self, table: TableDefinition | str | None = None) -> list[FieldDefinition]:
        """Fields of a table in sequence order."""
        if not isinstance(table, TableDefinition):
            table = self.table(table)
        if table.table_id not in self._fields:
            self._fields[table.table_id] = self._require_metadata().lookup_fields_for_table(table.table_id)
        return list(self._fields[table.table_id])

    def key_fields(self, table: TableDefinition | str | None = None) -> list[FieldDefinition]:
        return [f for f in self.fields(table) if f.is_key]

    def column(self, level: LevelType, element_code: str, table: str | None = None) -> str:
        """Column mapped to an element code for this run's insurance line."""
        table_name = self.table(table).name
        key = (level, table_name.upper(), element_code)
        if key not in self._columns:
            self._columns[key] = self._require_metadata().lookup_column_mapping(
                self.ins_line_cd, level, table_name, element_code
            )
        return self._columns[key]

    # -------------------------------------------------------------------------
    # Scratch state
    # -------------------------------------------------------------------------

    def set_variable(self, name: str, value: str) -> None:
        self.variables[name.upper()] = value

    def get_variable(self, name: str) -> str | None:
        return self.variables.get(name.upper())

    def exclude(self, condition: str) -> None:
        self.exclusions.add(condition.upper())

    def is_excluded(self, condition: str) -> bool:
        return condition.upper() in self.exclusions

    def include(self, template_name: str) -> int:
        """Process another template into this run's output. Returns lines written."""
        if self.includer is None:
            raise TriggerExecutionError("Template includes are not available in this run")
        return self.includer(template_name)


def create_context(
    gen_object: GenerationObject,
    metadata: MetadataProvider | None = None,
    **kwargs: Any,
) -> GenerationContext:
    """Factory for generation contexts."""
    return GenerationContext(gen_object=gen_object, metadata=metadata, **kwargs)
