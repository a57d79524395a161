"""
Metadata Provider - Read-only lookups used by triggers.

The engine only ever asks three questions of its metadata; any backend
that answers them (in memory, SQLite, a remote service) can drive a run.
"""

import json
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from genowa.errors import MissingMapping
from genowa.metadata.models import (
    ControlMapping,
    FieldDefinition,
    TableDefinition,
    normalize_element_code,
)
from genowa.vocabulary import LevelType


@runtime_checkable
class MetadataProvider(Protocol):
    """
    Protocol for metadata backends.

    Every lookup raises MissingMapping on a miss, naming the keys used.
    """

    def lookup_table(self, name: str) -> TableDefinition:
        """Find a table by name (case-insensitive)."""
        ...

    def lookup_fields_for_table(self, table_id: int) -> list[FieldDefinition]:
        """Fields of a table ordered by sequence."""
        ...

    def lookup_column_mapping(
        self,
        ins_line: str,
        level: LevelType,
        table: str,
        element_code: str,
    ) -> str:
        """Column name mapped to an element code for a line/level/table."""
        ...


class InMemoryMetadataProvider:
    """
    Dictionary-backed provider for tests, dry runs and JSON fixtures.

    Populate it up front; concurrent runs only ever read from it.
    """

    def __init__(
        self,
        tables: list[TableDefinition] | None = None,
        fields: list[FieldDefinition] | None = None,
        mappings: list[ControlMapping] | None = None,
    ):
        self._tables: dict[str, TableDefinition] = {}
        self._fields: dict[int, list[FieldDefinition]] = {}
        self._mappings: dict[tuple[str, LevelType, str, str], str] = {}
        for table in tables or []:
            self.add_table(table)
        for fld in fields or []:
            self.add_field(fld)
        for mapping in mappings or []:
            self.add_mapping(mapping)

    def add_table(self, table: TableDefinition) -> None:
        self._tables[table.name.upper()] = table

    def add_field(self, fld: FieldDefinition) -> None:
        bucket = self._fields.setdefault(fld.table_id, [])
        bucket.append(fld)
        bucket.sort(key=lambda f: f.sequence)

    def add_mapping(self, mapping: ControlMapping) -> None:
        key = (
            mapping.ins_line.upper(),
            mapping.level,
            mapping.table_name.upper(),
            mapping.element_code,
        )
        self._mappings[key] = mapping.column_name

    def lookup_table(self, name: str) -> TableDefinition:
        table = self._tables.get(name.strip().upper())
        if table is None:
            raise MissingMapping("table definition", {"table": name})
        return table

    def lookup_fields_for_table(self, table_id: int) -> list[FieldDefinition]:
        fields = self._fields.get(table_id)
        if not fields:
            raise MissingMapping("field definitions", {"table_id": table_id})
        return list(fields)

    def lookup_column_mapping(
        self,
        ins_line: str,
        level: LevelType,
        table: str,
        element_code: str,
    ) -> str:
        code = normalize_element_code(element_code)
        key = (ins_line.upper(), level, table.upper(), code)
        column = self._mappings.get(key)
        if column is None:
            raise MissingMapping(
                "column mapping",
                {"ins_line": ins_line, "level": level.value, "table": table, "element": code},
            )
        return column

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InMemoryMetadataProvider":
        """
        Build from {"tables": [...], "fields": [...], "mappings": [...]}.

        Each entry is the keyword form of the corresponding model.
        """
        return cls(
            tables=[TableDefinition(**t) for t in data.get("tables", [])],
            fields=[FieldDefinition(**f) for f in data.get("fields", [])],
            mappings=[ControlMapping(**m) for m in data.get("mappings", [])],
        )

    @classmethod
    def from_json_file(cls, path: str | Path) -> "InMemoryMetadataProvider":
        with open(path, encoding="utf-8") as fh:
            return cls.from_dict(json.load(fh))
