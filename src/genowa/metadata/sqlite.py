"""
SQLite Metadata Provider - Read-only access to exported generator metadata.

Opens the database in read-only mode with a fresh connection per lookup,
so concurrent runs can share one provider without coordination.
"""

import sqlite3
from pathlib import Path

from genowa.errors import MissingMapping
from genowa.metadata.models import FieldDefinition, TableDefinition, normalize_element_code
from genowa.vocabulary import DataType, LevelType


# Layout of an exported metadata database.
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS gen_tables (
    table_index_nbr INTEGER PRIMARY KEY,
    table_nm TEXT NOT NULL,
    long_alias_nm TEXT,
    level_cd TEXT,
    key_length_nbr INTEGER DEFAULT 0,
    data_length_nbr INTEGER DEFAULT 0,
    parent_nm TEXT
);
CREATE TABLE IF NOT EXISTS gen_fields (
    table_index_nbr INTEGER NOT NULL,
    key_cct_nbr INTEGER NOT NULL,
    column_nm TEXT NOT NULL,
    data_type_nm TEXT NOT NULL,
    fld_length_nbr INTEGER DEFAULT 0,
    decimals_nbr INTEGER DEFAULT 0,
    key_flag_cd TEXT,
    req_flag_cd TEXT,
    cobol_nm TEXT,
    long_alias_nm TEXT,
    PRIMARY KEY (table_index_nbr, key_cct_nbr)
);
CREATE TABLE IF NOT EXISTS gen_ctl_map (
    ins_line_cd TEXT NOT NULL,
    level_cd TEXT NOT NULL,
    table_nm TEXT NOT NULL,
    element_cd TEXT NOT NULL,
    column_nm TEXT NOT NULL,
    PRIMARY KEY (ins_line_cd, level_cd, table_nm, element_cd)
);
"""


class SQLiteMetadataProvider:
    """
    MetadataProvider over a SQLite export of gen_tables / gen_fields /
    gen_ctl_map.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        if not self.db_path.exists():
            raise FileNotFoundError(f"Metadata database not found: {self.db_path}")

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(f"file:{self.db_path}?mode=ro", uri=True)

    def lookup_table(self, name: str) -> TableDefinition:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT table_index_nbr, table_nm, long_alias_nm, level_cd,
                       key_length_nbr, data_length_nbr, parent_nm
                FROM gen_tables WHERE UPPER(table_nm) = UPPER(?)
                """,
                (name.strip(),),
            ).fetchone()
        if row is None:
            raise MissingMapping("table definition", {"table": name})
        return TableDefinition(
            table_id=row[0],
            name=row[1],
            description=row[2] or "",
            level=LevelType(row[3]) if row[3] else None,
            key_length=row[4] or 0,
            data_length=row[5] or 0,
            parent_name=row[6],
        )

    def lookup_fields_for_table(self, table_id: int) -> list[FieldDefinition]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT key_cct_nbr, column_nm, data_type_nm, fld_length_nbr,
                       decimals_nbr, key_flag_cd, req_flag_cd, cobol_nm, long_alias_nm
                FROM gen_fields WHERE table_index_nbr = ?
                ORDER BY key_cct_nbr
                """,
                (table_id,),
            ).fetchall()
        if not rows:
            raise MissingMapping("field definitions", {"table_id": table_id})
        return [
            FieldDefinition(
                table_id=table_id,
                sequence=row[0],
                name=row[1],
                data_type=DataType(row[2]),
                length=row[3] or 0,
                decimals=row[4] or 0,
                is_key=row[5] == "Y",
                is_required=row[6] == "Y",
                cobol_name=row[7],
                long_alias=row[8],
            )
            for row in rows
        ]

    def lookup_column_mapping(
        self,
        ins_line: str,
        level: LevelType,
        table: str,
        element_code: str,
    ) -> str:
        code = normalize_element_code(element_code)
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT column_nm FROM gen_ctl_map
                WHERE UPPER(ins_line_cd) = UPPER(?) AND level_cd = ?
                  AND UPPER(table_nm) = UPPER(?) AND element_cd = ?
                """,
                (ins_line, level.value, table, code),
            ).fetchone()
        if row is None:
            raise MissingMapping(
                "column mapping",
                {"ins_line": ins_line, "level": level.value, "table": table, "element": code},
            )
        return row[0]
