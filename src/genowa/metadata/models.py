"""
Metadata Models - Read-only table, field and control-mapping definitions.

These mirror the generator's metadata tables (gen_tables, gen_fields and
the per-insurance-line control mappings). The engine never mutates them.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from genowa.vocabulary import DataType, LevelType, MIN_ELEMENT_CODE, MAX_ELEMENT_CODE


def normalize_element_code(value: str | int) -> str:
    """Render an element code as its two-digit form ("4" -> "04")."""
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ValueError(f"element code must be numeric, got {value!r}") from None
    if not MIN_ELEMENT_CODE <= number <= MAX_ELEMENT_CODE:
        raise ValueError(
            f"element code must be {MIN_ELEMENT_CODE}-{MAX_ELEMENT_CODE}, got {value!r}"
        )
    return f"{number:02d}"


class TableDefinition(BaseModel):
    """
    A database table known to the generator.

    Stored in gen_tables (table_index_nbr, table_nm, long_alias_nm, level_cd, ...).
    """
    model_config = ConfigDict(frozen=True)

    table_id: int = Field(..., description="Stable table identifier")
    name: str = Field(..., description="Physical table or view name")
    description: str = Field(default="", description="Long alias / description")
    level: LevelType | None = Field(default=None, description="Assigned table level")
    key_length: int = Field(default=0, ge=0)
    data_length: int = Field(default=0, ge=0)
    parent_name: str | None = Field(default=None, description="Parent table linkage")

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("table name cannot be empty")
        return v.strip()


class FieldDefinition(BaseModel):
    """
    A column of a table, in key/column sequence order.
    """
    model_config = ConfigDict(frozen=True)

    table_id: int
    sequence: int = Field(..., ge=0, description="Column position within the table")
    name: str = Field(..., description="Column name")
    data_type: DataType = DataType.CHARACTER
    length: int = Field(default=0, ge=0)
    decimals: int = Field(default=0, ge=0)
    is_key: bool = False
    is_required: bool = False
    cobol_name: str | None = Field(default=None, description="Explicit COBOL name override")
    long_alias: str | None = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("field name cannot be empty")
        return v.strip()


class ControlMapping(BaseModel):
    """
    Links an insurance line, level and table to a column via an element code.
    """
    model_config = ConfigDict(frozen=True)

    ins_line: str
    level: LevelType
    table_name: str
    element_code: str
    column_name: str

    @field_validator("element_code", mode="before")
    @classmethod
    def two_digit_code(cls, v: str | int) -> str:
        return normalize_element_code(v)
