"""
Naming - Identifier conversions between database, COBOL and Java names.
"""

from genowa.metadata import FieldDefinition
from genowa.vocabulary import DataType


def strip_view(name: str) -> str:
    """Drop a trailing `_VW` view suffix."""
    if name.endswith("_VW"):
        return name[:-3]
    return name


def to_camel_case(name: str, capitalize_first: bool = True) -> str:
    """POLICY_NBR -> PolicyNbr (or policyNbr)."""
    result: list[str] = []
    capitalize = capitalize_first
    for ch in name:
        if ch == "_":
            capitalize = True
            continue
        result.append(ch.upper() if capitalize else ch.lower())
        capitalize = False
    return "".join(result)


def to_object_name(table_name: str) -> str:
    """Class name for a table: view and `_V` suffixes removed, camel-cased."""
    name = strip_view(table_name.strip().upper())
    if name.endswith("_V"):
        name = name[:-2]
    return to_camel_case(name)


def to_getter(name: str) -> str:
    return "get" + to_camel_case(name)


def to_setter(name: str) -> str:
    return "set" + to_camel_case(name)


def to_cobol_name(name: str) -> str:
    """Database names use underscores, COBOL data names use hyphens."""
    return name.strip().upper().replace("_", "-")


def field_cobol_name(fld: FieldDefinition) -> str:
    return to_cobol_name(fld.cobol_name or fld.name)


def cobol_picture(fld: FieldDefinition) -> str:
    """PIC clause (without the PIC keyword) for a field."""
    length = fld.length
    if fld.data_type == DataType.CHARACTER:
        return f"X({length or 1})"
    if fld.data_type == DataType.SMALLINT:
        return f"S9({length or 4}) COMP"
    if fld.data_type == DataType.INTEGER:
        return f"S9({length or 9}) COMP"
    if fld.data_type == DataType.DECIMAL:
        integer_digits = max(length - fld.decimals, 0)
        if fld.decimals:
            integral = f"S9({integer_digits})" if integer_digits else "S"
            return f"{integral}V9({fld.decimals}) COMP-3"
        return f"S9({length or 1}) COMP-3"
    if fld.data_type == DataType.FLOAT:
        return "COMP-2"
    if fld.data_type == DataType.TIMESTAMP:
        return "X(26)"
    if fld.data_type == DataType.DATE:
        return "X(10)"
    return f"X({length or 1})"


JAVA_TYPES: dict[DataType, str] = {
    DataType.CHARACTER: "String",
    DataType.SMALLINT: "Short",
    DataType.INTEGER: "Integer",
    DataType.DECIMAL: "BigDecimal",
    DataType.FLOAT: "Double",
    DataType.TIMESTAMP: "LocalDateTime",
    DataType.DATE: "LocalDate",
    DataType.BINARY: "byte[]",
}


def java_type(fld: FieldDefinition) -> str:
    return JAVA_TYPES[fld.data_type]
