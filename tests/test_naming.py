"""Tests for identifier conversions."""

import pytest

from genowa.metadata import FieldDefinition
from genowa.naming import (
    cobol_picture,
    field_cobol_name,
    java_type,
    strip_view,
    to_camel_case,
    to_cobol_name,
    to_getter,
    to_object_name,
    to_setter,
)
from genowa.vocabulary import DataType


def fld(data_type=DataType.CHARACTER, length=0, decimals=0, **kwargs) -> FieldDefinition:
    return FieldDefinition(table_id=1, sequence=1, name=kwargs.pop("name", "A_B"),
                           data_type=data_type, length=length, decimals=decimals, **kwargs)


def test_strip_view():
    assert strip_view("POLICY_VW") == "POLICY"
    assert strip_view("POLICY") == "POLICY"


@pytest.mark.parametrize("name, first, expected", [
    ("POLICY_NBR", True, "PolicyNbr"),
    ("POLICY_NBR", False, "policyNbr"),
    ("A__B", True, "AB"),
    ("rate", True, "Rate"),
])
def test_camel_case(name, first, expected):
    assert to_camel_case(name, capitalize_first=first) == expected


def test_object_name():
    assert to_object_name("POLICY_V") == "Policy"
    assert to_object_name("rate_factor_vw") == "RateFactor"
    assert to_object_name("COVERAGE") == "Coverage"


def test_accessors():
    assert to_getter("BASE_PREM") == "getBasePrem"
    assert to_setter("BASE_PREM") == "setBasePrem"


def test_cobol_names():
    assert to_cobol_name(" base_prem ") == "BASE-PREM"
    assert field_cobol_name(fld(name="BASE_PREM")) == "BASE-PREM"
    assert field_cobol_name(fld(name="BASE_PREM", cobol_name="BP-AMT")) == "BP-AMT"


@pytest.mark.parametrize("field, picture", [
    (fld(DataType.CHARACTER, 10), "X(10)"),
    (fld(DataType.SMALLINT), "S9(4) COMP"),
    (fld(DataType.INTEGER, 5), "S9(5) COMP"),
    (fld(DataType.DECIMAL, 11, 2), "S9(9)V9(2) COMP-3"),
    (fld(DataType.DECIMAL, 2, 2), "SV9(2) COMP-3"),
    (fld(DataType.DECIMAL, 7), "S9(7) COMP-3"),
    (fld(DataType.FLOAT), "COMP-2"),
    (fld(DataType.TIMESTAMP), "X(26)"),
    (fld(DataType.DATE), "X(10)"),
    (fld(DataType.BINARY, 16), "X(16)"),
])
def test_cobol_picture(field, picture):
    assert cobol_picture(field) == picture


def test_java_types():
    assert java_type(fld(DataType.DECIMAL)) == "BigDecimal"
    assert java_type(fld(DataType.DATE)) == "LocalDate"
    assert java_type(fld(DataType.BINARY)) == "byte[]"
