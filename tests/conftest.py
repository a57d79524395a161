"""
Shared fixtures: a small rating metadata set, trigger registries and
template repositories.
"""

import logging

import pytest

from genowa.genobj import cobol_rating_driver, java_rating_driver
from genowa.generator import GenerationDriver, create_context
from genowa.metadata import (
    ControlMapping,
    FieldDefinition,
    InMemoryMetadataProvider,
    TableDefinition,
)
from genowa.observability import reset_metrics
from genowa.output import InMemoryOutputWriter
from genowa.templates import InMemoryTemplateRepository
from genowa.triggers import create_default_registry
from genowa.vocabulary import DataType, LevelType


POLICY_TABLE = TableDefinition(
    table_id=10,
    name="POLICY_V",
    description="Policy header",
    level=LevelType.PRIMARY,
    key_length=14,
    data_length=60,
)

RATE_TABLE = TableDefinition(
    table_id=20,
    name="RATE_FACTOR_VW",
    description="Rate factors",
    level=LevelType.PREMIUM,
)

EMPTY_TABLE = TableDefinition(table_id=30, name="NOTES_V")

POLICY_FIELDS = [
    FieldDefinition(table_id=10, sequence=1, name="POLICY_NBR", data_type=DataType.CHARACTER,
                    length=10, is_key=True, long_alias="POLICY_NUMBER"),
    FieldDefinition(table_id=10, sequence=2, name="TERM_SEQ", data_type=DataType.SMALLINT,
                    length=4, is_key=True),
    FieldDefinition(table_id=10, sequence=3, name="BASE_PREM", data_type=DataType.DECIMAL,
                    length=11, decimals=2),
]

RATE_FIELDS = [
    FieldDefinition(table_id=20, sequence=1, name="FACTOR_CD", length=3),
    FieldDefinition(table_id=20, sequence=2, name="FACTOR_AMT", data_type=DataType.FLOAT),
]

MAPPINGS = [
    ControlMapping(ins_line="BOP", level=LevelType.PRIMARY, table_name="POLICY_V",
                   element_code="4", column_name="BASE_PREM"),
    ControlMapping(ins_line="CPP", level=LevelType.PRIMARY, table_name="POLICY_V",
                   element_code="04", column_name="TERM_SEQ"),
]


@pytest.fixture(autouse=True)
def _fresh_metrics():
    """Metrics are process-global; start every test from zero."""
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture(autouse=True)
def _detach_log_handlers():
    """Undo configure_logging() so handlers never outlive a captured stream."""
    yield
    logger = logging.getLogger("genowa")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def metadata() -> InMemoryMetadataProvider:
    return InMemoryMetadataProvider(
        tables=[POLICY_TABLE, RATE_TABLE, EMPTY_TABLE],
        fields=POLICY_FIELDS + RATE_FIELDS,
        mappings=MAPPINGS,
    )


@pytest.fixture
def registry():
    return create_default_registry()


@pytest.fixture
def cobol_context(metadata):
    """Context for a COBOL run on insurance line BOP."""
    return create_context(cobol_rating_driver("BOP"), metadata, linkage_prefix="LK")


@pytest.fixture
def java_context(metadata):
    return create_context(java_rating_driver("BOP"), metadata)


@pytest.fixture
def writer() -> InMemoryOutputWriter:
    return InMemoryOutputWriter()


@pytest.fixture
def make_driver(registry, metadata, writer):
    """Build a driver over in-memory templates: make_driver({"cobol/x.tpl": "..."})."""

    def _make(templates: dict[str, str], **kwargs) -> GenerationDriver:
        return GenerationDriver(
            registry=kwargs.pop("registry", registry),
            templates=InMemoryTemplateRepository(templates),
            metadata=kwargs.pop("metadata", metadata),
            writer=kwargs.pop("writer", writer),
            **kwargs,
        )

    return _make
