"""
Metadata - Read-only table, field and control-mapping lookups.

Persistence of metadata belongs to the authoring tools; the generator
consumes it through the MetadataProvider protocol.
"""

from pathlib import Path

from genowa.metadata.models import (
    TableDefinition,
    FieldDefinition,
    ControlMapping,
    normalize_element_code,
)
from genowa.metadata.provider import (
    MetadataProvider,
    InMemoryMetadataProvider,
)
from genowa.metadata.sqlite import (
    SCHEMA_SQL,
    SQLiteMetadataProvider,
)


def load_metadata(path: str | Path) -> MetadataProvider:
    """Open a metadata source by extension: .json fixture or SQLite export."""
    path = Path(path)
    if path.suffix.lower() == ".json":
        return InMemoryMetadataProvider.from_json_file(path)
    return SQLiteMetadataProvider(path)


__all__ = [
    # Models
    "TableDefinition",
    "FieldDefinition",
    "ControlMapping",
    "normalize_element_code",
    # Providers
    "MetadataProvider",
    "InMemoryMetadataProvider",
    "SQLiteMetadataProvider",
    "SCHEMA_SQL",
    "load_metadata",
]
