"""
app/domain package marker.
"""

from app.domain.csv_import import (
    ColumnMapping,
    FieldError,
    ImportAuditRecord,
    ImportedRow,
    ImportSummary,
    MappingEntry,
    RawCsvDocument,
    RejectedRow,
    RowOutcome,
)
from app.domain.import_schema import (
    FieldConstraint,
    FieldKind,
    ImportSchema,
    SchemaKey,
    SchemaRegistry,
    default_registry,
)

__all__ = [
    "ColumnMapping",
    "FieldConstraint",
    "FieldError",
    "FieldKind",
    "ImportAuditRecord",
    "ImportSchema",
    "ImportSummary",
    "ImportedRow",
    "MappingEntry",
    "RawCsvDocument",
    "RejectedRow",
    "RowOutcome",
    "SchemaKey",
    "SchemaRegistry",
    "default_registry",
]
