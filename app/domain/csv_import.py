"""
app/domain/csv_import.py

Domain models used by the CSV import/export flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from app.domain.import_schema import SchemaKey


@dataclass(frozen=True)
class RawCsvDocument:
    """
    Sanitized header and data rows of one uploaded file.

    ``total_row_count`` is the number of non-blank data rows in the file,
    which can exceed ``len(rows)`` when the parser stopped at its row cap.
    """

    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    total_row_count: int

    @property
    def is_truncated(self) -> bool:
        return self.total_row_count > len(self.rows)


@dataclass(frozen=True)
class MappingEntry:
    """
    One CSV column and the target field it feeds, if any.
    """

    csv_column: str
    target_field: str | None = None


@dataclass(frozen=True)
class ColumnMapping:
    """
    Positional CSV column to target field mapping.

    Entry ``i`` describes header position ``i``.
    """

    entries: tuple[MappingEntry, ...]

    @property
    def mapped_entries(self) -> tuple[MappingEntry, ...]:
        return tuple(entry for entry in self.entries if entry.target_field)

    def target_fields(self) -> tuple[str, ...]:
        return tuple(entry.target_field for entry in self.mapped_entries if entry.target_field)

    def to_list(self) -> list[dict[str, str | None]]:
        return [
            {"csv_column": entry.csv_column, "target_field": entry.target_field}
            for entry in self.entries
        ]


@dataclass(frozen=True)
class FieldError:
    """
    One problem with one row. ``field`` is None for persistence errors.
    """

    field: str | None
    message: str

    def describe(self) -> str:
        if self.field is None:
            return self.message
        return f"{self.field}: {self.message}"


@dataclass(frozen=True)
class ImportedRow:
    row_index: int
    record: dict[str, Any]


@dataclass(frozen=True)
class RejectedRow:
    row_index: int
    errors: tuple[FieldError, ...]

    def describe(self) -> str:
        details = ", ".join(error.describe() for error in self.errors)
        return f"Row {self.row_index}: {details}"


RowOutcome = Union[ImportedRow, RejectedRow]


class ImportStatus:
    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"


@dataclass(frozen=True)
class ImportSummary:
    """
    End-of-run import summary.
    """

    schema_key: SchemaKey
    total_rows: int
    processed_rows: int
    imported_count: int
    failed_count: int
    sample_errors: tuple[RejectedRow, ...] = ()
    truncated: bool = False
    audit_recorded: bool = False

    @property
    def status(self) -> str:
        if self.failed_count:
            return ImportStatus.COMPLETED_WITH_ERRORS
        return ImportStatus.COMPLETED

    @property
    def error_messages(self) -> list[str]:
        return [rejected.describe() for rejected in self.sample_errors]


@dataclass(frozen=True)
class ImportAuditRecord:
    """
    Durable record of one import run.
    """

    owner_id: str
    file_name: str
    schema_key: SchemaKey
    column_mapping: list[dict[str, str | None]]
    total_rows: int
    imported_rows: int
    failed_rows: int
    status: str
    truncated: bool = False
    error_details: list[str] = field(default_factory=list)
