"""
app/domain/errors.py

Exception hierarchy for the CSV import/export pipeline.

Structural errors abort the current operation before any row is touched.
Row-level validation and persistence problems are never raised through this
hierarchy; they are collected into the import summary instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence


class CSVImportError(ValueError):
    """
    Base class for user-facing import/export failures.
    """

    code = "csv_import_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


# ---------------------------------------------------------------------------
# Structural
# ---------------------------------------------------------------------------


class CSVStructureError(CSVImportError):
    """
    Fatal problem with the uploaded file itself.
    """

    code = "invalid_csv"


class EmptyFileError(CSVStructureError):
    code = "empty_file"

    def __init__(self) -> None:
        super().__init__("CSV file is empty.")


class TooManyColumnsError(CSVStructureError):
    code = "too_many_columns"

    def __init__(self, count: int, max_columns: int) -> None:
        super().__init__(
            f"Too many columns ({count}). Maximum allowed is {max_columns}."
        )
        self.count = count
        self.max_columns = max_columns

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["count"] = self.count
        payload["max_columns"] = self.max_columns
        return payload


class FileTooLargeError(CSVStructureError):
    code = "file_too_large"

    def __init__(self, size: int, max_bytes: int) -> None:
        super().__init__(
            f"File is {size} bytes. Maximum allowed size is {max_bytes} bytes."
        )
        self.size = size
        self.max_bytes = max_bytes


class UnsupportedFileTypeError(CSVStructureError):
    code = "unsupported_file_type"

    def __init__(self, filename: str | None, content_type: str | None) -> None:
        super().__init__("Only CSV files are allowed.")
        self.filename = filename
        self.content_type = content_type


class UnsupportedEncodingError(CSVStructureError):
    code = "unsupported_encoding"

    def __init__(self) -> None:
        super().__init__("CSV must be UTF-8 encoded.")


# ---------------------------------------------------------------------------
# Mapping / lookup / export
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MappingErrorDetail:
    """
    Structured mapping error detail.
    """

    code: str
    message: str
    target_field: str | None = None
    csv_columns: tuple[str, ...] = ()


class SchemaMappingError(CSVImportError):
    """
    Raised when a column mapping cannot be used for an import.
    """

    code = "mapping_conflict"

    def __init__(self, *, message: str, errors: Sequence[MappingErrorDetail]) -> None:
        super().__init__(message)
        self.errors = tuple(errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "errors": [
                {
                    "code": error.code,
                    "message": error.message,
                    "target_field": error.target_field,
                    "csv_columns": list(error.csv_columns),
                }
                for error in self.errors
            ],
        }


class UnknownSchemaError(CSVImportError):
    code = "unknown_schema"

    def __init__(self, key: str, known: Sequence[str]) -> None:
        super().__init__(
            f"Unknown import schema {key!r}. Valid: {sorted(known)}."
        )
        self.key = key


class NoDataError(CSVImportError):
    code = "no_data"

    def __init__(self) -> None:
        super().__init__("No data found to export.")


class InvalidSessionStateError(CSVImportError):
    code = "invalid_session_state"


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class RecordStoreError(RuntimeError):
    """
    Raised by a record store when one write is refused.

    The message is surfaced verbatim in the import report.
    """
