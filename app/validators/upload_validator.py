"""
app/validators/upload_validator.py

File-level checks applied before any CSV parsing.
"""

from __future__ import annotations

from app.domain.errors import FileTooLargeError, UnsupportedFileTypeError

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
    "text/plain",
}


def is_csv_like(filename: str | None, content_type: str | None) -> bool:
    """
    Return True when the filename extension or MIME type looks like CSV.
    """

    normalized_name = (filename or "").strip().lower()
    normalized_type = (content_type or "").split(";", 1)[0].strip().lower()
    return normalized_name.endswith(".csv") or normalized_type in CSV_CONTENT_TYPES


def check_upload(
    *,
    filename: str | None,
    content_type: str | None,
    size: int,
    max_bytes: int,
) -> None:
    """
    Reject non-CSV and oversized uploads.
    """

    if not is_csv_like(filename, content_type):
        raise UnsupportedFileTypeError(filename, content_type)
    if size > max_bytes:
        raise FileTooLargeError(size, max_bytes)
