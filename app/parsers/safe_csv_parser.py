"""
app/parsers/safe_csv_parser.py

Size-limited CSV tokenizer with spreadsheet formula-injection defense.

Every cell is trimmed, truncated and, when it would be evaluated as a formula
by spreadsheet software, prefixed with a single quote. Apart from the
structural limits below, any input produces a document: malformed cells are
just strings.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import Iterator

from app.config import CSVImportSettings, get_csv_import_settings
from app.domain.csv_import import RawCsvDocument
from app.domain.errors import (
    EmptyFileError,
    TooManyColumnsError,
    UnsupportedEncodingError,
)

logger = logging.getLogger(__name__)

FORMULA_PREFIXES: tuple[str, ...] = ("=", "+", "-", "@")
CONTROL_PREFIXES: tuple[str, ...] = ("\t", "\r", "\n")


@dataclass(frozen=True)
class ParseLimits:
    max_columns: int = 50
    max_cell_length: int = 1000
    max_rows: int = 1000
    preview_rows: int = 5

    @classmethod
    def from_settings(cls, settings: CSVImportSettings) -> "ParseLimits":
        return cls(
            max_columns=settings.max_columns,
            max_cell_length=settings.max_cell_length,
            max_rows=settings.max_rows,
            preview_rows=settings.preview_rows,
        )


def sanitize_cell(value: str, max_length: int) -> str:
    """
    Trim, cap and neutralize one cell value.

    >>> sanitize_cell("=SUM(A1:A9)", 1000)
    "'=SUM(A1:A9)"
    """

    if not value:
        return ""
    sanitized = value.strip()[:max_length]
    if not sanitized:
        return ""
    if value.startswith(CONTROL_PREFIXES) or sanitized.startswith(FORMULA_PREFIXES):
        return "'" + sanitized
    return sanitized


def decode_csv_bytes(data: bytes) -> str:
    """
    Decode uploaded bytes as UTF-8, tolerating a byte-order mark.
    """

    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise UnsupportedEncodingError() from exc


class SafeCsvParser:
    """
    Parses CSV text into a sanitized RawCsvDocument.
    """

    def __init__(self, limits: ParseLimits | None = None) -> None:
        self._limits = limits or ParseLimits()

    @property
    def limits(self) -> ParseLimits:
        return self._limits

    def parse(self, text: str, *, preview: bool = False) -> RawCsvDocument:
        """
        Parse headers and up to the row cap of data rows.

        In preview mode only the first ``preview_rows`` data rows are kept.
        ``total_row_count`` always reflects every non-blank data row.
        """

        limits = self._limits
        row_cap = limits.preview_rows if preview else limits.max_rows
        lines = self._iter_non_blank_rows(text)

        raw_headers = next(lines, None)
        if raw_headers is None:
            raise EmptyFileError()
        if len(raw_headers) > limits.max_columns:
            raise TooManyColumnsError(len(raw_headers), limits.max_columns)

        headers = tuple(sanitize_cell(cell, limits.max_cell_length) for cell in raw_headers)

        rows: list[tuple[str, ...]] = []
        total = 0
        for raw_row in lines:
            total += 1
            if len(rows) < row_cap:
                rows.append(
                    tuple(
                        sanitize_cell(cell, limits.max_cell_length)
                        for cell in raw_row[: limits.max_columns]
                    )
                )

        if total > len(rows):
            logger.debug(
                "CSV parse capped rows parsed=%d total=%d preview=%s",
                len(rows),
                total,
                preview,
            )

        return RawCsvDocument(headers=headers, rows=tuple(rows), total_row_count=total)

    def preview(self, text: str) -> RawCsvDocument:
        return self.parse(text, preview=True)

    @classmethod
    def _iter_non_blank_rows(cls, text: str) -> Iterator[list[str]]:
        for row in cls._iter_records(text):
            if len(row) <= 1 and not "".join(row).strip():
                continue
            yield row

    @staticmethod
    def _iter_records(text: str) -> Iterator[list[str]]:
        """
        Tokenize ``text`` with the RFC 4180 reader.

        A quote opened in the last record and never closed would swallow every
        following line into one cell. That record is re-read one physical line
        per row with quotes taken literally.
        """

        # No cell can be longer than the text itself.
        csv.field_size_limit(max(csv.field_size_limit(), len(text) + 1))
        text = text.replace("\x00", "")

        reader = csv.reader(io.StringIO(text, newline=""), skipinitialspace=True)
        pending: list[str] | None = None
        pending_start = 0
        start = 0
        for row in reader:
            if pending is not None:
                yield pending
            pending, pending_start = row, start
            start = reader.line_num

        if pending is None:
            return
        if start - pending_start <= 1:
            yield pending
            return

        physical_lines = io.StringIO(text, newline="").readlines()[pending_start:]
        raw_record = "".join(physical_lines)
        if _parses_strictly(raw_record) or not _parses_strictly(raw_record + '"'):
            yield pending
            return

        logger.warning(
            "CSV quoted field never closed line=%d spanned_lines=%d",
            pending_start + 1,
            len(physical_lines),
        )
        yield from csv.reader(physical_lines, quoting=csv.QUOTE_NONE, skipinitialspace=True)


def _parses_strictly(text: str) -> bool:
    try:
        for _ in csv.reader(io.StringIO(text, newline=""), strict=True, skipinitialspace=True):
            pass
    except csv.Error:
        return False
    return True


def get_safe_csv_parser() -> SafeCsvParser:
    """
    Build a parser configured from environment settings.
    """

    return SafeCsvParser(ParseLimits.from_settings(get_csv_import_settings()))
