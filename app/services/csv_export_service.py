"""
app/services/csv_export_service.py

Serializes stored records back to CSV.

Every cell, header included, is wrapped in double quotes with embedded quotes
doubled. Owner and primary-key columns are excluded so exported files carry
no internal identifiers and can be fed straight back into the importer.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Iterable, Mapping, Sequence

from app.domain.errors import NoDataError
from app.domain.import_schema import SchemaKey
from app.logging_utils import log_event
from app.parsers.safe_csv_parser import CONTROL_PREFIXES, FORMULA_PREFIXES
from app.repositories.record_store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDED_COLUMNS: tuple[str, ...] = ("id", "owner_id")


def _format_cell(value: Any) -> str:
    """Render one value as text; None becomes an empty cell."""
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _neutralize(text: str) -> str:
    if text.startswith(FORMULA_PREFIXES) or text.startswith(CONTROL_PREFIXES):
        return "'" + text
    return text


def export_filename(schema_key: SchemaKey, today: date | None = None) -> str:
    """Download name for one export, e.g. ``tasks_export_2026-10-19.csv``."""
    day = today or date.today()
    return f"{schema_key.value}_export_{day.isoformat()}.csv"


class CsvExporter:
    """
    Converts record dictionaries into quoted CSV text.
    """

    def export_to_csv(
        self,
        records: Sequence[Mapping[str, Any]],
        excluded_columns: Iterable[str] = DEFAULT_EXCLUDED_COLUMNS,
        *,
        neutralize_formulas: bool = False,
    ) -> str:
        """
        Return CSV text for ``records``.

        Columns are the keys of the first record minus ``excluded_columns``.
        Raises NoDataError when ``records`` is empty.
        """

        if not records:
            raise NoDataError()

        excluded = set(excluded_columns)
        columns = [key for key in records[0] if key not in excluded]

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(columns)
        for record in records:
            cells = [_format_cell(record.get(column)) for column in columns]
            if neutralize_formulas:
                cells = [_neutralize(cell) for cell in cells]
            writer.writerow(cells)
        return buffer.getvalue()

    async def export_schema(
        self,
        *,
        store: RecordStore,
        schema_key: SchemaKey,
        owner_id: str,
        excluded_columns: Iterable[str] = DEFAULT_EXCLUDED_COLUMNS,
        neutralize_formulas: bool = False,
    ) -> str:
        """
        Load every record of ``schema_key`` owned by ``owner_id`` and export it.
        """

        records = await store.list_all(schema_key, owner_id)
        csv_text = self.export_to_csv(
            records,
            excluded_columns,
            neutralize_formulas=neutralize_formulas,
        )
        log_event(
            logger,
            logging.INFO,
            "csv_export_completed",
            schema=schema_key.value,
            rows=len(records),
        )
        return csv_text


@lru_cache(maxsize=1)
def get_csv_exporter() -> CsvExporter:
    return CsvExporter()
