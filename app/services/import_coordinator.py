"""
app/services/import_coordinator.py

Orchestrates parse -> map -> validate -> persist for CSV imports.

``ImportCoordinator`` is stateless and owns the row loop. ``ImportSession``
wraps it in the per-upload state machine:

    IDLE -> FILE_SELECTED -> MAPPED -> IMPORTING -> COMPLETED
                                                 -> FAILED

Row-level validation or persistence failures never abort a run; they are
counted and reported in the ImportSummary. Only structural problems with the
file (or cancellation) move a session to FAILED. Rows written before a
cancellation stay written.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from enum import Enum
from functools import lru_cache
from typing import Sequence

from app.config import CSVImportSettings, get_csv_import_settings
from app.domain.csv_import import (
    ColumnMapping,
    FieldError,
    ImportAuditRecord,
    ImportedRow,
    ImportSummary,
    RawCsvDocument,
    RejectedRow,
    RowOutcome,
)
from app.domain.errors import CSVStructureError, InvalidSessionStateError, RecordStoreError
from app.domain.import_schema import ImportSchema
from app.logging_utils import log_event
from app.mappers.column_mapper import ColumnMapper
from app.parsers.safe_csv_parser import ParseLimits, SafeCsvParser, decode_csv_bytes
from app.repositories.record_store import RecordStore
from app.validators.mapping_validator import MappingValidator
from app.validators.row_validator import RowValidator
from app.validators.upload_validator import check_upload

logger = logging.getLogger(__name__)


def truncation_notice(document: RawCsvDocument, max_rows: int) -> str | None:
    """
    Return a user-facing notice when the file exceeds the row cap.
    """

    if document.total_row_count <= max_rows:
        return None
    return (
        f"File contains {document.total_row_count} data rows; "
        f"only the first {max_rows} will be imported."
    )


# ---------------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------------


class ImportCoordinator:
    """
    Coordinates CSV parsing, mapping, validation, and persistence.
    """

    def __init__(
        self,
        *,
        settings: CSVImportSettings | None = None,
        parser: SafeCsvParser | None = None,
        mapper: ColumnMapper | None = None,
        validator: RowValidator | None = None,
        mapping_validator: MappingValidator | None = None,
    ) -> None:
        self._settings = settings or CSVImportSettings()
        self._parser = parser or SafeCsvParser(ParseLimits.from_settings(self._settings))
        self._mapper = mapper or ColumnMapper()
        self._validator = validator or RowValidator()
        self._mapping_validator = mapping_validator or MappingValidator()

    @property
    def settings(self) -> CSVImportSettings:
        return self._settings

    @property
    def mapper(self) -> ColumnMapper:
        return self._mapper

    def load_document(
        self,
        *,
        file_name: str | None,
        content_type: str | None,
        data: bytes,
    ) -> tuple[RawCsvDocument, RawCsvDocument]:
        """
        Guard, decode and parse an upload.

        Returns the preview document and the full (row-capped) document.
        Raises a CSVStructureError subclass before any row is processed.
        """

        check_upload(
            filename=file_name,
            content_type=content_type,
            size=len(data),
            max_bytes=self._settings.max_file_bytes,
        )
        text = decode_csv_bytes(data)
        preview = self._parser.parse(text, preview=True)
        document = self._parser.parse(text)
        return preview, document

    def check_mapping(self, mapping: ColumnMapping, schema: ImportSchema) -> None:
        self._mapping_validator.validate(mapping=mapping, schema=schema)

    async def run_import(
        self,
        *,
        document: RawCsvDocument,
        schema: ImportSchema,
        mapping: ColumnMapping,
        store: RecordStore,
        owner_id: str,
        file_name: str,
    ) -> ImportSummary:
        """
        Import every row of the capped document and record an audit entry.

        Raises SchemaMappingError before touching any row when the mapping
        has a conflict.
        """

        self.check_mapping(mapping, schema)

        notice = truncation_notice(document, self._settings.max_rows)
        if notice:
            logger.warning("CSV import truncated file=%r: %s", file_name, notice)

        rows = document.rows[: self._settings.max_rows]
        outcomes = await self.process_rows(
            rows=rows,
            schema=schema,
            mapping=mapping,
            store=store,
            owner_id=owner_id,
        )

        summary = self._summarize(
            document=document,
            schema=schema,
            processed_rows=len(rows),
            outcomes=outcomes,
        )
        audit_recorded = await self._record_audit(
            summary=summary,
            mapping=mapping,
            store=store,
            owner_id=owner_id,
            file_name=file_name,
        )
        summary = replace(summary, audit_recorded=audit_recorded)

        log_event(
            logger,
            logging.INFO,
            "csv_import_completed",
            file_name=file_name,
            schema=schema.key.value,
            total_rows=summary.total_rows,
            imported=summary.imported_count,
            failed=summary.failed_count,
            truncated=summary.truncated,
        )
        return summary

    async def process_rows(
        self,
        *,
        rows: Sequence[Sequence[str]],
        schema: ImportSchema,
        mapping: ColumnMapping,
        store: RecordStore,
        owner_id: str,
    ) -> list[RowOutcome]:
        """
        Validate and persist rows one at a time, in file order.
        """

        outcomes: list[RowOutcome] = []
        for row_index, row in enumerate(rows, start=1):
            outcome = await self._process_row(
                row_index=row_index,
                row=row,
                schema=schema,
                mapping=mapping,
                store=store,
                owner_id=owner_id,
            )
            if isinstance(outcome, RejectedRow) and self._settings.log_validation_errors:
                logger.warning("CSV import row rejected %s", outcome.describe())
            outcomes.append(outcome)
        return outcomes

    async def _process_row(
        self,
        *,
        row_index: int,
        row: Sequence[str],
        schema: ImportSchema,
        mapping: ColumnMapping,
        store: RecordStore,
        owner_id: str,
    ) -> RowOutcome:
        mapped_values = self._mapper.apply(mapping, row)
        record, errors = self._validator.validate(schema, mapped_values)
        if errors or record is None:
            return RejectedRow(row_index=row_index, errors=tuple(errors))

        try:
            await store.insert(schema.key, record, owner_id)
        except RecordStoreError as exc:
            return RejectedRow(
                row_index=row_index,
                errors=(FieldError(None, str(exc)),),
            )
        return ImportedRow(row_index=row_index, record=record)

    def _summarize(
        self,
        *,
        document: RawCsvDocument,
        schema: ImportSchema,
        processed_rows: int,
        outcomes: Sequence[RowOutcome],
    ) -> ImportSummary:
        rejected = [outcome for outcome in outcomes if isinstance(outcome, RejectedRow)]
        return ImportSummary(
            schema_key=schema.key,
            total_rows=document.total_row_count,
            processed_rows=processed_rows,
            imported_count=len(outcomes) - len(rejected),
            failed_count=len(rejected),
            sample_errors=tuple(rejected[: self._settings.max_reported_errors]),
            truncated=document.total_row_count > processed_rows,
        )

    async def _record_audit(
        self,
        *,
        summary: ImportSummary,
        mapping: ColumnMapping,
        store: RecordStore,
        owner_id: str,
        file_name: str,
    ) -> bool:
        audit = ImportAuditRecord(
            owner_id=owner_id,
            file_name=file_name,
            schema_key=summary.schema_key,
            column_mapping=mapping.to_list(),
            total_rows=summary.total_rows,
            imported_rows=summary.imported_count,
            failed_rows=summary.failed_count,
            status=summary.status,
            truncated=summary.truncated,
            error_details=summary.error_messages,
        )
        try:
            await store.insert_audit_record(audit)
        except RecordStoreError as exc:
            logger.warning("CSV import audit record not stored file=%r: %s", file_name, exc)
            return False
        return True


# ---------------------------------------------------------------------------
# Session state machine
# ---------------------------------------------------------------------------


class ImportState(str, Enum):
    IDLE = "idle"
    FILE_SELECTED = "file_selected"
    MAPPED = "mapped"
    IMPORTING = "importing"
    COMPLETED = "completed"
    FAILED = "failed"


class ImportSession:
    """
    One user's import of one file into one schema.
    """

    def __init__(self, *, schema: ImportSchema, coordinator: ImportCoordinator | None = None) -> None:
        self.schema = schema
        self._coordinator = coordinator or get_import_coordinator()
        self.state = ImportState.IDLE
        self.failure_reason: str | None = None
        self.file_name: str | None = None
        self.preview: RawCsvDocument | None = None
        self.document: RawCsvDocument | None = None
        self.proposed_mapping: ColumnMapping | None = None
        self.mapping: ColumnMapping | None = None
        self.summary: ImportSummary | None = None

    @property
    def truncation_notice(self) -> str | None:
        if self.document is None:
            return None
        return truncation_notice(self.document, self._coordinator.settings.max_rows)

    def current_mapping(self) -> ColumnMapping:
        """
        The confirmed mapping, else the proposed one.
        """

        mapping = self.mapping or self.proposed_mapping
        if mapping is None:
            raise InvalidSessionStateError(
                f"No column mapping while import is {self.state.value}."
            )
        return mapping

    def select_file(
        self,
        *,
        file_name: str,
        content_type: str | None,
        data: bytes,
    ) -> RawCsvDocument:
        """
        Load a new file; a structural error leaves the session FAILED.
        """

        self._require(
            ImportState.IDLE,
            ImportState.FILE_SELECTED,
            ImportState.MAPPED,
            ImportState.COMPLETED,
            ImportState.FAILED,
        )
        self._clear()
        try:
            preview, document = self._coordinator.load_document(
                file_name=file_name,
                content_type=content_type,
                data=data,
            )
        except CSVStructureError as exc:
            self.state = ImportState.FAILED
            self.failure_reason = exc.message
            raise

        self.file_name = file_name
        self.preview = preview
        self.document = document
        self.proposed_mapping = self._coordinator.mapper.auto_map(document.headers, self.schema)
        self.state = ImportState.FILE_SELECTED
        return preview

    def confirm_mapping(self, mapping: ColumnMapping | None = None) -> ColumnMapping:
        """
        Accept a mapping (the proposed one when omitted). Re-entrant.
        """

        self._require(ImportState.FILE_SELECTED, ImportState.MAPPED)
        chosen = mapping or self.current_mapping()
        self.mapping = chosen
        self.state = ImportState.MAPPED
        return chosen

    def remap(self, csv_column: str, target_field: str | None) -> ColumnMapping:
        self._require(ImportState.FILE_SELECTED, ImportState.MAPPED)
        return self.confirm_mapping(
            self._coordinator.mapper.remap(self.current_mapping(), csv_column, target_field)
        )

    async def run(self, *, store: RecordStore, owner_id: str) -> ImportSummary:
        """
        Import the confirmed mapping. A mapping conflict keeps the session MAPPED.
        """

        self._require(ImportState.MAPPED)
        document, mapping = self.document, self.mapping
        if document is None or mapping is None:
            raise InvalidSessionStateError("No file and column mapping to import.")
        self._coordinator.check_mapping(mapping, self.schema)

        self.state = ImportState.IMPORTING
        try:
            summary = await self._coordinator.run_import(
                document=document,
                schema=self.schema,
                mapping=mapping,
                store=store,
                owner_id=owner_id,
                file_name=self.file_name or "",
            )
        except asyncio.CancelledError:
            self.state = ImportState.FAILED
            self.failure_reason = "Import cancelled."
            logger.info("CSV import cancelled file=%r", self.file_name)
            raise
        except Exception as exc:
            self.state = ImportState.FAILED
            self.failure_reason = str(exc) or exc.__class__.__name__
            raise

        self.summary = summary
        self.state = ImportState.COMPLETED
        return summary

    def reset(self) -> None:
        self._require(
            ImportState.IDLE,
            ImportState.FILE_SELECTED,
            ImportState.MAPPED,
            ImportState.COMPLETED,
            ImportState.FAILED,
        )
        self._clear()
        self.state = ImportState.IDLE

    def _clear(self) -> None:
        self.failure_reason = None
        self.file_name = None
        self.preview = None
        self.document = None
        self.proposed_mapping = None
        self.mapping = None
        self.summary = None

    def _require(self, *allowed: ImportState) -> None:
        if self.state not in allowed:
            raise InvalidSessionStateError(
                f"Operation not allowed while import is {self.state.value}."
            )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_import_coordinator() -> ImportCoordinator:
    """
    Build and cache the coordinator with env-driven settings.
    """

    return ImportCoordinator(settings=get_csv_import_settings())
