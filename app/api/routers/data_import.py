"""
app/api/routers/data_import.py

CSV import and export HTTP endpoints.

All pipeline logic lives in ImportCoordinator / CsvExporter; the router only
handles HTTP plumbing (upload reading, mapping payload decoding, error
mapping).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Query, status
from fastapi.responses import Response
from pydantic import TypeAdapter, ValidationError

from app.api.dependencies import (
    CsvUpload,
    get_csv_upload,
    get_owner_id,
    get_record_store,
    get_schema_registry,
)
from app.domain.errors import (
    CSVStructureError,
    FileTooLargeError,
    NoDataError,
    SchemaMappingError,
    UnknownSchemaError,
)
from app.domain.csv_import import RawCsvDocument
from app.domain.import_schema import ImportSchema, SchemaRegistry
from app.repositories.record_store import RecordStore
from app.schemas.data_import import (
    ImportPreviewResponse,
    ImportSchemaResponse,
    ImportSummaryResponse,
    MappingEntryModel,
)
from app.services.csv_export_service import CsvExporter, export_filename, get_csv_exporter
from app.services.import_coordinator import (
    ImportCoordinator,
    ImportSession,
    get_import_coordinator,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["data-import"])

_MAPPING_ADAPTER = TypeAdapter(list[MappingEntryModel])


# ---------------------------------------------------------------------------
# Helpers (no business logic)
# ---------------------------------------------------------------------------


def _resolve_schema(registry: SchemaRegistry, schema_key: str) -> ImportSchema:
    try:
        return registry.schema_for(schema_key)
    except UnknownSchemaError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=exc.to_dict(),
        ) from exc


def _structural_error(exc: CSVStructureError) -> HTTPException:
    code = 413 if isinstance(exc, FileTooLargeError) else status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=exc.to_dict())


def _load_session(
    *,
    schema: ImportSchema,
    upload: CsvUpload,
    coordinator: ImportCoordinator,
) -> tuple[ImportSession, RawCsvDocument]:
    session = ImportSession(schema=schema, coordinator=coordinator)
    try:
        preview = session.select_file(
            file_name=upload.file_name,
            content_type=upload.content_type,
            data=upload.data,
        )
    except CSVStructureError as exc:
        logger.info("CSV upload rejected file=%r: %s", upload.file_name, exc.message)
        raise _structural_error(exc) from exc
    return session, preview


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/schemas", response_model=list[ImportSchemaResponse])
def list_schemas(
    registry: SchemaRegistry = Depends(get_schema_registry),
) -> list[ImportSchemaResponse]:
    """
    List importable record kinds and their field constraints.
    """

    return [ImportSchemaResponse.from_schema(schema) for schema in registry.schemas()]


@router.post("/imports/{schema_key}/preview", response_model=ImportPreviewResponse)
def preview_import(
    schema_key: str,
    upload: CsvUpload = Depends(get_csv_upload),
    owner_id: str = Depends(get_owner_id),
    registry: SchemaRegistry = Depends(get_schema_registry),
    coordinator: ImportCoordinator = Depends(get_import_coordinator),
) -> ImportPreviewResponse:
    """
    Parse the first rows of a CSV file and propose a column mapping.
    """

    schema = _resolve_schema(registry, schema_key)
    session, preview = _load_session(schema=schema, upload=upload, coordinator=coordinator)
    proposed_mapping = session.current_mapping()
    logger.info(
        "CSV preview owner=%s schema=%s file=%r total_rows=%d",
        owner_id,
        schema.key.value,
        upload.file_name,
        preview.total_row_count,
    )

    return ImportPreviewResponse.build(
        schema=schema,
        file_name=upload.file_name,
        preview=preview,
        mapping=proposed_mapping,
        unmapped_required_fields=coordinator.mapper.unmapped_required_fields(
            proposed_mapping, schema
        ),
        truncation_notice=session.truncation_notice,
    )


@router.post("/imports/{schema_key}", response_model=ImportSummaryResponse)
async def run_import(
    schema_key: str,
    upload: CsvUpload = Depends(get_csv_upload),
    mapping: str | None = Form(
        default=None,
        description='JSON list of {"csv_column": ..., "target_field": ...}; auto-mapped when omitted.',
    ),
    owner_id: str = Depends(get_owner_id),
    registry: SchemaRegistry = Depends(get_schema_registry),
    coordinator: ImportCoordinator = Depends(get_import_coordinator),
    store: RecordStore = Depends(get_record_store),
) -> ImportSummaryResponse:
    """
    Import every row of a CSV file into the selected schema.
    """

    schema = _resolve_schema(registry, schema_key)
    session, preview = _load_session(schema=schema, upload=upload, coordinator=coordinator)

    if mapping:
        try:
            entries = _MAPPING_ADAPTER.validate_json(mapping)
        except ValidationError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=exc.errors(include_url=False),
            ) from exc
        session.confirm_mapping(
            coordinator.mapper.from_pairs(
                preview.headers,
                [(entry.csv_column, entry.target_field) for entry in entries],
            )
        )
    else:
        session.confirm_mapping()

    try:
        summary = await session.run(store=store, owner_id=owner_id)
    except SchemaMappingError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=exc.to_dict(),
        ) from exc

    return ImportSummaryResponse.from_summary(
        summary, truncation_notice=session.truncation_notice
    )


@router.get("/exports/{schema_key}", summary="Download records as CSV")
async def export_records(
    schema_key: str,
    neutralize_formulas: bool = Query(
        default=False,
        description="Prefix formula-like cells with a single quote.",
    ),
    owner_id: str = Depends(get_owner_id),
    registry: SchemaRegistry = Depends(get_schema_registry),
    store: RecordStore = Depends(get_record_store),
    exporter: CsvExporter = Depends(get_csv_exporter),
) -> Response:
    """
    Export every record of one schema owned by the caller.
    """

    schema = _resolve_schema(registry, schema_key)
    try:
        csv_text = await exporter.export_schema(
            store=store,
            schema_key=schema.key,
            owner_id=owner_id,
            neutralize_formulas=neutralize_formulas,
        )
    except NoDataError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=exc.to_dict(),
        ) from exc

    return Response(
        content=csv_text,
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(schema.key)}"',
        },
    )
