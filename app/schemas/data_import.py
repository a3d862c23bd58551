"""
app/schemas/data_import.py

Request/response schemas for CSV import and export endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.csv_import import ColumnMapping, ImportSummary, RawCsvDocument
from app.domain.import_schema import ImportSchema


class MappingEntryModel(BaseModel):
    """
    One CSV column and its target field (null means skipped).
    """

    csv_column: str
    target_field: str | None = None


class ImportPreviewResponse(BaseModel):
    schema_key: str
    file_name: str
    headers: list[str]
    rows: list[list[str]]
    total_rows: int = Field(..., ge=0)
    proposed_mapping: list[MappingEntryModel]
    unmapped_required_fields: list[str] = Field(default_factory=list)
    truncation_notice: str | None = None

    @classmethod
    def build(
        cls,
        *,
        schema: ImportSchema,
        file_name: str,
        preview: RawCsvDocument,
        mapping: ColumnMapping,
        unmapped_required_fields: list[str],
        truncation_notice: str | None,
    ) -> "ImportPreviewResponse":
        return cls(
            schema_key=schema.key.value,
            file_name=file_name,
            headers=list(preview.headers),
            rows=[list(row) for row in preview.rows],
            total_rows=preview.total_row_count,
            proposed_mapping=[MappingEntryModel(**entry) for entry in mapping.to_list()],
            unmapped_required_fields=unmapped_required_fields,
            truncation_notice=truncation_notice,
        )


class RowErrorResponse(BaseModel):
    """
    API response model for one rejected row.
    """

    row_number: int = Field(..., ge=1)
    message: str
    errors: list[dict[str, str | None]] = Field(default_factory=list)


class ImportSummaryResponse(BaseModel):
    """
    API response model for an import run summary.
    """

    schema_key: str
    status: str
    total_rows: int = Field(..., ge=0)
    processed_rows: int = Field(..., ge=0)
    imported_count: int = Field(..., ge=0)
    failed_count: int = Field(..., ge=0)
    truncated: bool = False
    truncation_notice: str | None = None
    audit_recorded: bool = False
    sample_errors: list[RowErrorResponse] = Field(default_factory=list)

    @classmethod
    def from_summary(
        cls,
        summary: ImportSummary,
        *,
        truncation_notice: str | None = None,
    ) -> "ImportSummaryResponse":
        return cls(
            schema_key=summary.schema_key.value,
            status=summary.status,
            total_rows=summary.total_rows,
            processed_rows=summary.processed_rows,
            imported_count=summary.imported_count,
            failed_count=summary.failed_count,
            truncated=summary.truncated,
            truncation_notice=truncation_notice,
            audit_recorded=summary.audit_recorded,
            sample_errors=[
                RowErrorResponse(
                    row_number=rejected.row_index,
                    message=rejected.describe(),
                    errors=[
                        {"field": error.field, "message": error.message}
                        for error in rejected.errors
                    ],
                )
                for rejected in summary.sample_errors
            ],
        )


class SchemaFieldResponse(BaseModel):
    name: str
    kind: str
    required: bool
    min_length: int | None = None
    max_length: int | None = None
    allowed_values: list[str] = Field(default_factory=list)
    default: str | None = None


class ImportSchemaResponse(BaseModel):
    key: str
    label: str
    fields: list[SchemaFieldResponse]

    @classmethod
    def from_schema(cls, schema: ImportSchema) -> "ImportSchemaResponse":
        return cls(
            key=schema.key.value,
            label=schema.label,
            fields=[
                SchemaFieldResponse(
                    name=constraint.name,
                    kind=constraint.kind.value,
                    required=constraint.required,
                    min_length=constraint.min_length,
                    max_length=constraint.max_length,
                    allowed_values=list(constraint.allowed_values),
                    default=constraint.default,
                )
                for constraint in schema.fields
            ],
        )
