"""
app/schemas package marker.
"""

from app.schemas.data_import import (
    ImportPreviewResponse,
    ImportSchemaResponse,
    ImportSummaryResponse,
    MappingEntryModel,
    RowErrorResponse,
)

__all__ = [
    "ImportPreviewResponse",
    "ImportSchemaResponse",
    "ImportSummaryResponse",
    "MappingEntryModel",
    "RowErrorResponse",
]
