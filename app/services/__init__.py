"""
app/services package marker.
"""

from app.services.csv_export_service import CsvExporter, export_filename, get_csv_exporter
from app.services.import_coordinator import (
    ImportCoordinator,
    ImportSession,
    ImportState,
    get_import_coordinator,
)

__all__ = [
    "CsvExporter",
    "ImportCoordinator",
    "ImportSession",
    "ImportState",
    "export_filename",
    "get_csv_exporter",
    "get_import_coordinator",
]
