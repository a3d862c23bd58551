"""
app/validators package marker.
"""

from app.validators.mapping_validator import MappingValidator
from app.validators.row_validator import RowValidator
from app.validators.upload_validator import check_upload, is_csv_like

__all__ = [
    "MappingValidator",
    "RowValidator",
    "check_upload",
    "is_csv_like",
]
