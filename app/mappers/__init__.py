"""
app/mappers package marker.
"""

from app.mappers.column_mapper import ColumnMapper, normalize_header

__all__ = [
    "ColumnMapper",
    "normalize_header",
]
