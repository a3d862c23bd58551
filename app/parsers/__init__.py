"""
app/parsers package marker.
"""

from app.parsers.safe_csv_parser import ParseLimits, SafeCsvParser, decode_csv_bytes, sanitize_cell

__all__ = [
    "ParseLimits",
    "SafeCsvParser",
    "decode_csv_bytes",
    "sanitize_cell",
]
