"""
app/mappers/column_mapper.py

Column mapping from arbitrary CSV headers to import schema fields.
"""

from __future__ import annotations

import re
from collections import deque
from typing import Sequence

from app.domain.csv_import import ColumnMapping, MappingEntry
from app.domain.import_schema import ImportSchema

_SEPARATORS = re.compile(r"[_\s-]")


def normalize_header(header: str) -> str:
    """
    Normalize a column or field name for matching.
    """

    return _SEPARATORS.sub("", header.lower())


class ColumnMapper:
    """
    Proposes and edits CSV column to schema field mappings.
    """

    def auto_map(self, headers: Sequence[str], schema: ImportSchema) -> ColumnMapping:
        """
        Map each header to the schema field with the same normalized name.

        A field is claimed by the first matching column; later duplicates and
        unmatched columns stay unmapped.
        """

        field_lookup: dict[str, str] = {}
        for field_name in schema.field_names:
            field_lookup.setdefault(normalize_header(field_name), field_name)

        claimed: set[str] = set()
        entries: list[MappingEntry] = []
        for header in headers:
            match = field_lookup.get(normalize_header(header))
            if match is not None and match not in claimed:
                claimed.add(match)
                entries.append(MappingEntry(csv_column=header, target_field=match))
            else:
                entries.append(MappingEntry(csv_column=header))
        return ColumnMapping(entries=tuple(entries))

    @staticmethod
    def remap(
        mapping: ColumnMapping,
        csv_column: str,
        new_target_field: str | None,
    ) -> ColumnMapping:
        """
        Return a copy with ``csv_column`` pointed at ``new_target_field``.

        Empty target means "skip this column". Uniqueness is not enforced here.
        """

        target = new_target_field.strip() if new_target_field else None
        return ColumnMapping(
            entries=tuple(
                MappingEntry(csv_column=entry.csv_column, target_field=target or None)
                if entry.csv_column == csv_column
                else entry
                for entry in mapping.entries
            )
        )

    @staticmethod
    def from_pairs(
        headers: Sequence[str],
        pairs: Sequence[tuple[str, str | None]],
    ) -> ColumnMapping:
        """
        Build a positional mapping for ``headers`` from (csv_column, field) pairs.

        A pair claims the first header with that name not claimed by an
        earlier pair, so repeated header names are addressed in file order:
        ``[("title", None), ("title", "title")]`` maps the second ``title``
        column. Columns no pair claims are unmapped.
        """

        unclaimed: dict[str, deque[int]] = {}
        for position, header in enumerate(headers):
            unclaimed.setdefault(header, deque()).append(position)

        targets: list[str | None] = [None] * len(headers)
        for csv_column, target in pairs:
            positions = unclaimed.get(csv_column)
            if not positions:
                continue
            targets[positions.popleft()] = target.strip() if target and target.strip() else None

        return ColumnMapping(
            entries=tuple(
                MappingEntry(csv_column=header, target_field=target)
                for header, target in zip(headers, targets)
            )
        )

    @staticmethod
    def apply(mapping: ColumnMapping, row: Sequence[str]) -> dict[str, str]:
        """
        Project one data row onto target field names.
        """

        mapped: dict[str, str] = {}
        for position, entry in enumerate(mapping.entries):
            if not entry.target_field:
                continue
            mapped[entry.target_field] = row[position] if position < len(row) else ""
        return mapped

    @staticmethod
    def unmapped_required_fields(mapping: ColumnMapping, schema: ImportSchema) -> list[str]:
        mapped = set(mapping.target_fields())
        return [name for name in schema.required_fields if name not in mapped]
