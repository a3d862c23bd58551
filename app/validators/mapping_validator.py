"""
app/validators/mapping_validator.py

Validation of a user-confirmed column mapping before import.
"""

from __future__ import annotations

from collections import defaultdict

from app.domain.csv_import import ColumnMapping
from app.domain.errors import MappingErrorDetail, SchemaMappingError
from app.domain.import_schema import ImportSchema


class MappingValidator:
    """
    Detects mapping conflicts that must be resolved before rows are written.
    """

    def find_conflicts(
        self,
        *,
        mapping: ColumnMapping,
        schema: ImportSchema,
    ) -> list[MappingErrorDetail]:
        """
        Return every conflict in the mapping; an empty list means importable.
        """

        errors: list[MappingErrorDetail] = []
        known_fields = set(schema.field_names)
        columns_by_field: dict[str, list[str]] = defaultdict(list)

        for entry in mapping.mapped_entries:
            target = entry.target_field or ""
            if target not in known_fields:
                errors.append(
                    MappingErrorDetail(
                        code="unknown_target_field",
                        message=f"Field {target!r} does not exist in {schema.key.value}.",
                        target_field=target,
                        csv_columns=(entry.csv_column,),
                    )
                )
                continue
            columns_by_field[target].append(entry.csv_column)

        for target, columns in columns_by_field.items():
            if len(columns) > 1:
                errors.append(
                    MappingErrorDetail(
                        code="duplicate_target_field",
                        message=f"Field {target!r} is mapped from more than one CSV column.",
                        target_field=target,
                        csv_columns=tuple(columns),
                    )
                )

        if not mapping.mapped_entries:
            errors.append(
                MappingErrorDetail(
                    code="no_fields_mapped",
                    message="Map at least one CSV column to a target field.",
                )
            )

        return errors

    def validate(self, *, mapping: ColumnMapping, schema: ImportSchema) -> None:
        """
        Raise SchemaMappingError when the mapping has any conflict.
        """

        errors = self.find_conflicts(mapping=mapping, schema=schema)
        if errors:
            duplicated = sorted(
                {
                    error.target_field
                    for error in errors
                    if error.code == "duplicate_target_field" and error.target_field
                }
            )
            detail = f" Duplicated fields: {', '.join(duplicated)}." if duplicated else ""
            raise SchemaMappingError(
                message=f"Column mapping cannot be imported.{detail}",
                errors=errors,
            )
