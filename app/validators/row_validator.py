"""
app/validators/row_validator.py

Row-level validation and type parsing against an import schema.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping

from email_validator import EmailNotValidError, validate_email

from app.domain.csv_import import FieldError
from app.domain.import_schema import FieldConstraint, FieldKind, ImportSchema

DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d.%m.%Y",
    "%b %d %Y",
    "%B %d %Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
)


class RowValidator:
    """
    Validates mapped row values and converts them into a typed record.
    """

    def validate(
        self,
        schema: ImportSchema,
        mapped_values: Mapping[str, str | None],
    ) -> tuple[dict[str, Any] | None, list[FieldError]]:
        """
        Check every field of ``schema`` and collect all errors of the row.

        Returns ``(record, [])`` on success and ``(None, errors)`` otherwise.
        """

        errors: list[FieldError] = []
        record: dict[str, Any] = {}

        for constraint in schema.fields:
            raw = mapped_values.get(constraint.name)
            value = "" if raw is None else str(raw).strip()

            if not value:
                if constraint.required:
                    errors.append(FieldError(constraint.name, "Required value is missing"))
                record[constraint.name] = constraint.default
                continue

            record[constraint.name] = self._check_field(constraint, value, errors)

        if errors:
            return None, errors
        return record, []

    def _check_field(
        self,
        constraint: FieldConstraint,
        value: str,
        errors: list[FieldError],
    ) -> Any:
        if constraint.kind is FieldKind.ENUM:
            return self._check_enum(constraint, value, errors)
        if constraint.kind is FieldKind.DATE:
            return self._check_date(constraint, value, errors)

        self._check_length(constraint, value, errors)
        if constraint.kind is FieldKind.EMAIL:
            self._check_email(constraint, value, errors)
        return value

    @staticmethod
    def _check_length(
        constraint: FieldConstraint,
        value: str,
        errors: list[FieldError],
    ) -> None:
        if constraint.min_length is not None and len(value) < constraint.min_length:
            errors.append(
                FieldError(
                    constraint.name,
                    f"Must be at least {constraint.min_length} characters",
                )
            )
        if constraint.max_length is not None and len(value) > constraint.max_length:
            errors.append(
                FieldError(
                    constraint.name,
                    f"Must be at most {constraint.max_length} characters",
                )
            )

    @staticmethod
    def _check_enum(
        constraint: FieldConstraint,
        value: str,
        errors: list[FieldError],
    ) -> str:
        normalized = value.lower()
        if normalized not in constraint.allowed_values:
            allowed = ", ".join(constraint.allowed_values)
            errors.append(FieldError(constraint.name, f"Must be one of: {allowed}"))
        return normalized

    @staticmethod
    def _check_email(
        constraint: FieldConstraint,
        value: str,
        errors: list[FieldError],
    ) -> None:
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            errors.append(FieldError(constraint.name, "Invalid email address"))

    @staticmethod
    def _check_date(
        constraint: FieldConstraint,
        value: str,
        errors: list[FieldError],
    ) -> date | None:
        parsed = parse_date(value)
        if parsed is None:
            errors.append(FieldError(constraint.name, "Invalid date format"))
        return parsed


def parse_date(value: str) -> date | None:
    """
    Parse a calendar date from ISO or a handful of common layouts.
    """

    raw = value.strip()
    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        return datetime.fromisoformat(normalized).date()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None
