"""
app/domain/import_schema.py

Registry of importable/exportable record kinds and their field constraints.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping

from app.domain.errors import UnknownSchemaError


class SchemaKey(str, Enum):
    TASKS = "tasks"
    TEAM_MEMBERS = "team_members"


class FieldKind(str, Enum):
    STRING = "string"
    ENUM = "enum"
    DATE = "date"
    EMAIL = "email"


@dataclass(frozen=True)
class FieldConstraint:
    """
    Typed constraint for one target field.
    """

    name: str
    kind: FieldKind = FieldKind.STRING
    required: bool = False
    min_length: int | None = None
    max_length: int | None = None
    allowed_values: tuple[str, ...] = ()
    default: str | None = None

    def __post_init__(self) -> None:
        if self.kind is FieldKind.ENUM and not self.allowed_values:
            raise ValueError(f"Enum field {self.name!r} needs allowed_values.")
        if self.default is not None and self.allowed_values and self.default not in self.allowed_values:
            raise ValueError(f"Default for {self.name!r} is not an allowed value.")


@dataclass(frozen=True)
class ImportSchema:
    """
    Ordered field constraints for one record kind.
    """

    key: SchemaKey
    label: str
    fields: tuple[FieldConstraint, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for constraint in self.fields:
            if constraint.name in seen:
                raise ValueError(
                    f"Duplicate field {constraint.name!r} in schema {self.key.value!r}."
                )
            seen.add(constraint.name)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(constraint.name for constraint in self.fields)

    @property
    def required_fields(self) -> tuple[str, ...]:
        return tuple(constraint.name for constraint in self.fields if constraint.required)


TASK_STATUSES: tuple[str, ...] = ("todo", "in-progress", "completed")
TASK_PRIORITIES: tuple[str, ...] = ("low", "medium", "high", "urgent")

DEFAULT_SCHEMAS: tuple[ImportSchema, ...] = (
    ImportSchema(
        key=SchemaKey.TASKS,
        label="Tasks",
        fields=(
            FieldConstraint("title", required=True, min_length=1, max_length=200),
            FieldConstraint("description", max_length=2000),
            FieldConstraint(
                "status",
                kind=FieldKind.ENUM,
                allowed_values=TASK_STATUSES,
                default="todo",
            ),
            FieldConstraint(
                "priority",
                kind=FieldKind.ENUM,
                allowed_values=TASK_PRIORITIES,
                default="medium",
            ),
            FieldConstraint("due_date", kind=FieldKind.DATE),
        ),
    ),
    ImportSchema(
        key=SchemaKey.TEAM_MEMBERS,
        label="Team Members",
        fields=(
            FieldConstraint("name", required=True, min_length=2, max_length=100),
            FieldConstraint("email", kind=FieldKind.EMAIL, required=True, max_length=255),
            FieldConstraint("role", required=True, min_length=1, max_length=50),
            FieldConstraint("department", max_length=100),
        ),
    ),
)


class SchemaRegistry:
    """
    Closed lookup table from schema key to import schema.
    """

    def __init__(self, schemas: Iterable[ImportSchema] = DEFAULT_SCHEMAS) -> None:
        self._schemas: Mapping[SchemaKey, ImportSchema] = {
            schema.key: schema for schema in schemas
        }

    def schema_for(self, key: SchemaKey | str) -> ImportSchema:
        """
        Resolve a schema by key, raising UnknownSchemaError when absent.
        """

        known = [schema_key.value for schema_key in self._schemas]
        try:
            schema_key = key if isinstance(key, SchemaKey) else SchemaKey(str(key).strip())
        except ValueError as exc:
            raise UnknownSchemaError(str(key), known) from exc

        schema = self._schemas.get(schema_key)
        if schema is None:
            raise UnknownSchemaError(schema_key.value, known)
        return schema

    def keys(self) -> tuple[SchemaKey, ...]:
        return tuple(self._schemas)

    def schemas(self) -> tuple[ImportSchema, ...]:
        return tuple(self._schemas.values())


default_registry = SchemaRegistry()
