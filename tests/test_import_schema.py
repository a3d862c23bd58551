from __future__ import annotations

import unittest

from app.domain.errors import UnknownSchemaError
from app.domain.import_schema import (
    FieldConstraint,
    FieldKind,
    ImportSchema,
    SchemaKey,
    SchemaRegistry,
)


class TestSchemaRegistry(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = SchemaRegistry()

    def test_resolves_by_key_or_string(self) -> None:
        by_enum = self.registry.schema_for(SchemaKey.TASKS)
        by_text = self.registry.schema_for("tasks")

        self.assertIs(by_enum, by_text)
        self.assertEqual(
            by_enum.field_names,
            ("title", "description", "status", "priority", "due_date"),
        )

    def test_team_member_required_fields(self) -> None:
        schema = self.registry.schema_for("team_members")

        self.assertEqual(schema.required_fields, ("name", "email", "role"))

    def test_task_enum_defaults(self) -> None:
        schema = self.registry.schema_for(SchemaKey.TASKS)
        fields = {constraint.name: constraint for constraint in schema.fields}

        self.assertEqual(fields["status"].default, "todo")
        self.assertEqual(fields["priority"].default, "medium")
        self.assertEqual(fields["priority"].allowed_values, ("low", "medium", "high", "urgent"))

    def test_unknown_key_raises(self) -> None:
        with self.assertRaises(UnknownSchemaError) as ctx:
            self.registry.schema_for("invoices")

        self.assertEqual(ctx.exception.key, "invoices")
        self.assertIn("team_members", ctx.exception.message)

    def test_registry_is_closed_to_configured_schemas(self) -> None:
        registry = SchemaRegistry(
            [ImportSchema(key=SchemaKey.TASKS, label="Tasks", fields=(FieldConstraint("title"),))]
        )

        self.assertEqual(registry.keys(), (SchemaKey.TASKS,))
        with self.assertRaises(UnknownSchemaError):
            registry.schema_for(SchemaKey.TEAM_MEMBERS)


class TestSchemaDefinitions(unittest.TestCase):
    def test_duplicate_field_names_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            ImportSchema(
                key=SchemaKey.TASKS,
                label="Tasks",
                fields=(FieldConstraint("title"), FieldConstraint("title")),
            )

    def test_enum_without_values_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            FieldConstraint("status", kind=FieldKind.ENUM)

    def test_default_outside_allowed_values_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            FieldConstraint(
                "status",
                kind=FieldKind.ENUM,
                allowed_values=("todo",),
                default="done",
            )


if __name__ == "__main__":
    unittest.main()
