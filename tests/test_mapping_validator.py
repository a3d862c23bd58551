from __future__ import annotations

import unittest

from app.domain.csv_import import ColumnMapping, MappingEntry
from app.domain.errors import SchemaMappingError
from app.domain.import_schema import SchemaKey, SchemaRegistry
from app.validators.mapping_validator import MappingValidator


def _mapping(*pairs: tuple[str, str | None]) -> ColumnMapping:
    return ColumnMapping(entries=tuple(MappingEntry(column, target) for column, target in pairs))


class TestMappingValidator(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = MappingValidator()
        self.schema = SchemaRegistry().schema_for(SchemaKey.TASKS)

    def test_valid_mapping_passes(self) -> None:
        mapping = _mapping(("Task", "title"), ("Notes", None), ("State", "status"))

        self.assertEqual(self.validator.find_conflicts(mapping=mapping, schema=self.schema), [])
        self.validator.validate(mapping=mapping, schema=self.schema)

    def test_raises_on_duplicate_target_field(self) -> None:
        mapping = _mapping(("Task", "title"), ("Summary", "title"), ("State", "status"))

        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate(mapping=mapping, schema=self.schema)

        errors = ctx.exception.errors
        self.assertEqual([error.code for error in errors], ["duplicate_target_field"])
        self.assertEqual(errors[0].target_field, "title")
        self.assertEqual(errors[0].csv_columns, ("Task", "Summary"))
        self.assertIn("Duplicated fields: title", ctx.exception.message)

    def test_raises_on_unknown_target_field(self) -> None:
        mapping = _mapping(("Task", "title"), ("Owner", "assignee"))

        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate(mapping=mapping, schema=self.schema)

        codes = {error.code for error in ctx.exception.errors}
        self.assertIn("unknown_target_field", codes)

    def test_raises_when_nothing_is_mapped(self) -> None:
        mapping = _mapping(("Task", None), ("State", None))

        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate(mapping=mapping, schema=self.schema)

        codes = [error.code for error in ctx.exception.errors]
        self.assertEqual(codes, ["no_fields_mapped"])

    def test_unmapped_required_field_is_not_a_conflict(self) -> None:
        mapping = _mapping(("State", "status"))

        self.assertEqual(self.validator.find_conflicts(mapping=mapping, schema=self.schema), [])

    def test_error_payload_is_serializable(self) -> None:
        mapping = _mapping(("Task", "title"), ("Summary", "title"))

        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate(mapping=mapping, schema=self.schema)

        payload = ctx.exception.to_dict()
        self.assertEqual(payload["code"], "mapping_conflict")
        self.assertEqual(payload["errors"][0]["csv_columns"], ["Task", "Summary"])


if __name__ == "__main__":
    unittest.main()
