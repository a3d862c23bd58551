"""
tests/test_csv_export_service.py

Tests for CsvExporter and the export -> import round trip.
"""

from __future__ import annotations

import asyncio
import csv
import io
from datetime import date
from typing import TYPE_CHECKING, Callable

import pytest

from app.domain.errors import NoDataError
from app.domain.import_schema import ImportSchema, SchemaKey
from app.services.csv_export_service import CsvExporter, export_filename
from app.services.import_coordinator import ImportCoordinator, ImportSession

if TYPE_CHECKING:
    from conftest import InMemoryRecordStore


@pytest.fixture()
def exporter() -> CsvExporter:
    return CsvExporter()


class TestExportToCsv:
    def test_quotes_every_cell_and_drops_identifiers(self, exporter: CsvExporter) -> None:
        records = [
            {
                "id": "8d7f",
                "owner_id": "user-1",
                "title": 'Say "hi"',
                "description": None,
                "due_date": date(2024, 1, 2),
            },
            {
                "id": "9a1c",
                "owner_id": "user-1",
                "title": "Plan, then ship",
                "description": "line one\nline two",
                "due_date": None,
            },
        ]

        output = exporter.export_to_csv(records)

        assert output == (
            '"title","description","due_date"\n'
            '"Say ""hi""","","2024-01-02"\n'
            '"Plan, then ship","line one\nline two",""\n'
        )

    def test_columns_follow_first_record(self, exporter: CsvExporter) -> None:
        output = exporter.export_to_csv(
            [{"b": 1, "a": 2}, {"a": 3, "b": 4, "c": 5}],
            excluded_columns=(),
        )

        assert output.splitlines() == ['"b","a"', '"1","2"', '"4","3"']

    def test_custom_exclusions(self, exporter: CsvExporter) -> None:
        output = exporter.export_to_csv(
            [{"id": 1, "name": "Ana", "active": True}],
            excluded_columns=("id",),
        )

        assert output == '"name","active"\n"Ana","true"\n'

    def test_empty_input_raises(self, exporter: CsvExporter) -> None:
        with pytest.raises(NoDataError) as ctx:
            exporter.export_to_csv([])

        assert ctx.value.message == "No data found to export."

    def test_formula_cells_pass_through_by_default(self, exporter: CsvExporter) -> None:
        output = exporter.export_to_csv([{"title": "=1+1"}])

        assert output == '"title"\n"=1+1"\n'

    def test_formula_cells_can_be_neutralized(self, exporter: CsvExporter) -> None:
        output = exporter.export_to_csv(
            [{"title": "=1+1"}, {"title": "@SUM(A1)"}, {"title": "plain"}],
            neutralize_formulas=True,
        )

        assert output == '"title"\n"\'=1+1"\n"\'@SUM(A1)"\n"plain"\n'


def test_export_filename() -> None:
    assert export_filename(SchemaKey.TEAM_MEMBERS, date(2026, 10, 19)) == (
        "team_members_export_2026-10-19.csv"
    )


class TestExportSchema:
    def test_only_owner_records_are_exported(
        self,
        exporter: CsvExporter,
        store: InMemoryRecordStore,
    ) -> None:
        store.records[SchemaKey.TASKS].extend(
            [
                {"owner_id": "user-1", "title": "Mine"},
                {"owner_id": "user-2", "title": "Theirs"},
            ]
        )

        output = asyncio.run(
            exporter.export_schema(store=store, schema_key=SchemaKey.TASKS, owner_id="user-1")
        )

        assert output == '"title"\n"Mine"\n'

    def test_no_records_raises(self, exporter: CsvExporter, store: InMemoryRecordStore) -> None:
        with pytest.raises(NoDataError):
            asyncio.run(
                exporter.export_schema(store=store, schema_key=SchemaKey.TASKS, owner_id="user-1")
            )

    def test_round_trip_reproduces_records(
        self,
        exporter: CsvExporter,
        coordinator: ImportCoordinator,
        tasks_schema: ImportSchema,
        make_store: Callable[..., InMemoryRecordStore],
    ) -> None:
        source = make_store()
        first = ImportSession(schema=tasks_schema, coordinator=coordinator)
        first.select_file(
            file_name="tasks.csv",
            content_type="text/csv",
            data=(
                "title,description,status,priority,due_date\n"
                '"Quarterly report","Numbers, charts and ""quotes""",in-progress,high,2024-06-30\n'
                "Standup,,todo,low,\n"
            ).encode("utf-8"),
        )
        first.confirm_mapping()
        asyncio.run(first.run(store=source, owner_id="user-1"))

        exported = asyncio.run(
            exporter.export_schema(store=source, schema_key=SchemaKey.TASKS, owner_id="user-1")
        )
        assert list(csv.reader(io.StringIO(exported)))[0] == [
            "title",
            "description",
            "status",
            "priority",
            "due_date",
        ]

        target = make_store()
        second = ImportSession(schema=tasks_schema, coordinator=coordinator)
        second.select_file(
            file_name="tasks_export.csv",
            content_type="text/csv",
            data=exported.encode("utf-8"),
        )
        second.confirm_mapping()
        summary = asyncio.run(second.run(store=target, owner_id="user-1"))

        assert summary.failed_count == 0
        assert target.records[SchemaKey.TASKS] == source.records[SchemaKey.TASKS]
