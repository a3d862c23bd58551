"""
Shared fixtures for the CSV import/export test suite.

``InMemoryRecordStore`` stands in for the database: it keeps records per
schema key and can refuse selected writes to exercise partial failures.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Any, Callable, Mapping

import pytest

from app.config import CSVImportSettings
from app.domain.csv_import import ImportAuditRecord
from app.domain.errors import RecordStoreError
from app.domain.import_schema import ImportSchema, SchemaKey, SchemaRegistry
from app.services.import_coordinator import ImportCoordinator


class InMemoryRecordStore:
    def __init__(
        self,
        *,
        reject: Callable[[Mapping[str, Any]], bool] | None = None,
        fail_audit: bool = False,
    ) -> None:
        self.records: dict[SchemaKey, list[dict[str, Any]]] = defaultdict(list)
        self.audits: list[ImportAuditRecord] = []
        self.insert_calls = 0
        self._reject = reject
        self._fail_audit = fail_audit

    async def insert(
        self,
        schema_key: SchemaKey,
        record: Mapping[str, Any],
        owner_id: str,
    ) -> None:
        self.insert_calls += 1
        if self._reject is not None and self._reject(record):
            raise RecordStoreError("duplicate key value violates unique constraint")
        self.records[schema_key].append({"owner_id": owner_id, **record})
        await asyncio.sleep(0)

    async def list_all(self, schema_key: SchemaKey, owner_id: str) -> list[dict[str, Any]]:
        return [dict(row) for row in self.records[schema_key] if row["owner_id"] == owner_id]

    async def insert_audit_record(self, audit: ImportAuditRecord) -> None:
        if self._fail_audit:
            raise RecordStoreError("data_imports is read-only")
        self.audits.append(audit)


@pytest.fixture()
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture()
def settings() -> CSVImportSettings:
    return CSVImportSettings()


@pytest.fixture()
def coordinator(settings: CSVImportSettings) -> ImportCoordinator:
    return ImportCoordinator(settings=settings)


@pytest.fixture()
def registry() -> SchemaRegistry:
    return SchemaRegistry()


@pytest.fixture()
def tasks_schema(registry: SchemaRegistry) -> ImportSchema:
    return registry.schema_for(SchemaKey.TASKS)


@pytest.fixture()
def team_schema(registry: SchemaRegistry) -> ImportSchema:
    return registry.schema_for(SchemaKey.TEAM_MEMBERS)


@pytest.fixture()
def make_store() -> Callable[..., InMemoryRecordStore]:
    """Factory for stores that refuse selected records or audit writes."""
    return InMemoryRecordStore
