"""
app/repositories/record_store.py

Persistence contract consumed by the import/export pipeline.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from app.domain.csv_import import ImportAuditRecord
from app.domain.import_schema import SchemaKey


@runtime_checkable
class RecordStore(Protocol):
    """
    Owner-scoped record persistence.

    ``insert`` raises ``RecordStoreError`` when the store refuses one record;
    the message is shown to the user as-is.
    """

    async def insert(
        self,
        schema_key: SchemaKey,
        record: Mapping[str, Any],
        owner_id: str,
    ) -> None: ...

    async def list_all(self, schema_key: SchemaKey, owner_id: str) -> list[dict[str, Any]]: ...

    async def insert_audit_record(self, audit: ImportAuditRecord) -> None: ...
