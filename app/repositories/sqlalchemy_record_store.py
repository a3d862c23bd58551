"""
app/repositories/sqlalchemy_record_store.py

SQLAlchemy-backed RecordStore.

Every record is committed on its own so that a refused row is rolled back
without touching rows written before it. Blocking session work runs in the
FastAPI threadpool; calls are still issued one at a time by the coordinator.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.csv_import import ImportAuditRecord
from app.domain.errors import RecordStoreError
from app.domain.import_schema import SchemaKey
from db.base import Base
from db.models.data_import import DataImport
from db.models.task import Task
from db.models.team_member import TeamMember

logger = logging.getLogger(__name__)

MODELS_BY_SCHEMA: dict[SchemaKey, type[Base]] = {
    SchemaKey.TASKS: Task,
    SchemaKey.TEAM_MEMBERS: TeamMember,
}

_PROTECTED_COLUMNS = frozenset({"id", "owner_id", "created_at", "updated_at"})


class SqlAlchemyRecordStore:
    """
    Owner-scoped persistence for imported records and import audits.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    async def insert(
        self,
        schema_key: SchemaKey,
        record: Mapping[str, Any],
        owner_id: str,
    ) -> None:
        await run_in_threadpool(self._insert, schema_key, dict(record), owner_id)

    async def list_all(self, schema_key: SchemaKey, owner_id: str) -> list[dict[str, Any]]:
        return await run_in_threadpool(self._list_all, schema_key, owner_id)

    async def insert_audit_record(self, audit: ImportAuditRecord) -> None:
        await run_in_threadpool(self._insert_audit_record, audit)

    def _insert(self, schema_key: SchemaKey, record: dict[str, Any], owner_id: str) -> None:
        model = _model_for(schema_key)
        columns = {column.key for column in model.__table__.columns}
        payload = {
            key: value
            for key, value in record.items()
            if key in columns and key not in _PROTECTED_COLUMNS
        }
        self._commit(model(owner_id=owner_id, **payload))

    def _list_all(self, schema_key: SchemaKey, owner_id: str) -> list[dict[str, Any]]:
        model = _model_for(schema_key)
        stmt = (
            select(model)
            .where(model.owner_id == owner_id)
            .order_by(model.created_at)
        )
        columns = [column.key for column in model.__table__.columns]
        return [
            {key: getattr(row, key) for key in columns}
            for row in self._session.scalars(stmt)
        ]

    def _insert_audit_record(self, audit: ImportAuditRecord) -> None:
        self._commit(
            DataImport(
                owner_id=audit.owner_id,
                file_name=audit.file_name,
                target_table=audit.schema_key.value,
                column_mapping=audit.column_mapping,
                total_rows=audit.total_rows,
                imported_rows=audit.imported_rows,
                failed_rows=audit.failed_rows,
                status=audit.status,
                truncated=audit.truncated,
                error_details=audit.error_details or None,
            )
        )

    def _commit(self, instance: Base) -> None:
        try:
            self._session.add(instance)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            message = str(getattr(exc, "orig", None) or exc)
            logger.debug("Record store write refused table=%s: %s", instance.__tablename__, message)
            raise RecordStoreError(message) from exc


def _model_for(schema_key: SchemaKey) -> Any:
    try:
        return MODELS_BY_SCHEMA[schema_key]
    except KeyError as exc:
        raise ValueError(f"No table registered for schema {schema_key.value!r}.") from exc
