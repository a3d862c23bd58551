"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, File, Header, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.config import get_csv_import_settings
from app.domain.import_schema import SchemaRegistry, default_registry
from app.repositories.record_store import RecordStore
from app.repositories.sqlalchemy_record_store import SqlAlchemyRecordStore
from db.session import get_db


@dataclass(frozen=True)
class CsvUpload:
    """
    Raw upload as received; at most ``max_file_bytes + 1`` bytes are read.
    """

    file_name: str
    content_type: str | None
    data: bytes


async def get_csv_upload(file: UploadFile = File(...)) -> CsvUpload:
    """
    Read an uploaded file without loading more than the size cap allows.
    """

    max_bytes = get_csv_import_settings().max_file_bytes
    try:
        data = await file.read(max_bytes + 1)
    finally:
        await file.close()
    return CsvUpload(
        file_name=(file.filename or "").strip(),
        content_type=file.content_type,
        data=data,
    )


def get_owner_id(x_owner_id: str | None = Header(default=None)) -> str:
    """
    Owner id supplied by the upstream identity provider.
    """

    owner_id = (x_owner_id or "").strip()
    if not owner_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Owner-Id header.",
        )
    return owner_id


def get_schema_registry() -> SchemaRegistry:
    return default_registry


def get_record_store(db: Session = Depends(get_db)) -> RecordStore:
    return SqlAlchemyRecordStore(db)
