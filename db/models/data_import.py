"""
db/models/data_import.py

Audit trail of CSV import runs.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONType


class DataImport(Base):
    __tablename__ = "data_imports"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    target_table: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Import schema key",
    )
    column_mapping: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONType,
        nullable=False,
        comment="Ordered csv_column -> target_field pairs used for the run",
    )
    total_rows: Mapped[int] = mapped_column(Integer, nullable=False)
    imported_rows: Mapped[int] = mapped_column(Integer, nullable=False)
    failed_rows: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="completed, completed_with_errors",
    )
    truncated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    error_details: Mapped[list[str] | None] = mapped_column(
        JSONType,
        nullable=True,
        comment="First row errors of the run, capped",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_data_imports_owner_id", "owner_id"),
        Index("ix_data_imports_owner_created", "owner_id", "created_at"),
    )
