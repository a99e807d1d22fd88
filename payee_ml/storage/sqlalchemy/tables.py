"""SQLAlchemy table definitions for local job storage.

These are thin persistence mappings. Domain logic lives in Pydantic models.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class BatchJobTable(Base):
    """Tracked batch jobs, keyed by remote job id."""

    __tablename__ = "batch_jobs"

    job_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    job: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    payee_names: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    original_row_data: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
