from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, select

from payee_ml.data_models import BatchJob, BatchJobRecord
from payee_ml.exceptions import ParseError
from payee_ml.storage.sqlalchemy.tables import BatchJobTable

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class BatchJobRepository:
    """Repository for locally tracked batch jobs."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, record: BatchJobRecord) -> None:
        """Insert or replace a job record."""
        row = await self._session.get(BatchJobTable, record.job.id)
        if row is None:
            row = BatchJobTable(job_id=record.job.id, created_at=record.created_at)
            self._session.add(row)
        row.status = record.job.status.value
        row.job = record.job.model_dump(mode="json")
        row.payee_names = list(record.payee_names)
        row.original_row_data = list(record.original_row_data)
        row.last_error = record.last_error
        await self._session.commit()

    async def get(self, job_id: str) -> BatchJobRecord | None:
        row = await self._session.get(BatchJobTable, job_id)
        if row is None:
            return None
        return self._to_record(row)

    async def list_all(self) -> list[BatchJobRecord]:
        """All tracked jobs, newest first. Unreadable rows are skipped."""
        stmt = select(BatchJobTable).order_by(BatchJobTable.created_at.desc())
        result = await self._session.execute(stmt)
        records: list[BatchJobRecord] = []
        for row in result.scalars():
            try:
                records.append(self._to_record(row))
            except ParseError as e:
                logger.warning("Skipping unreadable job record %s: %s", row.job_id, e)
        return records

    async def update_job(self, job: BatchJob, last_error: str | None = None) -> bool:
        """Store a fresh job snapshot. Returns False if the job is not tracked."""
        row = await self._session.get(BatchJobTable, job.id)
        if row is None:
            return False
        row.status = job.status.value
        row.job = job.model_dump(mode="json")
        row.last_error = last_error
        await self._session.commit()
        return True

    async def set_error(self, job_id: str, error: str | None) -> bool:
        row = await self._session.get(BatchJobTable, job_id)
        if row is None:
            return False
        row.last_error = error
        await self._session.commit()
        return True

    async def delete(self, job_id: str) -> bool:
        """Remove a job record. Returns count > 0."""
        stmt = delete(BatchJobTable).where(BatchJobTable.job_id == job_id)
        result = await self._session.execute(stmt)
        await self._session.commit()
        return (result.rowcount or 0) > 0  # type: ignore[union-attr]

    @staticmethod
    def _to_record(row: BatchJobTable) -> BatchJobRecord:
        try:
            return BatchJobRecord(
                job=BatchJob.model_validate(row.job),
                payee_names=row.payee_names,
                original_row_data=row.original_row_data or [],
                created_at=row.created_at,
                last_error=row.last_error,
            )
        except PydanticValidationError as e:
            raise ParseError(
                f"Malformed job record {row.job_id}", {"errors": e.errors()}
            ) from e
