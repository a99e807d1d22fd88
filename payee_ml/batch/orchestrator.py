"""Batch job lifecycle against the asynchronous inference API.

This module provides the BatchOrchestrator, which submits payee names as
one remote batch job, tracks it in local storage, and rebuilds one result
per input row from the job's output file.

State machine (remote side is authoritative):
    validating -> in_progress -> finalizing -> completed | failed | expired
    validating | in_progress | finalizing -> cancelling -> cancelled
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from payee_ml.data_models import (
    BatchJob,
    BatchJobRecord,
    BatchStatus,
    PerRowResult,
    RawName,
    RowStatus,
    Tier,
)
from payee_ml.exceptions import (
    BatchJobStateError,
    JobNotFoundError,
    ParseError,
    PayeeMLError,
    ValidationError,
)
from payee_ml.inference.classification import (
    DERIVED_MARKER,
    Deduplicator,
    KeywordExcluder,
    invalid_input_result,
    labelled_reasoning,
    normalize,
)
from payee_ml.retry import RetryPolicy
from payee_ml.storage import BatchJobRepository

from .identifiers import make_custom_id, parse_custom_id, validate_job_id

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from payee_ml.inference.clients import BatchInferenceClient

logger = logging.getLogger(__name__)

MISSING_RESULT_REASON = "No result returned for this row"


class BatchOrchestrator:
    """Submit, poll, cancel and retrieve payee batch jobs.

    Usage:
        orchestrator = BatchOrchestrator(client, get_session_maker())

        job = await orchestrator.submit(names, "March vendors")
        job = await orchestrator.poll(job.id)
        if job.status is BatchStatus.COMPLETED:
            rows = await orchestrator.fetch_results(job, names)
            len(rows) == len(names)

    Every remote call goes through the retry policy. Job records are
    written to local storage on submit and refreshed on every poll, so a
    restart can resume tracking with ``load_tracked_jobs()``.
    """

    def __init__(
        self,
        client: BatchInferenceClient,
        session_factory: async_sessionmaker[AsyncSession],
        retry: RetryPolicy | None = None,
        deduplicator: Deduplicator | None = None,
        excluder: KeywordExcluder | None = None,
    ):
        self._client = client
        self._session_factory = session_factory
        self._retry = retry or RetryPolicy()
        self._deduplicator = deduplicator or Deduplicator()
        self._excluder = excluder or KeywordExcluder()

    async def submit(
        self,
        names: Sequence[str],
        description: str = "",
        original_rows: Sequence[dict[str, Any]] | None = None,
        deduplicate: bool = True,
    ) -> BatchJob:
        """Upload one request per name (per cluster when deduplicating)."""
        if not names:
            raise ValidationError("No payee names to submit")
        if original_rows is not None and len(original_rows) != len(names):
            raise ValidationError(
                f"Got {len(names)} names but {len(original_rows)} original rows",
                details={"names": len(names), "rows": len(original_rows)},
            )

        raws = [RawName(text=name or "", origin_row_index=i) for i, name in enumerate(names)]
        if deduplicate:
            targets = [c.canonical for c in self._deduplicator.cluster(raws) if c.key]
        else:
            targets = [r for r in raws if normalize(r.text)]
        if not targets:
            raise ValidationError("No classifiable payee names to submit")

        lines = [
            self._client.build_batch_line(
                make_custom_id(raw.origin_row_index, position), raw.text
            )
            for position, raw in enumerate(targets)
        ]
        content = "\n".join(json.dumps(line, ensure_ascii=False) for line in lines)
        payload = content.encode("utf-8")

        logger.info(
            "Submitting batch: names=%d, requests=%d, deduplicated=%s",
            len(names),
            len(lines),
            deduplicate,
        )
        file_id = await self._retry.run(
            lambda: self._client.upload_batch_file(payload), operation="batch upload"
        )
        metadata = {
            "description": description or f"Payee classification ({len(names)} names)",
            "payee_count": str(len(names)),
            "deduplicated": "true" if deduplicate else "false",
        }
        raw_job = await self._retry.run(
            lambda: self._client.create_batch(file_id, metadata),
            operation="batch create",
        )
        job = self._to_job(raw_job)

        record = BatchJobRecord(
            job=job,
            payee_names=list(names),
            original_row_data=[dict(r) for r in original_rows or []],
            created_at=datetime.now(UTC),
        )
        async with self._session_factory() as session:
            await BatchJobRepository(session).save(record)

        logger.info("Batch job %s created (%s)", job.id, job.status.value)
        return job

    async def poll(self, job_id: str) -> BatchJob:
        """Fetch the remote status and store it. Safe to call concurrently."""
        validate_job_id(job_id)
        try:
            raw_job = await self._retry.run(
                lambda: self._client.retrieve_batch(job_id), operation="batch poll"
            )
            job = self._to_job(raw_job)
        except PayeeMLError as e:
            async with self._session_factory() as session:
                await BatchJobRepository(session).set_error(job_id, str(e))
            raise

        async with self._session_factory() as session:
            repo = BatchJobRepository(session)
            previous = await repo.get(job_id)
            if previous is not None:
                self._log_transition(previous.job, job)
            await repo.update_job(job)
        return job

    async def cancel(self, job_id: str) -> BatchJob:
        """Request cancellation. Polling continues until the remote side agrees."""
        await self.get_record(job_id)
        current = await self.poll(job_id)
        if not current.status.is_cancellable:
            raise BatchJobStateError(job_id, current.status.value, "cancel")

        raw_job = await self._retry.run(
            lambda: self._client.cancel_batch(job_id), operation="batch cancel"
        )
        job = self._to_job(raw_job)
        async with self._session_factory() as session:
            await BatchJobRepository(session).update_job(job)
        logger.info("Cancellation requested for %s (%s)", job_id, job.status.value)
        return job

    async def fetch_results(
        self, job: BatchJob, names: Sequence[str]
    ) -> list[PerRowResult]:
        """Download and align the output of a completed job."""
        if job.status is not BatchStatus.COMPLETED or not job.output_file_id:
            raise BatchJobStateError(job.id, job.status.value, "fetch results of")

        output_file_id = job.output_file_id
        text = await self._retry.run(
            lambda: self._client.download_file(output_file_id),
            operation="batch download",
        )
        return self.reconstruct(text, names, deduplicated=job.is_deduplicated)

    def reconstruct(
        self, output_text: str, names: Sequence[str], deduplicated: bool = False
    ) -> list[PerRowResult]:
        """Place each output line at the row its custom id names.

        Unusable lines are logged and dropped; rows without a line become
        failed placeholders, so the result always has ``len(names)`` entries.
        """
        total = len(names)
        slots: list[PerRowResult | None] = [None] * total
        now = datetime.now(UTC)
        dropped = 0

        for line_no, line in enumerate(output_text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning("Dropping unparseable output line %d: %s", line_no, e)
                dropped += 1
                continue
            if not isinstance(record, dict):
                logger.warning("Dropping non-object output line %d", line_no)
                dropped += 1
                continue

            ids = parse_custom_id(record.get("custom_id"))
            if ids is None:
                logger.warning(
                    "Dropping line %d: unrecognized custom id %r",
                    line_no,
                    record.get("custom_id"),
                )
                dropped += 1
                continue
            row_index, _ = ids
            if not 0 <= row_index < total:
                logger.warning(
                    "Dropping line %d: row index %d outside 0..%d",
                    line_no,
                    row_index,
                    total - 1,
                )
                dropped += 1
                continue
            if slots[row_index] is not None:
                logger.warning("Dropping duplicate output for row %d", row_index)
                dropped += 1
                continue

            slots[row_index] = self._row_result(record, row_index, names[row_index], now)

        if deduplicated:
            self._fan_out(slots, names)

        # Blank names are never submitted; they get the invalid-input default
        for i, name in enumerate(names):
            if not normalize(name or ""):
                slots[i] = self._invalid_row(i, name, now)

        results = [
            (
                slot
                if slot is not None
                else PerRowResult.failed(i, MISSING_RESULT_REASON, names[i])
            ).model_copy(update={"keyword_exclusion": self._excluder.check(names[i])})
            for i, slot in enumerate(slots)
        ]
        n_failed = sum(1 for r in results if r.status is RowStatus.FAILED)
        logger.info(
            "Reconstructed %d rows: %d succeeded, %d failed, %d lines dropped",
            total,
            total - n_failed,
            n_failed,
            dropped,
        )
        return results

    async def load_tracked_jobs(self) -> list[BatchJobRecord]:
        """Refresh every stored job. Jobs whose lookup fails are kept with the error."""
        async with self._session_factory() as session:
            records = await BatchJobRepository(session).list_all()

        refreshed: list[BatchJobRecord] = []
        for record in records:
            try:
                job = await self.poll(record.job.id)
                refreshed.append(record.model_copy(update={"job": job, "last_error": None}))
            except PayeeMLError as e:
                logger.warning("Could not refresh batch job %s: %s", record.job.id, e)
                refreshed.append(record.model_copy(update={"last_error": str(e)}))
        logger.info("Loaded %d tracked batch jobs", len(refreshed))
        return refreshed

    async def get_record(self, job_id: str) -> BatchJobRecord:
        validate_job_id(job_id)
        async with self._session_factory() as session:
            record = await BatchJobRepository(session).get(job_id)
        if record is None:
            raise JobNotFoundError(job_id)
        return record

    async def list_records(self) -> list[BatchJobRecord]:
        async with self._session_factory() as session:
            return await BatchJobRepository(session).list_all()

    async def remove(self, job_id: str) -> None:
        """Stop tracking a job locally. Does not touch the remote job."""
        validate_job_id(job_id)
        async with self._session_factory() as session:
            deleted = await BatchJobRepository(session).delete(job_id)
        if not deleted:
            raise JobNotFoundError(job_id)
        logger.info("Removed batch job %s", job_id)

    def _row_result(
        self, record: dict[str, Any], row_index: int, name: str, now: datetime
    ) -> PerRowResult:
        try:
            answer = self._client.parse_batch_line(record)
        except ParseError as e:
            logger.warning("Row %d has no usable answer: %s", row_index, e)
            return PerRowResult.failed(row_index, f"Unreadable model answer: {e}", name)
        return PerRowResult(
            row_index=row_index,
            status=RowStatus.SUCCESS,
            payee_name=name,
            classification=answer.classification,
            confidence=answer.confidence,
            reasoning=labelled_reasoning("Batch AI classification", answer.reasoning),
            tier=Tier.AI_CONSENSUS,
            matching_rules=answer.matching_rules,
            timestamp=now,
        )

    @staticmethod
    def _invalid_row(row_index: int, name: str | None, now: datetime) -> PerRowResult:
        result = invalid_input_result()
        return PerRowResult(
            row_index=row_index,
            status=RowStatus.SUCCESS,
            payee_name=name,
            classification=result.classification,
            confidence=result.confidence,
            reasoning=result.reasoning,
            tier=result.tier,
            matching_rules=result.matching_rules,
            timestamp=now,
        )

    def _fan_out(self, slots: list[PerRowResult | None], names: Sequence[str]) -> None:
        """Copy canonical results to the empty slots of their cluster members."""
        raws = [RawName(text=name or "", origin_row_index=i) for i, name in enumerate(names)]
        for cluster in self._deduplicator.cluster(raws):
            source = slots[cluster.canonical.origin_row_index]
            if source is None or source.status is not RowStatus.SUCCESS:
                continue
            for member in cluster.members[1:]:
                if slots[member.origin_row_index] is not None:
                    continue
                slots[member.origin_row_index] = source.model_copy(
                    update={
                        "row_index": member.origin_row_index,
                        "payee_name": member.text,
                        "reasoning": (
                            f"{source.reasoning} {DERIVED_MARKER} "
                            f"{cluster.canonical_name!r})"
                        ),
                    }
                )

    @staticmethod
    def _to_job(raw: dict[str, Any]) -> BatchJob:
        try:
            return BatchJob.model_validate(raw)
        except PydanticValidationError as e:
            raise ParseError(
                "Batch API returned an unreadable job", {"errors": e.errors()}
            ) from e

    @staticmethod
    def _log_transition(previous: BatchJob, current: BatchJob) -> None:
        if previous.status == current.status:
            return
        if not previous.status.can_transition_to(current.status):
            logger.warning(
                "Batch job %s moved %s -> %s (unexpected, accepting remote state)",
                current.id,
                previous.status.value,
                current.status.value,
            )
        else:
            logger.info(
                "Batch job %s: %s -> %s",
                current.id,
                previous.status.value,
                current.status.value,
            )
