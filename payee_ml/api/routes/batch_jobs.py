"""Asynchronous batch job endpoints."""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Query, status

from payee_ml.api.dependencies import ClassifierDep, OrchestratorDep, SchedulerDep
from payee_ml.api.schemas import (
    BatchJobResponse,
    BatchResultsResponse,
    PollingStateResponse,
    SubmitBatchRequest,
)
from payee_ml.batch import PollScheduler, recover_failed_rows
from payee_ml.data_models import BatchJobRecord
from payee_ml.export import ResultAligner, compute_statistics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/batch-jobs")


def _to_response(record: BatchJobRecord, scheduler: PollScheduler) -> BatchJobResponse:
    state = scheduler.state(record.job.id)
    polling = PollingStateResponse.model_validate(asdict(state))
    return BatchJobResponse.from_record(record, polling)


@router.post("", response_model=BatchJobResponse, status_code=status.HTTP_201_CREATED)
async def submit_batch_job(
    request: SubmitBatchRequest,
    orchestrator: OrchestratorDep,
    scheduler: SchedulerDep,
) -> BatchJobResponse:
    """Submit payee names as one asynchronous batch job and start polling it."""
    logger.info(
        "POST /batch-jobs: names=%d, deduplicate=%s",
        len(request.names),
        request.deduplicate,
    )
    job = await orchestrator.submit(
        request.names,
        description=request.description,
        original_rows=request.original_rows,
        deduplicate=request.deduplicate,
    )
    if not job.status.is_terminal:
        scheduler.start(job.id)
    record = await orchestrator.get_record(job.id)
    return _to_response(record, scheduler)


@router.get("", response_model=list[BatchJobResponse])
async def list_batch_jobs(
    orchestrator: OrchestratorDep, scheduler: SchedulerDep
) -> list[BatchJobResponse]:
    """List tracked batch jobs with their last known status."""
    records = await orchestrator.list_records()
    return [_to_response(record, scheduler) for record in records]


@router.get("/{job_id}", response_model=BatchJobResponse)
async def get_batch_job(
    job_id: str, orchestrator: OrchestratorDep, scheduler: SchedulerDep
) -> BatchJobResponse:
    """Poll the job now and return its refreshed record."""
    await orchestrator.get_record(job_id)
    await scheduler.refresh(job_id)
    record = await orchestrator.get_record(job_id)
    return _to_response(record, scheduler)


@router.post("/{job_id}/cancel", response_model=BatchJobResponse)
async def cancel_batch_job(
    job_id: str, orchestrator: OrchestratorDep, scheduler: SchedulerDep
) -> BatchJobResponse:
    """Request cancellation; polling continues until the job is cancelled."""
    job = await orchestrator.cancel(job_id)
    if not job.status.is_terminal:
        scheduler.start(job_id)
    record = await orchestrator.get_record(job_id)
    return _to_response(record, scheduler)


@router.get("/{job_id}/results", response_model=BatchResultsResponse)
async def get_batch_results(
    job_id: str,
    orchestrator: OrchestratorDep,
    classifier: ClassifierDep,
    recover: bool = Query(default=False, description="Classify failed rows locally"),
) -> BatchResultsResponse:
    """Download a completed job and merge its results into export rows."""
    record = await orchestrator.get_record(job_id)
    results = await orchestrator.fetch_results(record.job, record.payee_names)
    if recover:
        results = await recover_failed_rows(results, record.payee_names, classifier)

    original_rows = record.original_row_data or None
    rows = ResultAligner().merge(original_rows, results)
    return BatchResultsResponse(
        job_id=job_id,
        rows=rows,
        stats=compute_statistics(results),
    )


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_batch_job(
    job_id: str, orchestrator: OrchestratorDep, scheduler: SchedulerDep
) -> None:
    """Stop tracking a job locally. The remote job is left alone."""
    await scheduler.forget(job_id)
    await orchestrator.remove(job_id)
