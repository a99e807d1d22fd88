"""Request and response models for the HTTP API."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from payee_ml.data_models import BatchJob, BatchJobRecord, ClassificationResult
from payee_ml.export import BatchStatistics


class ClassificationOptions(BaseModel):
    """Per-request overrides of the service defaults."""

    ai_threshold: int | None = Field(default=None, ge=0, le=100)
    bypass_rule_tiers: bool | None = None
    offline_mode: bool | None = None
    use_consensus: bool | None = None
    consensus_runs: int | None = Field(default=None, ge=1, le=7)
    dedup_enabled: bool | None = None
    similarity_threshold: float | None = Field(default=None, ge=0.0, le=1.0)
    max_concurrency: int | None = Field(default=None, ge=1, le=50)


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"]
    version: str
    inference_configured: bool
    model_name: str
    jobs_polling: int


class ClassifyRequest(BaseModel):
    name: str = Field(max_length=1000)
    options: ClassificationOptions | None = None


class ClassifyResponse(BaseModel):
    name: str
    result: ClassificationResult
    processing_time_ms: int


class ClassifyBatchRequest(BaseModel):
    names: list[str] = Field(min_length=1, max_length=10000)
    original_rows: list[dict[str, Any]] | None = None
    options: ClassificationOptions | None = None


class ClassifyBatchResponse(BaseModel):
    rows: list[dict[str, Any]]
    stats: BatchStatistics
    processing_time_ms: int


class SubmitBatchRequest(BaseModel):
    names: list[str] = Field(min_length=1, max_length=50000)
    description: str = ""
    original_rows: list[dict[str, Any]] | None = None
    deduplicate: bool = True


class PollingStateResponse(BaseModel):
    is_polling: bool = False
    poll_count: int = 0
    consecutive_failures: int = 0
    last_error: str | None = None
    last_polled_at: datetime | None = None
    last_status: str | None = None


class BatchJobResponse(BaseModel):
    job: BatchJob
    payee_count: int
    created_at: datetime
    last_error: str | None = None
    polling: PollingStateResponse

    @classmethod
    def from_record(
        cls, record: BatchJobRecord, polling: PollingStateResponse
    ) -> "BatchJobResponse":
        return cls(
            job=record.job,
            payee_count=len(record.payee_names),
            created_at=record.created_at,
            last_error=record.last_error,
            polling=polling,
        )


class BatchResultsResponse(BaseModel):
    job_id: str
    rows: list[dict[str, Any]]
    stats: BatchStatistics
