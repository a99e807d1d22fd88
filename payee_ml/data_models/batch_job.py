"""Batch job domain models."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .classification import KeywordExclusion, PayeeType, Tier


class BatchStatus(str, Enum):
    """Remote batch job state."""

    VALIDATING = "validating"
    IN_PROGRESS = "in_progress"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    FAILED = "failed"
    EXPIRED = "expired"
    CANCELLING = "cancelling"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL

    @property
    def is_cancellable(self) -> bool:
        return self in _CANCELLABLE

    def can_transition_to(self, new: "BatchStatus") -> bool:
        """Whether ``new`` is a legal successor of this state."""
        return new == self or new in _TRANSITIONS[self]


_TERMINAL = frozenset(
    {
        BatchStatus.COMPLETED,
        BatchStatus.FAILED,
        BatchStatus.EXPIRED,
        BatchStatus.CANCELLED,
    }
)

_CANCELLABLE = frozenset(
    {BatchStatus.VALIDATING, BatchStatus.IN_PROGRESS, BatchStatus.FINALIZING}
)

_TRANSITIONS: dict[BatchStatus, frozenset[BatchStatus]] = {
    BatchStatus.VALIDATING: frozenset(
        {
            BatchStatus.IN_PROGRESS,
            BatchStatus.FINALIZING,
            BatchStatus.COMPLETED,
            BatchStatus.FAILED,
            BatchStatus.EXPIRED,
            BatchStatus.CANCELLING,
        }
    ),
    BatchStatus.IN_PROGRESS: frozenset(
        {
            BatchStatus.FINALIZING,
            BatchStatus.COMPLETED,
            BatchStatus.FAILED,
            BatchStatus.EXPIRED,
            BatchStatus.CANCELLING,
        }
    ),
    BatchStatus.FINALIZING: frozenset(
        {
            BatchStatus.COMPLETED,
            BatchStatus.FAILED,
            BatchStatus.EXPIRED,
            BatchStatus.CANCELLING,
        }
    ),
    BatchStatus.CANCELLING: frozenset({BatchStatus.CANCELLED}),
    BatchStatus.COMPLETED: frozenset(),
    BatchStatus.FAILED: frozenset(),
    BatchStatus.EXPIRED: frozenset(),
    BatchStatus.CANCELLED: frozenset(),
}


class RequestCounts(BaseModel):
    total: int = 0
    completed: int = 0
    failed: int = 0


class BatchJob(BaseModel):
    """Remote batch job as reported by the inference endpoint.

    Timestamps are Unix seconds, one per state the job has entered.
    """

    id: str
    status: BatchStatus
    input_file_id: str | None = None
    output_file_id: str | None = None
    error_file_id: str | None = None
    created_at: int | None = None
    in_progress_at: int | None = None
    finalizing_at: int | None = None
    completed_at: int | None = None
    failed_at: int | None = None
    expired_at: int | None = None
    cancelling_at: int | None = None
    cancelled_at: int | None = None
    request_counts: RequestCounts = Field(default_factory=RequestCounts)
    metadata: dict[str, str] = Field(default_factory=dict)
    errors: Any = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("metadata", "request_counts", mode="before")
    @classmethod
    def default_when_null(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def is_deduplicated(self) -> bool:
        return self.metadata.get("deduplicated") == "true"


class BatchJobRecord(BaseModel):
    """Locally persisted batch job plus everything needed to rebuild rows."""

    job: BatchJob
    payee_names: list[str]
    original_row_data: list[dict[str, Any]] = Field(default_factory=list)
    created_at: datetime
    last_error: str | None = None


class RowStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


class PerRowResult(BaseModel):
    """Result slot for one input row, successful or not."""

    row_index: int
    status: RowStatus
    payee_name: str | None = None
    classification: PayeeType | None = None
    confidence: int | None = Field(default=None, ge=0, le=100)
    reasoning: str | None = None
    tier: Tier | None = None
    matching_rules: list[str] = Field(default_factory=list)
    timestamp: datetime | None = None
    keyword_exclusion: KeywordExclusion | None = None

    @classmethod
    def failed(
        cls, row_index: int, reason: str, payee_name: str | None = None
    ) -> "PerRowResult":
        return cls(
            row_index=row_index,
            status=RowStatus.FAILED,
            payee_name=payee_name,
            reasoning=reason,
        )
