"""Pydantic and dataclass domain models."""

from .batch_job import (
    BatchJob,
    BatchJobRecord,
    BatchStatus,
    PerRowResult,
    RequestCounts,
    RowStatus,
)
from .classification import (
    ClassificationResult,
    KeywordExclusion,
    NameCluster,
    PayeeClassification,
    PayeeType,
    RawName,
    Tier,
    clamp_confidence,
)

__all__ = [
    "BatchJob",
    "BatchJobRecord",
    "BatchStatus",
    "ClassificationResult",
    "KeywordExclusion",
    "NameCluster",
    "PayeeClassification",
    "PayeeType",
    "PerRowResult",
    "RawName",
    "RequestCounts",
    "RowStatus",
    "Tier",
    "clamp_confidence",
]
