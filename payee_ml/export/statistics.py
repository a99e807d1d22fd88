"""Summary statistics for a classified batch."""

from collections import Counter
from collections.abc import Sequence

from pydantic import BaseModel, Field

from payee_ml.data_models import PayeeType, PerRowResult, RowStatus

HIGH_CONFIDENCE = 90
MEDIUM_CONFIDENCE = 70


class BatchStatistics(BaseModel):
    """Batch summary: label, tier and confidence counts plus dedup savings.

    ``keyword_excluded`` counts every row whose name hit an exclusion keyword.
    """

    total: int = 0
    successful: int = 0
    failed: int = 0
    business: int = 0
    individual: int = 0
    by_tier: dict[str, int] = Field(default_factory=dict)
    by_confidence: dict[str, int] = Field(default_factory=dict)
    average_confidence: float = 0.0
    keyword_excluded: int = 0
    distinct_names: int | None = None
    dedup_savings: int = 0
    processing_time_ms: int | None = None


def _bucket(confidence: int) -> str:
    if confidence >= HIGH_CONFIDENCE:
        return "high"
    if confidence >= MEDIUM_CONFIDENCE:
        return "medium"
    return "low"


def compute_statistics(
    results: Sequence[PerRowResult],
    distinct_names: int | None = None,
    processing_time_ms: int | None = None,
) -> BatchStatistics:
    """Counts by label, tier and confidence bucket over successful rows."""
    ok = [r for r in results if r.status is RowStatus.SUCCESS]
    confidences = [r.confidence for r in ok if r.confidence is not None]

    return BatchStatistics(
        total=len(results),
        successful=len(ok),
        failed=len(results) - len(ok),
        business=sum(1 for r in ok if r.classification is PayeeType.BUSINESS),
        individual=sum(1 for r in ok if r.classification is PayeeType.INDIVIDUAL),
        by_tier=dict(Counter(r.tier.value for r in ok if r.tier is not None)),
        by_confidence=dict(Counter(_bucket(c) for c in confidences)),
        average_confidence=(
            round(sum(confidences) / len(confidences), 1) if confidences else 0.0
        ),
        keyword_excluded=sum(
            1 for r in results if r.keyword_exclusion and r.keyword_exclusion.is_excluded
        ),
        distinct_names=distinct_names,
        dedup_savings=(
            max(0, len(results) - distinct_names) if distinct_names is not None else 0
        ),
        processing_time_ms=processing_time_ms,
    )
