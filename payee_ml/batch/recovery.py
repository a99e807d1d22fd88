"""Local re-classification of rows a batch job could not answer."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from payee_ml.data_models import PerRowResult, RowStatus

if TYPE_CHECKING:
    from payee_ml.inference.classification import (
        ClassificationConfig,
        TieredClassifier,
    )

logger = logging.getLogger(__name__)


async def recover_failed_rows(
    results: Sequence[PerRowResult],
    names: Sequence[str],
    classifier: TieredClassifier,
    config: ClassificationConfig | None = None,
) -> list[PerRowResult]:
    """Classify failed rows locally in offline mode; other rows pass through."""
    offline = (config or classifier.default_config).with_overrides(offline_mode=True)
    recovered: list[PerRowResult] = []
    n_recovered = 0

    for row in results:
        if row.status is not RowStatus.FAILED:
            recovered.append(row)
            continue
        name = names[row.row_index] if 0 <= row.row_index < len(names) else ""
        result = await classifier.classify(name, offline)
        recovered.append(
            PerRowResult(
                row_index=row.row_index,
                status=RowStatus.SUCCESS,
                payee_name=name,
                classification=result.classification,
                confidence=result.confidence,
                reasoning=(
                    f"{result.reasoning} (recovered locally: "
                    f"{row.reasoning or 'batch row failed'})"
                ),
                tier=result.tier,
                matching_rules=result.matching_rules,
                timestamp=datetime.now(UTC),
                keyword_exclusion=result.keyword_exclusion,
            )
        )
        n_recovered += 1

    if n_recovered:
        logger.info("Recovered %d failed batch rows locally", n_recovered)
    return recovered
