"""Bulk classification with deduplication and bounded concurrency."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import Counter
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from payee_ml.data_models import (
    ClassificationResult,
    NameCluster,
    PayeeClassification,
    RawName,
)
from payee_ml.exceptions import AuthError, ValidationError

from .classifier import TieredClassifier
from .context import ClassificationConfig, ProgressCallback
from .dedup import Deduplicator
from .normalizer import normalize

logger = logging.getLogger(__name__)


DERIVED_MARKER = "(derived from canonical name"


def derived_result(
    result: ClassificationResult, canonical_name: str
) -> ClassificationResult:
    """Copy of a cluster result for a non-canonical member."""
    return result.model_copy(
        update={
            "reasoning": f"{result.reasoning} {DERIVED_MARKER} {canonical_name!r})",
            "matching_rules": list(result.matching_rules),
        }
    )


def is_derived(result: ClassificationResult) -> bool:
    """Whether ``result`` was copied from its cluster's canonical name."""
    return DERIVED_MARKER in result.reasoning


class BatchClassifier:
    """Application service for classifying many payee names at once.

    Steps:
    1. Build RawNames bound to their input rows
    2. Deduplicate (single pass, before any classification)
    3. Classify each cluster's canonical name once, at most
       ``config.max_concurrency`` clusters in flight
    4. Copy each cluster result to every member row

    Usage:
        batch = BatchClassifier(classifier)
        rows = await batch.classify_batch(names, config, progress=print_progress)
        rows[i].payee_name == names[i]

    An AuthError aborts the whole batch. Any other failure has already been
    turned into a Fallback result by the classifier.
    """

    def __init__(self, classifier: TieredClassifier):
        self._classifier = classifier

    @property
    def classifier(self) -> TieredClassifier:
        return self._classifier

    async def classify_batch(
        self,
        names: Sequence[str],
        config: ClassificationConfig | None = None,
        original_rows: Sequence[dict[str, Any]] | None = None,
        progress: ProgressCallback | None = None,
    ) -> list[PayeeClassification]:
        """Classify ``names``; element i of the result belongs to ``names[i]``."""
        config = config or self._classifier.default_config
        if original_rows is not None and len(original_rows) != len(names):
            raise ValidationError(
                f"Got {len(names)} names but {len(original_rows)} original rows",
                details={"names": len(names), "rows": len(original_rows)},
            )

        start = time.perf_counter()
        total = len(names)
        raws = [
            RawName(
                text=name or "",
                origin_row_index=i,
                original_row_data=dict(original_rows[i]) if original_rows else None,
            )
            for i, name in enumerate(names)
        ]
        if total == 0:
            _report(progress, 0, 0, "complete")
            return []

        _report(progress, 0, total, "deduplicating")
        clusters = self._cluster(raws, config)
        logger.info(
            "Starting batch classification: names=%d, clusters=%d, concurrency=%d",
            total,
            len(clusters),
            config.max_concurrency,
        )

        slots: list[PayeeClassification | None] = [None] * total
        done = 0
        semaphore = asyncio.Semaphore(config.max_concurrency)

        async def run(cluster: NameCluster) -> None:
            nonlocal done
            async with semaphore:
                result = await self._classifier.classify(
                    cluster.canonical_name, config, propagate_auth=True
                )
            now = datetime.now(UTC)
            for member in cluster.members:
                member_result = (
                    result
                    if member is cluster.canonical
                    else self._classifier.flag_exclusion(
                        member.text, derived_result(result, cluster.canonical_name)
                    )
                )
                slots[member.origin_row_index] = PayeeClassification(
                    row_index=member.origin_row_index,
                    payee_name=member.text,
                    result=member_result,
                    original_data=member.original_row_data,
                    timestamp=now,
                )
            done += len(cluster.members)
            _report(progress, done, total, "classifying")

        tasks = [asyncio.create_task(run(cluster)) for cluster in clusters]
        try:
            await asyncio.gather(*tasks)
        except AuthError:
            logger.error("Batch aborted: inference endpoint rejected credentials")
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        results = [slot for slot in slots if slot is not None]
        if len(results) != total:
            raise RuntimeError(
                f"Batch produced {len(results)} results for {total} names"
            )

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            "Batch classification complete: %d names in %dms, tiers=%s",
            total,
            elapsed_ms,
            dict(Counter(r.result.tier.value for r in results)),
        )
        _report(progress, total, total, "complete")
        return results

    @staticmethod
    def _cluster(
        raws: list[RawName], config: ClassificationConfig
    ) -> list[NameCluster]:
        if config.dedup_enabled:
            return Deduplicator(config.similarity_threshold).cluster(raws)
        return [NameCluster(key=normalize(r.text), members=[r]) for r in raws]


def _report(
    progress: ProgressCallback | None, current: int, total: int, phase: str
) -> None:
    if progress is None:
        return
    percentage = 100.0 if total == 0 else round(current * 100 / total, 1)
    try:
        progress(current, total, percentage, phase)
    except Exception:
        logger.exception("Progress callback failed")
