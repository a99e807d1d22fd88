"""Synchronous classification endpoints."""

import logging
import time

from fastapi import APIRouter

from payee_ml.api.dependencies import BatchClassifierDep, ClassifierDep
from payee_ml.api.schemas import (
    ClassificationOptions,
    ClassifyBatchRequest,
    ClassifyBatchResponse,
    ClassifyRequest,
    ClassifyResponse,
)
from payee_ml.export import (
    ResultAligner,
    compute_statistics,
    row_results_from_classifications,
)
from payee_ml.inference import ClassificationConfig
from payee_ml.inference.classification import is_derived

logger = logging.getLogger(__name__)

router = APIRouter()


def _config(
    default: ClassificationConfig, options: ClassificationOptions | None
) -> ClassificationConfig:
    if options is None:
        return default
    return default.with_overrides(**options.model_dump())


@router.post("/classify", response_model=ClassifyResponse)
async def classify_payee(
    request: ClassifyRequest, classifier: ClassifierDep
) -> ClassifyResponse:
    """Classify one payee name."""
    start_time = time.perf_counter()
    config = _config(classifier.default_config, request.options)
    result = await classifier.classify(request.name, config)
    elapsed_ms = int((time.perf_counter() - start_time) * 1000)
    logger.debug(
        "POST /classify: %r -> %s (%d, %s)",
        request.name,
        result.classification.value,
        result.confidence,
        result.tier.value,
    )
    return ClassifyResponse(
        name=request.name, result=result, processing_time_ms=elapsed_ms
    )


@router.post("/classify/batch", response_model=ClassifyBatchResponse)
async def classify_payees(
    request: ClassifyBatchRequest, batch: BatchClassifierDep
) -> ClassifyBatchResponse:
    """Classify a list of payee names and merge them into export rows."""
    start_time = time.perf_counter()
    logger.info(
        "POST /classify/batch: names=%d, original_rows=%s",
        len(request.names),
        request.original_rows is not None,
    )
    config = _config(batch.classifier.default_config, request.options)
    classifications = await batch.classify_batch(
        request.names, config, original_rows=request.original_rows
    )

    results = row_results_from_classifications(classifications)
    rows = ResultAligner().merge(request.original_rows, results)
    elapsed_ms = int((time.perf_counter() - start_time) * 1000)
    distinct = sum(1 for c in classifications if not is_derived(c.result))
    stats = compute_statistics(
        results, distinct_names=distinct, processing_time_ms=elapsed_ms
    )
    logger.info(
        "Classification complete: %d names in %dms, tiers=%s",
        len(results),
        elapsed_ms,
        stats.by_tier,
    )
    return ClassifyBatchResponse(rows=rows, stats=stats, processing_time_ms=elapsed_ms)
