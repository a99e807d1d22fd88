"""Wiring of the classification stack from settings."""

import logging

from payee_ml.config import Settings
from payee_ml.retry import RetryPolicy

from .classification import (
    ClassificationCache,
    ClassificationConfig,
    KeywordExcluder,
    TieredClassifier,
)
from .clients import OpenAICompatibleClient

logger = logging.getLogger(__name__)


def create_inference_client(settings: Settings) -> OpenAICompatibleClient:
    api_key = settings.inference_api_key
    return OpenAICompatibleClient(
        api_key=api_key.get_secret_value() if api_key else "",
        base_url=settings.inference_base_url,
        model=settings.inference_model,
        timeout=settings.inference_timeout,
        status_timeout=settings.status_timeout,
        completion_window=settings.completion_window,
    )


def create_excluder(settings: Settings) -> KeywordExcluder:
    if not settings.exclusion_keywords:
        logger.info("Keyword exclusion disabled")
    return KeywordExcluder(settings.exclusion_keywords)


def create_classifier(
    settings: Settings, client: OpenAICompatibleClient | None = None
) -> TieredClassifier:
    """Tiered classifier with cache and retry. No AI tier without an API key."""
    if settings.inference_api_key is None:
        logger.warning("No inference API key configured, AI tier disabled")
        client = None
    elif client is None:
        client = create_inference_client(settings)

    return TieredClassifier(
        inference=client,
        retry=RetryPolicy.from_settings(settings, timeout=settings.inference_timeout),
        cache=ClassificationCache(
            ttl_seconds=settings.cache_ttl_seconds,
            max_entries=settings.cache_max_entries,
        ),
        default_config=ClassificationConfig.from_settings(settings),
        max_ai_concurrency=settings.max_concurrency,
        excluder=create_excluder(settings),
    )
