"""Payee inference: classification pipeline and inference endpoint clients."""

from .classification import (
    BatchClassifier,
    ClassificationCache,
    ClassificationConfig,
    TieredClassifier,
)
from .clients import InferenceClient, OpenAICompatibleClient
from .factory import create_classifier, create_excluder, create_inference_client

__all__ = [
    "BatchClassifier",
    "ClassificationCache",
    "ClassificationConfig",
    "InferenceClient",
    "OpenAICompatibleClient",
    "TieredClassifier",
    "create_classifier",
    "create_excluder",
    "create_inference_client",
]
