"""Inference endpoint clients."""

from .openai_compatible import OpenAICompatibleClient
from .port import AIClassification, BatchInferenceClient, InferenceClient

__all__ = [
    "AIClassification",
    "BatchInferenceClient",
    "InferenceClient",
    "OpenAICompatibleClient",
]
