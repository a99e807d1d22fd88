"""API route handlers."""

from payee_ml.api.routes import batch_jobs, classify, health

__all__ = ["batch_jobs", "classify", "health"]
