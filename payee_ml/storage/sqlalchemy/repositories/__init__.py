from .batch_job import BatchJobRepository

__all__ = ["BatchJobRepository"]
