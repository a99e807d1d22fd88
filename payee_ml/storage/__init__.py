"""Local storage layer.

This module provides:
- `sqlalchemy`: async persistence layer (tables, repositories)

Note: Domain models are in `payee_ml.data_models`.
"""

from payee_ml.data_models import BatchJob, BatchJobRecord

from .sqlalchemy import (
    Base,
    BatchJobRepository,
    BatchJobTable,
    build_engine,
    get_engine,
    get_session_maker,
)

__all__ = [
    # Domain models (Pydantic)
    "BatchJob",
    "BatchJobRecord",
    # SQLAlchemy tables
    "Base",
    "BatchJobTable",
    # Database
    "build_engine",
    "get_engine",
    "get_session_maker",
    # Repositories
    "BatchJobRepository",
]
