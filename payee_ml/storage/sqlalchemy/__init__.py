"""SQLAlchemy persistence layer for local job storage."""

from .engine import build_engine, get_engine, get_session_maker
from .repositories import BatchJobRepository
from .tables import Base, BatchJobTable

__all__ = [
    # Engine
    "build_engine",
    "get_engine",
    "get_session_maker",
    # Tables
    "Base",
    "BatchJobTable",
    # Repositories
    "BatchJobRepository",
]
