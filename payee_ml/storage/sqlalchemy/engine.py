"""Async engine for the local batch job store."""

import logging
from functools import lru_cache
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from payee_ml.config.settings import get_settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Engine for ``database_url``; creates the directory of a SQLite file."""
    url = make_url(database_url)
    is_sqlite = url.get_backend_name() == "sqlite"
    if is_sqlite and url.database and url.database != ":memory:":
        Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)

    # No pre-ping for SQLite, connections are local files
    return create_async_engine(database_url, echo=echo, pool_pre_ping=not is_sqlite)


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """Shared engine for the configured job store."""
    settings = get_settings()
    logger.debug("Creating job store engine for %s", settings.database_url.split("@")[-1])
    return build_engine(settings.database_url, settings.database_echo)


@lru_cache(maxsize=1)
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Shared session factory bound to ``get_engine()``."""
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
    )
