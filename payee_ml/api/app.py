"""FastAPI application with lifespan management."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from payee_ml import __version__
from payee_ml.batch import BatchOrchestrator, PollScheduler
from payee_ml.config import configure_logging, get_settings
from payee_ml.inference import (
    BatchClassifier,
    create_classifier,
    create_excluder,
    create_inference_client,
)
from payee_ml.inference.classification import Deduplicator
from payee_ml.retry import RetryPolicy
from payee_ml.storage import Base, get_engine, get_session_maker

from .exception_handlers import setup_exception_handlers

logger = logging.getLogger(__name__)


async def _init_database(engine: AsyncEngine) -> None:
    """Initialize database tables."""
    logger.info("Initializing database tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


def _log_settings() -> None:
    """Log current settings for debugging."""
    settings = get_settings()

    logger.info("=" * 60)
    logger.info("Payee Classification Service Configuration")
    logger.info("=" * 60)
    logger.info("  Log level: %s", settings.log_level)
    logger.info("  Database: %s", settings.database_url.split("@")[-1])  # Hide password
    logger.info("  Inference:")
    logger.info("    Base URL: %s", settings.inference_base_url)
    logger.info("    Model: %s", settings.inference_model)
    logger.info("    API key set: %s", settings.inference_api_key is not None)
    logger.info("    Timeout: %.1fs (status %.1fs)", settings.inference_timeout, settings.status_timeout)
    logger.info("  Classification:")
    logger.info("    AI threshold: %d", settings.ai_threshold)
    logger.info("    Consensus: %s (%d runs)", settings.use_consensus, settings.consensus_runs)
    logger.info("    Max concurrency: %d", settings.max_concurrency)
    logger.info("    Dedup: %s (threshold %.2f)", settings.dedup_enabled, settings.similarity_threshold)
    logger.info("  Batch jobs:")
    logger.info("    Poll interval: %.0fs (max %.0fs)", settings.poll_interval, settings.poll_max_interval)
    logger.info("    Completion window: %s", settings.completion_window)
    logger.info("=" * 60)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Wire services at startup, stop polling and close the database at shutdown."""
    configure_logging()
    settings = get_settings()
    _log_settings()

    engine = get_engine()
    await _init_database(engine)
    app.state.db_engine = engine

    client = create_inference_client(settings)
    classifier = create_classifier(settings, client)
    orchestrator = BatchOrchestrator(
        client,
        get_session_maker(),
        retry=RetryPolicy.from_settings(settings, timeout=settings.status_timeout),
        deduplicator=Deduplicator(settings.similarity_threshold),
        excluder=create_excluder(settings),
    )
    scheduler = PollScheduler(
        orchestrator,
        interval=settings.poll_interval,
        max_interval=settings.poll_max_interval,
    )

    app.state.settings = settings
    app.state.inference_client = client
    app.state.classifier = classifier
    app.state.batch_classifier = BatchClassifier(classifier)
    app.state.orchestrator = orchestrator
    app.state.scheduler = scheduler

    # Re-fetch jobs tracked by a previous run and resume the unfinished ones
    await scheduler.resume()

    logger.info("Payee classification service ready")
    yield

    logger.info("Shutting down")
    await scheduler.shutdown()
    del app.state.scheduler
    del app.state.orchestrator
    del app.state.batch_classifier
    del app.state.classifier

    # Close database connections
    await app.state.db_engine.dispose()
    del app.state.db_engine


def create_app() -> FastAPI:
    """Create FastAPI application."""
    from payee_ml.api.routes import batch_jobs, classify, health

    app = FastAPI(
        title="Payee Classification Service",
        description="Business / Individual payee classification",
        version=__version__,
        lifespan=lifespan,
    )
    setup_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(classify.router, tags=["classification"])
    app.include_router(batch_jobs.router, tags=["batch-jobs"])

    return app


# For uvicorn
app = create_app()
