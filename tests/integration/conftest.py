"""Fixtures for API integration tests."""

from collections.abc import AsyncIterator, Generator
from contextlib import asynccontextmanager
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from payee_ml import __version__
from payee_ml.api.exception_handlers import setup_exception_handlers
from payee_ml.api.routes import batch_jobs, classify, health
from payee_ml.batch import BatchOrchestrator, PollScheduler
from payee_ml.data_models import PayeeType
from payee_ml.inference.classification import BatchClassifier, TieredClassifier
from payee_ml.retry import RetryPolicy
from payee_ml.storage import Base
from tests.fakes import FakeBatchApi, ScriptedInference, ai


@pytest.fixture
def batch_api() -> FakeBatchApi:
    return FakeBatchApi()


@pytest.fixture
def inference() -> ScriptedInference:
    return ScriptedInference(ai(PayeeType.BUSINESS, 93, "Reads like a company"))


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """File database with tables created up front."""
    path = tmp_path / "payee_ml.db"
    engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(engine)
    engine.dispose()
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def test_client(
    batch_api: FakeBatchApi,
    inference: ScriptedInference,
    database_url: str,
    no_wait_retry: RetryPolicy,
) -> Generator[TestClient, None, None]:
    """Test client over the real routers with in-memory upstream fakes."""
    # Connections must be opened on the client's event loop
    engine = create_async_engine(database_url, poolclass=NullPool)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    classifier = TieredClassifier(inference=inference, retry=no_wait_retry)
    orchestrator = BatchOrchestrator(batch_api, session_maker, retry=no_wait_retry)
    scheduler = PollScheduler(orchestrator, interval=3600.0)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await scheduler.shutdown()

    app = FastAPI(title="Payee ML (Test)", version=__version__, lifespan=lifespan)
    setup_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(classify.router)
    app.include_router(batch_jobs.router)

    app.state.inference_client = batch_api
    app.state.classifier = classifier
    app.state.batch_classifier = BatchClassifier(classifier)
    app.state.orchestrator = orchestrator
    app.state.scheduler = scheduler

    with TestClient(app) as client:
        yield client
