"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, Request

from payee_ml.batch import BatchOrchestrator, PollScheduler
from payee_ml.inference import BatchClassifier, TieredClassifier


def get_classifier(request: Request) -> TieredClassifier:
    return request.app.state.classifier


def get_batch_classifier(request: Request) -> BatchClassifier:
    return request.app.state.batch_classifier


def get_orchestrator(request: Request) -> BatchOrchestrator:
    return request.app.state.orchestrator


def get_scheduler(request: Request) -> PollScheduler:
    return request.app.state.scheduler


ClassifierDep = Annotated[TieredClassifier, Depends(get_classifier)]
BatchClassifierDep = Annotated[BatchClassifier, Depends(get_batch_classifier)]
OrchestratorDep = Annotated[BatchOrchestrator, Depends(get_orchestrator)]
SchedulerDep = Annotated[PollScheduler, Depends(get_scheduler)]
