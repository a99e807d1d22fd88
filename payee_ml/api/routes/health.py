"""Health check endpoint."""

from fastapi import APIRouter, Request

from payee_ml import __version__
from payee_ml.api.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Check service health and whether the AI tier is available."""
    classifier = request.app.state.classifier
    client = getattr(request.app.state, "inference_client", None)
    scheduler = getattr(request.app.state, "scheduler", None)

    return HealthResponse(
        status="ok" if classifier.has_inference else "degraded",
        version=__version__,
        inference_configured=classifier.has_inference,
        model_name=client.model_name if client is not None else "",
        jobs_polling=len(scheduler.active_jobs) if scheduler is not None else 0,
    )
