"""Health check endpoints."""

from fastapi import APIRouter, Request

from ... import __version__
from ..schemas import HealthResponse

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the API server is running and which API it fronts.",
)
def health_check(request: Request) -> HealthResponse:
    """Return health status of the API server."""
    orchestrator = request.app.state.orchestrator
    return HealthResponse(
        status="healthy",
        version=__version__,
        api_base_url=orchestrator.api_config.base_url,
        operations=orchestrator.registry.names(),
    )
