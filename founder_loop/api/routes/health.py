"""Health check endpoint."""

from fastapi import APIRouter

from founder_loop.api.models.participant_loop import HealthResponse

router = APIRouter(prefix="/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return health status."""
    return HealthResponse(status="healthy")
