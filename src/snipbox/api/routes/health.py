from fastapi import APIRouter, Depends, Response, status

from snipbox.api.dependencies import get_store
from snipbox.api.schemas import HealthResponse, ReadinessResponse
from snipbox.core.ports.store import SnippetStore

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@router.get("/healthz/live", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    """Liveness check. Answers as long as the process is serving requests."""
    return HealthResponse()


@router.get("/healthz/ready", response_model=ReadinessResponse)
async def readiness(
    response: Response,
    store: SnippetStore = Depends(get_store),
) -> ReadinessResponse:
    """Readiness check. Reports 503 when the snippet store does not answer."""
    if await store.ping():
        return ReadinessResponse(status="ok", store="up")
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(status="degraded", store="down")
