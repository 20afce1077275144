"""FastAPI application entry point.

HTTP surface for batch dedup and health check.
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, Depends, FastAPI, status
from fastapi.responses import JSONResponse

from eventdedup.core.errors import InvalidInputShape
from eventdedup.handler import ERROR_PREFIX, DedupService, get_dedup_service
from eventdedup.storage.redis import RedisStorage


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: load policy on startup, close Redis on shutdown."""
    # Startup: policy table is loaded once here, Redis connects on first use
    service = get_dedup_service()

    yield

    # Shutdown
    await service.close()


app = FastAPI(
    title="EventDedup",
    description="Per-event-type deduplication for batched event ingestion",
    lifespan=lifespan,
)


@app.post("/events/batch")
async def process_batch(
    payload: Any = Body(...),
    service: DedupService = Depends(get_dedup_service),
) -> JSONResponse:
    """Dedup a batch of envelopes.

    Accepts a JSON array of envelopes or an SQS event ({"Records": [...]}).
    Per-item failures are reported in the result; only a non-batch payload is rejected.
    """
    try:
        result = await service.process(payload)
    except InvalidInputShape as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"status": "INVALID_INPUT", "summary": f"{ERROR_PREFIX}{e}"},
        )

    return JSONResponse(status_code=status.HTTP_200_OK, content=result.to_dict())


@app.get("/health")
async def health_check(service: DedupService = Depends(get_dedup_service)) -> JSONResponse:
    """Health check endpoint.

    Returns: {status, redis, policies}
    """
    cache_healthy = True
    if isinstance(service.cache, RedisStorage):
        cache_healthy = await service.cache.health_check()

    overall_status = "healthy" if cache_healthy else "degraded"

    return JSONResponse(
        status_code=status.HTTP_200_OK if cache_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": overall_status,
            "redis": "healthy" if cache_healthy else "unhealthy",
            "policies": len(service.policy),
        },
    )


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "EventDedup API", "version": "0.1.0"}
