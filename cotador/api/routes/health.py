"""Health check and monitoring endpoints."""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from cotador.api.deps import Cache, Catalog, Store
from cotador.api.schemas import HealthResponse, ServiceHealth
from cotador.core.config import get_settings

router = APIRouter(tags=["Health"])


@router.get(
    "/",
    summary="Root endpoint",
    response_description="API information and basic health status",
)
async def root() -> dict[str, Any]:
    """
    Root endpoint with API information.

    Returns basic API metadata including:
    - Application name and version
    - Current status
    - Environment name
    - Server timestamp
    """
    settings = get_settings()

    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "healthy",
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "documentation": "/docs",
    }


async def _timed_health_check(
    name: str,
    check_fn: Any,
    timeout: float = 5.0
) -> tuple[str, bool, float, str | None]:
    """Execute a health check and measure its latency with timeout.

    Returns:
        Tuple of (name, healthy, latency_ms, error_message)
    """
    start = time.perf_counter()
    try:
        result = await asyncio.wait_for(check_fn(), timeout=timeout)
        latency = (time.perf_counter() - start) * 1000
        return (name, result, latency, None)
    except asyncio.TimeoutError:
        latency = (time.perf_counter() - start) * 1000
        return (name, False, latency, f"Health check timed out after {timeout}s")
    except Exception as e:
        latency = (time.perf_counter() - start) * 1000
        return (name, False, latency, str(e))


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Comprehensive health check",
    response_description="Detailed health status of all services",
)
async def health_check(store: Store, cache: Cache, catalog: Catalog) -> HealthResponse:
    """
    Comprehensive health check endpoint for monitoring.

    - **backing_store**: remote record store connectivity and response time
    - **cache**: in-process cache entry counts
    - **catalog**: whether a catalog projection is loaded

    A failing backing store makes the service unhealthy; an unloaded catalog
    only degrades it, since the first request loads it.
    """
    settings = get_settings()
    overall_status = "healthy"

    name, healthy, latency, error = await _timed_health_check(
        "backing_store", store.check_health
    )
    store_details: dict[str, Any] = {"type": "postgrest"}
    if error:
        store_details["error"] = error
    services: dict[str, ServiceHealth] = {
        "backing_store": ServiceHealth(
            status="healthy" if healthy else "unhealthy",
            latency_ms=round(latency, 2),
            details=store_details,
        ),
        "cache": ServiceHealth(
            status="healthy",
            details={"type": "memory", **cache.stats()},
        ),
    }
    if not healthy:
        overall_status = "unhealthy"

    catalog_stats = catalog.stats()
    services["catalog"] = ServiceHealth(
        status="healthy" if catalog_stats["loaded"] else "degraded",
        details=catalog_stats,
    )
    if not catalog_stats["loaded"] and overall_status == "healthy":
        overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        timestamp=datetime.now(timezone.utc),
        version=settings.app_version,
        services=services,
    )


@router.get(
    "/health/live",
    summary="Liveness probe",
    response_description="Simple liveness check for orchestrators",
)
async def liveness() -> dict[str, str]:
    """
    Liveness probe endpoint.

    Returns 200 if the service process is running. Does not touch external
    dependencies.
    """
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get(
    "/health/ready",
    summary="Readiness probe",
    response_description="Readiness check for load balancers",
)
async def readiness(store: Store) -> JSONResponse:
    """
    Readiness probe endpoint.

    Returns 503 Service Unavailable when the backing store cannot be reached.
    """
    try:
        store_healthy = await asyncio.wait_for(store.check_health(), timeout=5.0)
    except asyncio.TimeoutError:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "backing_store_timeout",
                "message": "Backing store health check timed out after 5s",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    if not store_healthy:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "backing_store_unavailable",
                "message": "Backing store connection failed",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "ready",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


@router.get(
    "/health/cache",
    summary="Cache status",
    response_description="Entry counts of the in-process cache",
)
async def cache_health(cache: Cache, catalog: Catalog) -> dict[str, Any]:
    """Cache entry counts and catalog projection status."""
    return {
        "service": "cache",
        "type": "memory",
        "status": "healthy",
        "entries": cache.stats(),
        "default_ttl_seconds": cache.default_ttl,
        "catalog": catalog.stats(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
