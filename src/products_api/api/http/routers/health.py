"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from src.products_api.api.http.app_data import ApplicationDependencies
from src.products_api.api.http.deps import get_app_dependencies
from src.products_api.runtime.context import get_config

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness probe: 200 as long as the process is serving requests."""
    return {"status": "healthy", "service": "products-api"}


@router.get("/ready", response_model=None)
def readiness(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> dict[str, Any] | JSONResponse:
    """Readiness probe: 503 unless the database answers."""
    config = get_config()
    db_healthy = app_deps.database_service.health_check()
    response = {
        "status": "ready" if db_healthy else "not_ready",
        "environment": config.app.environment,
        "checks": {
            "database": {
                "status": "healthy" if db_healthy else "unhealthy",
                "type": config.database.backend,
            }
        },
    }
    if not db_healthy:
        return JSONResponse(status_code=503, content=response)
    return response
