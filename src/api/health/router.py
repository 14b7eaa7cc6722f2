"""Health check endpoints for debugging and monitoring."""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from src.api.core.dependencies import AsyncSessionDep, RedisDep
from src.services.health.service import HealthService, OverallHealthStatus

LANDING_PAGE = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>PharmaStock API</title></head>
<body style="font-family: sans-serif; text-align: center; margin-top: 20vh">
  <h1>PharmaStock API</h1>
  <p>Staff roles and notifications service. See <a href="/docs">/docs</a>.</p>
</body>
</html>
"""

# Create separate routers for root and health endpoints
root_router = APIRouter()
router = APIRouter(prefix="/health", tags=["health"])


@root_router.get("/", response_class=HTMLResponse)
async def root():
    """Minimal landing page pointing at the API docs."""
    return HTMLResponse(content=LANDING_PAGE)


@router.get("/")
async def health_check(db: AsyncSessionDep, redis: RedisDep) -> OverallHealthStatus:
    """Comprehensive health check for all services."""
    health_service = HealthService(db, redis)
    return await health_service.run_all_checks()


@router.get("/liveness")
async def liveness_check():
    """Simple liveness check - indicates if service is running."""
    return {"status": "alive", "service": "pharmastock-api"}
