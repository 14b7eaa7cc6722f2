import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

import redis.asyncio as redis
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.utils.logger import get_logger

logger = get_logger(__name__)

HealthState = Literal["healthy", "degraded", "unhealthy"]


@dataclass
class HealthCheckResult:
    """Result of a health check."""

    service: str
    status: HealthState
    connected: bool
    details: dict
    error: str | None = None


@dataclass
class OverallHealthStatus:
    """Overall health status with individual service results."""

    status: HealthState
    services: dict[str, HealthCheckResult]
    timestamp: str


class HealthService:
    """Checks the database and the Redis cache/realtime backend."""

    def __init__(self, db: AsyncSession, redis_client: redis.Redis):
        self.db = db
        self.redis = redis_client

    async def check_database_health(self) -> HealthCheckResult:
        try:
            result = await self.db.execute(text("SELECT 1"))
            test_value = result.scalar()

            return HealthCheckResult(
                service="database",
                status="healthy",
                connected=True,
                details={"test_query_result": test_value},
            )
        except Exception as e:
            logger.error(f"Database health check error: {e}")
            return HealthCheckResult(
                service="database",
                status="unhealthy",
                connected=False,
                details={},
                error=str(e),
            )

    async def check_redis_health(self) -> HealthCheckResult:
        """Redis is needed for the auth cache and the realtime feed.

        The API keeps serving without it, so a failure only degrades health.
        """
        try:
            await self.redis.ping()
            return HealthCheckResult(
                service="redis",
                status="healthy",
                connected=True,
                details={},
            )
        except Exception as e:
            logger.error(f"Redis health check error: {e}")
            return HealthCheckResult(
                service="redis",
                status="degraded",
                connected=False,
                details={},
                error=str(e),
            )

    async def run_all_checks(self) -> OverallHealthStatus:
        """Run all health checks in parallel and return overall status."""
        results = await asyncio.gather(
            self.check_database_health(),
            self.check_redis_health(),
            return_exceptions=True,
        )

        services = {}
        overall_status: HealthState = "healthy"

        for result in results:
            if isinstance(result, Exception):
                result = HealthCheckResult(
                    service=result.__class__.__name__,
                    status="unhealthy",
                    connected=False,
                    details={},
                    error=str(result),
                )

            if result.status == "unhealthy":
                overall_status = "unhealthy"
            elif result.status == "degraded" and overall_status == "healthy":
                overall_status = "degraded"

            services[result.service] = result

        return OverallHealthStatus(
            status=overall_status,
            services=services,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
