"""
Health endpoint.

/api/health reports process liveness and a database round-trip. Any failing
check turns the response into a 500 with status "unhealthy".
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

# --- Types ---


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class CheckResult:
    """Result of a single health check."""

    name: str
    status: HealthStatus
    message: str = ""
    latency_ms: float = 0.0
    details: dict[str, Any] = field(default_factory=dict)


class HealthCheck(Protocol):
    name: str

    def check(self) -> CheckResult:
        ...


# --- Startup Tracker ---


class StartupTracker:
    """Tracks application startup time for uptime calculation."""

    _start_time: float | None = None

    @classmethod
    def mark_started(cls) -> None:
        cls._start_time = time.time()

    @classmethod
    def get_uptime_seconds(cls) -> float:
        if cls._start_time is None:
            return 0.0
        return time.time() - cls._start_time


# --- Checks ---


class ProcessCheck:
    name = "process"

    def check(self) -> CheckResult:
        return CheckResult(name=self.name, status=HealthStatus.HEALTHY, message="Process is running")


class DatabaseCheck:
    """Database connectivity check; check_fn should run a trivial query."""

    name = "database"

    def __init__(self, check_fn: Callable[[], Any]) -> None:
        self._check_fn = check_fn

    def check(self) -> CheckResult:
        start = time.time()
        try:
            self._check_fn()
            latency = (time.time() - start) * 1000
            return CheckResult(
                name=self.name,
                status=HealthStatus.HEALTHY,
                message="Database connected",
                latency_ms=latency,
            )
        except Exception as e:
            latency = (time.time() - start) * 1000
            logger.exception("Database health check failed")
            return CheckResult(
                name=self.name,
                status=HealthStatus.UNHEALTHY,
                message=f"Database error: {e!s}",
                latency_ms=latency,
            )


def run_checks(checks: list[HealthCheck]) -> tuple[HealthStatus, list[CheckResult]]:
    results = [c.check() for c in checks]
    if all(r.status == HealthStatus.HEALTHY for r in results):
        return HealthStatus.HEALTHY, results
    return HealthStatus.UNHEALTHY, results


# --- FastAPI Router ---


def create_health_router(version: str = "0.0.0") -> APIRouter:
    """Router exposing GET /health; mount it under the API prefix."""
    router = APIRouter(tags=["Health"])

    @router.get(
        "/health",
        response_model=None,
        responses={
            200: {"description": "Service and database are reachable"},
            500: {"description": "Database connection failed"},
        },
    )
    def health_check(request: Request) -> JSONResponse:
        database = request.app.state.database
        overall, results = run_checks([ProcessCheck(), DatabaseCheck(database.ping)])

        body = {
            "status": "ok" if overall == HealthStatus.HEALTHY else overall.value,
            "version": version,
            "uptime_seconds": StartupTracker.get_uptime_seconds(),
            "checks": [
                {
                    "name": r.name,
                    "status": r.status.value,
                    "message": r.message,
                    "latency_ms": r.latency_ms,
                }
                for r in results
            ],
        }
        status_code = (
            status.HTTP_200_OK
            if overall == HealthStatus.HEALTHY
            else status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        return JSONResponse(content=body, status_code=status_code)

    return router
