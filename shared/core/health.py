"""
Health and readiness probes

Payloads follow the draft "Health Check Response Format for HTTP APIs"
(status pass / warn / fail plus one entry per checked component), which
Kubernetes probes and load balancers can consume as is.
"""

import logging
import os
import time
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional

import psutil
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

# free disk (GB) and available memory (MB) below which a check degrades
DISK_FAIL_GB, DISK_WARN_GB = 1, 5
MEMORY_FAIL_MB, MEMORY_WARN_MB = 100, 500


class HealthStatus(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


def _now() -> str:
    return datetime.utcnow().isoformat() + "Z"


def _component(state: HealthStatus, component_type: str, **fields) -> Dict[str, Any]:
    return {"status": state, "componentType": component_type, "time": _now(), **fields}


def _threshold(value: float, fail_below: float, warn_below: float) -> HealthStatus:
    if value < fail_below:
        return HealthStatus.FAIL
    if value < warn_below:
        return HealthStatus.WARN
    return HealthStatus.PASS


def overall_status(checks: Dict[str, Dict[str, Any]]) -> HealthStatus:
    """The worst status among the checks"""
    states = {check["status"] for check in checks.values()}
    for state in (HealthStatus.FAIL, HealthStatus.WARN):
        if state in states:
            return state
    return HealthStatus.PASS


class ServiceHealth:
    """
    Probe endpoints for a service backed by one SQLAlchemy engine.

    ``engine_provider`` is called on every probe, so the checks always run
    against the engine the application currently uses.
    """

    def __init__(self, service_name: str, version: str = "1.0.0",
                 engine_provider: Optional[Callable[[], Engine]] = None):
        self.service_name = service_name
        self.version = version
        self.engine_provider = engine_provider
        self.started_at = time.time()
        self.readiness_runs = 0

        self.readiness_checks: Dict[str, Callable[[], Dict[str, Any]]] = {
            "database:connectivity": self.check_database,
            "storage:disk_space": self.check_disk_space,
            "system:memory": self.check_memory,
        }
        self.startup_checks: Dict[str, Callable[[], Dict[str, Any]]] = {
            "database:migrations": self.check_migrations,
        }

    def run(self, checks: Dict[str, Callable[[], Dict[str, Any]]]) -> Dict[str, Dict[str, Any]]:
        return {name: check() for name, check in checks.items()}

    def create_health_router(self) -> APIRouter:
        router = APIRouter(tags=["health"])

        @router.get("/health")
        async def health() -> Dict[str, Any]:
            """Process is up; no dependency is touched"""
            return {
                "status": HealthStatus.PASS,
                "service": self.service_name,
                "version": self.version,
                "releaseId": os.getenv("RELEASE_ID", "unknown"),
                "timestamp": _now(),
            }

        @router.get("/health/live")
        async def live() -> Dict[str, str]:
            return {"status": "alive"}

        @router.get("/health/ready")
        def ready() -> JSONResponse:
            """503 when any dependency check fails"""
            self.readiness_runs += 1
            checks = self.run(self.readiness_checks)
            state = overall_status(checks)
            return JSONResponse(
                status_code=(status.HTTP_503_SERVICE_UNAVAILABLE if state == HealthStatus.FAIL
                             else status.HTTP_200_OK),
                content={
                    "status": state,
                    "serviceId": self.service_name,
                    "version": self.version,
                    "checks": checks,
                    "timestamp": _now(),
                },
            )

        @router.get("/health/startup")
        def startup() -> JSONResponse:
            checks = self.run(self.startup_checks)
            failed = overall_status(checks) == HealthStatus.FAIL
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE if failed else status.HTTP_200_OK,
                content={"status": "starting" if failed else "started", "checks": checks},
            )

        @router.get("/metrics")
        async def metrics() -> Dict[str, Any]:
            process = psutil.Process()
            with process.oneshot():
                rss = process.memory_info().rss
                cpu = process.cpu_percent()
                threads = process.num_threads()
            return {
                "service": self.service_name,
                "version": self.version,
                "uptime_seconds": round(time.time() - self.started_at, 1),
                "readiness_checks_run": self.readiness_runs,
                "process": {"memory_rss_bytes": rss, "cpu_percent": cpu, "threads": threads},
                "timestamp": _now(),
            }

        return router

    def _engine(self) -> Optional[Engine]:
        return self.engine_provider() if self.engine_provider else None

    def check_database(self) -> Dict[str, Any]:
        engine = self._engine()
        if engine is None:
            return _component(HealthStatus.WARN, "datastore", output="No database configured")
        started = time.perf_counter()
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"Database check failed: {e}")
            return _component(HealthStatus.FAIL, "datastore", output=str(e))
        elapsed_ms = (time.perf_counter() - started) * 1000
        return _component(HealthStatus.PASS, "datastore",
                          observedValue=f"{elapsed_ms:.2f}", observedUnit="ms")

    def check_disk_space(self) -> Dict[str, Any]:
        try:
            free_gb = psutil.disk_usage("/").free / 1024 ** 3
        except OSError as e:
            return _component(HealthStatus.WARN, "system", output=str(e))
        return _component(_threshold(free_gb, DISK_FAIL_GB, DISK_WARN_GB), "system",
                          observedValue=f"{free_gb:.2f}", observedUnit="GB")

    def check_memory(self) -> Dict[str, Any]:
        available_mb = psutil.virtual_memory().available / 1024 ** 2
        return _component(_threshold(available_mb, MEMORY_FAIL_MB, MEMORY_WARN_MB), "system",
                          observedValue=f"{available_mb:.2f}", observedUnit="MB")

    def check_migrations(self) -> Dict[str, Any]:
        """Alembic records the applied revision in ``alembic_version``"""
        engine = self._engine()
        if engine is None:
            return _component(HealthStatus.WARN, "datastore", output="No database configured")
        try:
            migrated = inspect(engine).has_table("alembic_version")
        except Exception as e:
            return _component(HealthStatus.FAIL, "datastore", output=str(e))
        if migrated:
            return _component(HealthStatus.PASS, "datastore")
        return _component(HealthStatus.WARN, "datastore", output="Migrations table not found")
