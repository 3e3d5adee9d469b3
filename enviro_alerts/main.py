"""HTTP Service Entry Point.

FastAPI application exposing device registration, the shared-secret sweep
trigger and a health check. The app owns one SubscriberRegistry and one
SweepOrchestrator, and runs the periodic sweep scheduler for its lifetime.
"""

import logging
import os
import secrets
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Header, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from enviro_alerts.core.config import Config, is_placeholder
from enviro_alerts.core.errors import ValidationError
from enviro_alerts.orchestrator import SweepOrchestrator
from enviro_alerts.registry import SubscriberRegistry, register_or_update
from enviro_alerts.shell.config_loader import load_config, load_config_from_env
from enviro_alerts.shell.scheduler import SweepScheduler


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ===== Request Models =====

class DeviceLocation(BaseModel):
    """Body of /register and /update-location.

    Older clients send fcmToken; pushToken is accepted for either provider.
    """
    fcmToken: str | None = None
    pushToken: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    appOpen: bool | None = None

    @property
    def token(self) -> str | None:
        return self.pushToken or self.fcmToken


def _get_config() -> Config:
    """Load configuration from file or environment."""
    config_path = os.environ.get("CONFIG_PATH")

    if config_path:
        return load_config(config_path)
    return load_config_from_env()


def _is_authorized(expected: str | None, provided: str | None) -> bool:
    """Constant-time shared-secret check; no secret configured means deny."""
    if not expected or not provided or is_placeholder(expected):
        return False
    return secrets.compare_digest(expected.encode(), provided.encode())


def create_app(
    config: Config | None = None,
    registry: SubscriberRegistry | None = None,
    orchestrator: SweepOrchestrator | None = None,
    start_scheduler: bool = True,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Application configuration (loaded if not provided)
        registry: Subscriber registry (created if not provided)
        orchestrator: Sweep orchestrator (created if not provided)
        start_scheduler: Run periodic sweeps while the app is up

    Returns:
        Configured FastAPI app
    """
    config = config or _get_config()
    registry = registry if registry is not None else SubscriberRegistry()
    orchestrator = orchestrator or SweepOrchestrator(registry, config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        scheduler = None
        if start_scheduler:
            scheduler = SweepScheduler(
                orchestrator.run_sweep,
                interval_seconds=config.sweep_interval_seconds,
            )
            scheduler.start()
        logger.info("Environment alert service started (provider=%s)", config.push_provider)
        try:
            yield
        finally:
            if scheduler is not None:
                scheduler.stop()
            registry.clear()

    app = FastAPI(
        title="Environment Alerts",
        description="Push alerts for hazardous air quality, UV, heat, visibility and wind",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.registry = registry
    app.state.orchestrator = orchestrator

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": str(exc), "details": exc.messages},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [f"{error['loc'][-1]}: {error['msg']}" for error in exc.errors()]
        return JSONResponse(
            status_code=400,
            content={"error": "; ".join(details), "details": details},
        )

    def _write(body: DeviceLocation) -> bool:
        _, created = register_or_update(
            registry,
            body.token,
            body.latitude,
            body.longitude,
            app_open=body.appOpen,
            provider=config.push_provider,
        )
        return created

    @app.post("/register")
    def register(body: DeviceLocation) -> dict[str, Any]:
        """Register a device (or refresh an existing registration)."""
        _write(body)
        return {"success": True, "message": "Device registered for alerts"}

    @app.post("/update-location")
    def update_location(body: DeviceLocation) -> dict[str, Any]:
        """Update a device's location, registering it if unknown."""
        created = _write(body)
        return {"success": True, "registered": created}

    @app.get("/check")
    async def check(
        secret: str | None = Query(default=None),
        x_cron_secret: str | None = Header(default=None),
    ) -> dict[str, Any]:
        """Run a sweep on demand (external cron trigger)."""
        if not _is_authorized(config.cron_secret, secret or x_cron_secret):
            raise HTTPException(status_code=401, detail="Unauthorized")

        result = await run_in_threadpool(orchestrator.run_sweep)

        return {
            "success": result.success,
            "users": registry.size(),
            "summary": result.summary,
            "alerts_sent": len(result.alerts_sent),
            "alerts_failed": len(result.alerts_failed),
            "skipped_in_flight": result.skipped_in_flight,
        }

    @app.get("/health")
    def health() -> dict[str, Any]:
        """Liveness check."""
        return {
            "status": "ok",
            "users": registry.size(),
            "time": datetime.now(timezone.utc).isoformat(),
        }

    return app


# For local testing
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=int(os.environ.get("PORT", "3000")))
