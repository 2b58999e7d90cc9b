import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from weather_pusher.core.config import settings
from weather_pusher.core.db import AsyncSessionLocal
from weather_pusher.core.init_db import init_db
from weather_pusher.core.logging import setup_logging
from weather_pusher.routers.control import router as control_router
from weather_pusher.routers.health import router as health_router
from weather_pusher.routers.observations import router as observations_router
from weather_pusher.services.pipeline import PushPipeline
from weather_pusher.services.providers.weather_client import WeatherClient
from weather_pusher.services.scheduler import PushScheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    On startup:
    - Initializes the database schema.
    - Builds the single push pipeline and scheduler shared by the
      schedule and the control endpoints.
    - Starts the schedule when `PUSH_AUTO_START` is enabled.

    On shutdown:
    - Stops the schedule and waits for in-flight pushes.
    """
    await init_db()

    pipeline = PushPipeline(
        client=WeatherClient(settings.weather_url),
        session_factory=AsyncSessionLocal,
        target_id=settings.push_target_id,
    )
    scheduler = PushScheduler(
        pipeline,
        interval_seconds=settings.push_interval_seconds,
        skip_if_busy=settings.push_skip_overlapping,
    )
    app.state.pipeline = pipeline
    app.state.scheduler = scheduler

    if settings.push_auto_start:
        logger.info(
            "Auto-starting pusher (target id=%s) every %ss",
            settings.push_target_id,
            settings.push_interval_seconds,
        )
        scheduler.start()

    yield

    await scheduler.shutdown()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    This factory function:
    - Configures logging.
    - Initializes the FastAPI app with metadata and documentation endpoints.
    - Registers all API routers.
    - Applies the application lifespan handler.

    Returns:
        Configured FastAPI application instance.
    """
    setup_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        description="Weather push service: periodic fetch, normalize and upsert of the latest observation",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Register API routers
    app.include_router(health_router)
    app.include_router(control_router)
    app.include_router(observations_router)

    return app


# Application entry point
app = create_app()


def run() -> None:
    """Serve the application with uvicorn on the configured host and port."""
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
