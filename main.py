# main.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError

from workforce import __version__
from workforce.config import Settings, get_settings
from workforce.database import Database
from workforce.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from workforce.routers import auth, boards, notifications, tasks, teams, users
from workforce.services.scheduler import MaintenanceScheduler
from workforce.utils.error_handlers import register_exception_handlers
from workforce.utils.limiter import configure_limiter, limiter
from workforce.utils.logging import configure_logging

logger = logging.getLogger("workforce")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    database: Database = app.state.db

    # Anything raised here aborts startup
    database.initialize()

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = MaintenanceScheduler(database, settings)
        scheduler.start()
    app.state.scheduler = scheduler
    logger.info("Workforce API %s started (%s)", __version__, settings.environment)

    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.stop()
        database.close()
        logger.info("Workforce API stopped")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Workforce Management API",
        version=__version__,
        lifespan=lifespan,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
    )
    app.state.settings = settings
    app.state.db = Database(settings.database_url, echo=settings.database_echo)
    app.state.scheduler = None

    app.state.limiter = configure_limiter(settings)

    register_exception_handlers(app)

    # Added innermost first; CORS ends up outermost
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    # Include routers
    for module in (auth, users, teams, boards, tasks, notifications):
        app.include_router(module.router, prefix="/api")

    @app.get("/health")
    @limiter.exempt
    def health(request: Request):
        """Liveness plus database connectivity"""
        database: Database = request.app.state.db
        try:
            connected = database.health_check()
        except SQLAlchemyError:
            logger.exception("Health check failed")
            connected = False

        scheduler = request.app.state.scheduler
        body = {
            "status": "healthy" if connected else "unhealthy",
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "database": "connected" if connected else "disconnected",
            "scheduler": scheduler.status() if scheduler is not None else {"running": False, "jobs": []},
        }
        return JSONResponse(status_code=200 if connected else 503, content=body)

    return app


app = create_app()
