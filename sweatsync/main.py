from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from sweatsync.api.auth import router as auth_router
from sweatsync.api.errors import register_exception_handlers
from sweatsync.api.workouts import router as workouts_router
from sweatsync.config.settings import Settings, settings
from sweatsync.core.logger import setup_logger
from sweatsync.db.store import Store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store on startup and close it on shutdown.

    A store handed in already open (tests) is left open for its owner.
    """
    store: Store = app.state.store
    owns_store = not store.is_open
    if owns_store:
        store.open()
    store.create_all()
    logger.info("SweatSync API started")

    yield

    if owns_store:
        store.close()
    logger.info("SweatSync API stopped")


def create_app(app_settings: Settings | None = None, store: Store | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        app_settings: Settings to use (defaults to the process settings)
        store: Store handle to use (defaults to one built from app_settings.database_url)
    """
    cfg = app_settings or settings
    setup_logger(level=cfg.log_level, log_file=cfg.log_file, json_file=cfg.log_json)

    app = FastAPI(title="SweatSync", lifespan=lifespan)
    app.state.settings = cfg
    app.state.store = store or Store(cfg.database_url)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origin_list,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Idempotency-Key"],
    )
    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(workouts_router)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all HTTP requests."""
        logger.debug(f"Request: {request.method} {request.url.path}")
        response = await call_next(request)
        logger.debug(f"Response: {response.status_code} for {request.method} {request.url.path}")
        return response

    @app.get("/api/health")
    def health():
        store_ok = app.state.store.is_open and app.state.store.ping()
        return {"status": "OK" if store_ok else "DEGRADED", "timestamp": datetime.now(timezone.utc).isoformat()}

    logger.info("FastAPI application initialized")
    return app


app = create_app()
