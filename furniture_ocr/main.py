# furniture_ocr/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from furniture_ocr.core.config import Settings, missing_configuration, settings as default_settings
from furniture_ocr.core.errors import AppError
from furniture_ocr.core.logging import setup_logging
from furniture_ocr.api.v1.api import api_router
from furniture_ocr.db.init_db import init_db
from furniture_ocr.db.session import create_db_engine, create_session_factory
from furniture_ocr.services.auth_service import LoginThrottle
from furniture_ocr.services.storage_service import ObjectStorage

logger = logging.getLogger(__name__)

# Reachable even when the backend is not configured
UNGATED_PATHS = {"/healthz", "/setup"}

SETUP_STEPS = [
    "Create a database and set DATABASE_URL",
    "Choose a writable directory for uploaded files and set STORAGE_ROOT",
    "Set PUBLIC_BASE_URL to the address clients use to reach this API",
    "Generate a random SECRET_KEY",
]


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.log_level, settings.log_file)

    missing = missing_configuration(settings)
    if missing:
        logger.warning("Backend configuration incomplete, missing: %s", ", ".join(missing))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not missing:
            init_db(app.state.engine)
        yield
        if app.state.engine is not None:
            app.state.engine.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.missing_configuration = missing
    app.state.engine = None if missing else create_db_engine(settings.database_url)
    app.state.session_factory = None if missing else create_session_factory(app.state.engine)
    app.state.storage = None if missing else ObjectStorage.from_settings(settings)
    app.state.login_throttle = LoginThrottle.from_settings(settings)

    # ---------- CORS ----------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.backend_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- CONFIGURATION GATE ----------
    @app.middleware("http")
    async def require_configuration(request: Request, call_next):
        if missing and request.url.path not in UNGATED_PATHS:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={
                    "kind": "failed-precondition",
                    "message": "Backend configuration required",
                    "missing": missing,
                },
            )
        return await call_next(request)

    # ---------- ERRORS ----------
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.kind)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    # ---------- HEALTH / SETUP ----------
    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.get("/setup")
    def setup_notice():
        return {
            "configured": not missing,
            "missing": missing,
            "steps": SETUP_STEPS if missing else [],
        }

    # ---------- ROUTERS ----------
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    return app


app = create_application()
