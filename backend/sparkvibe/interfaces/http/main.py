# backend/sparkvibe/interfaces/http/main.py
from __future__ import annotations

import logging
import uuid
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sparkvibe.core.config import Settings, get_settings
from sparkvibe.core.container import Services, build_services
from sparkvibe.core.errors import SparkVibeError
from sparkvibe.core.events import register_lifecycle
from sparkvibe.core.logging import setup_logging

logger = logging.getLogger("sparkvibe")


def _error(status: int, error: str, message, req_id: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={"error": error, "message": message, "request_id": req_id, **extra},
    )


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    settings = settings or (services.settings if services else get_settings())
    setup_logging(level=logging.DEBUG if settings.DEBUG else logging.INFO, fmt=settings.LOG_FORMAT)
    services = services or build_services(settings)

    app = FastAPI(title=settings.APP_NAME, version="0.1.0")
    app.state.services = services

    allowed = settings.allowed_origins() if settings.ENV == "production" else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed or ["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # simple liveness
    @app.get("/_/ping")
    def _ping():
        return {"ok": True}

    # Every handler stamps a request id so client errors can be matched to logs.

    @app.exception_handler(SparkVibeError)
    async def domain_error_handler(request: Request, exc: SparkVibeError):
        req_id = str(uuid.uuid4())
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logger.log(level, "%s %s %s %s", exc.__class__.__name__, req_id, request.url.path, exc)
        return _error(exc.status_code, exc.code, str(exc), req_id)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        req_id = str(uuid.uuid4())
        logger.warning("HTTPException %s %s %s", req_id, exc.status_code, exc.detail)
        return _error(exc.status_code, "http_error", exc.detail, req_id)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        req_id = str(uuid.uuid4())
        logger.warning("ValidationError %s %s", req_id, exc)
        details = [{k: v for k, v in e.items() if k != "ctx"} for e in exc.errors()]
        return _error(422, "validation_error", "Invalid request payload", req_id, details=details)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        req_id = str(uuid.uuid4())
        logger.exception("Unhandled exception %s %s", req_id, exc)
        return _error(500, "server_error", "Internal server error", req_id, type=exc.__class__.__name__)

    from sparkvibe.interfaces.http.routers import api
    app.include_router(api)

    register_lifecycle(app, services)
    return app


app = create_app()
