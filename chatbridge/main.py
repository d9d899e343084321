"""FastAPI application entry point."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import HTMLResponse, JSONResponse

from chatbridge.api import auth, conversations, keys, providers
from chatbridge.core.config import load_config, load_settings
from chatbridge.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    MissingCredentialError,
    NotFoundError,
    UnknownProviderError,
    UserExistsError,
)
from chatbridge.logging import configure_logging, get_request_id
from chatbridge.middleware.request_context import RequestContextMiddleware
from chatbridge.storage.database import init_db
from chatbridge.telemetry.events import record_event

configure_logging()

logger = logging.getLogger("chatbridge.app")

app = FastAPI(
    title="Chatbridge",
    version="0.1.0",
    docs_url=None,
    redoc_url=None,
    openapi_url="/api/openapi.json",
)
app.include_router(auth.router)
app.include_router(keys.router)
app.include_router(conversations.router)
app.include_router(providers.router)
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=load_settings().allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup() -> None:
    init_db()
    load_config()
    settings = load_settings()
    if not settings.encryption_key:
        logger.warning(
            "ENCRYPTION_KEY is not set; API key endpoints and chat generation will fail",
            extra={"event": "configuration_incomplete", "setting": "ENCRYPTION_KEY"},
        )
    if not settings.jwt_secret:
        logger.warning(
            "JWT_SECRET is not set; login and authenticated endpoints will fail",
            extra={"event": "configuration_incomplete", "setting": "JWT_SECRET"},
        )


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/api/docs", response_class=HTMLResponse)
def swagger_ui() -> HTMLResponse:
    return get_swagger_ui_html(
        openapi_url="/api/openapi.json",
        title="Chatbridge API",
    )


def _error(status_code: int, message: str, error_type: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"message": message, "type": error_type, "code": code}},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    code = f"{exc.resource.replace(' ', '_').lower()}_not_found"
    return _error(404, exc.message, "invalid_request_error", code)


@app.exception_handler(UnknownProviderError)
async def unknown_provider_handler(request: Request, exc: UnknownProviderError) -> JSONResponse:
    return _error(400, exc.message, "invalid_request_error", "unknown_provider")


@app.exception_handler(MissingCredentialError)
async def missing_credential_handler(
    request: Request, exc: MissingCredentialError
) -> JSONResponse:
    return _error(400, exc.message, "invalid_request_error", "credential_missing")


@app.exception_handler(UserExistsError)
async def user_exists_handler(request: Request, exc: UserExistsError) -> JSONResponse:
    return _error(400, exc.message, "invalid_request_error", "user_exists")


@app.exception_handler(AuthenticationError)
async def authentication_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    response = _error(401, exc.message, "authentication_error", "unauthorized")
    response.headers["WWW-Authenticate"] = "Bearer"
    return response


@app.exception_handler(ConfigurationError)
async def configuration_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error(
        "Server misconfigured",
        extra={
            "event": "configuration_error",
            "path": request.url.path,
            "error_message": str(exc),
        },
    )
    return _error(500, "Internal server error", "internal_server_error", "configuration_error")


@app.exception_handler(Exception)
async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error",
        extra={
            "event": "request_error",
            "path": request.url.path,
            "request_id": get_request_id(),
        },
    )
    record_event(
        "request_error",
        "ERROR",
        message=str(exc),
        meta={
            "path": request.url.path,
        },
    )
    return _error(500, "Internal server error", "internal_server_error", "internal_error")
