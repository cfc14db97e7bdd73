"""
FastAPI Application Factory.

Creates and configures the Leave Portal application: shared components on
``app.state``, CORS, security headers, the structured error envelope and
the leave routes.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException

from leave_portal.core.config import LeaveSettings, get_settings
from leave_portal.core.exceptions import (
    AuthenticationError,
    LeaveError,
    RateLimitedError,
)
from leave_portal.core.http_client import create_http_client_context
from leave_portal.core.middleware.gate import RequestGate
from leave_portal.core.security.tokens import Authenticator
from leave_portal.leave.seed import load_seed_records
from leave_portal.leave.store import RecordStore

_logger = logging.getLogger(__name__)

SERVICE_NAME = "Leave Portal"


def _error_body(message: str, code: str) -> dict[str, object]:
    return {"success": False, "message": message, "code": code}


class EnvelopeCORSMiddleware(CORSMiddleware):
    """CORSMiddleware whose rejected preflights use the error envelope."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code < 400:
            return response
        _logger.info(f"CORS preflight rejected: {response.body.decode(errors='replace')}")
        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        return JSONResponse(
            status_code=response.status_code,
            content=_error_body("Disallowed CORS request.", "cors_rejected"),
            headers=headers,
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Owns the shared HTTP client used for bot verification.
    """
    settings: LeaveSettings = app.state.settings
    _logger.info(f"Starting {SERVICE_NAME}...")

    async with create_http_client_context(
        app, timeout=settings.recaptcha_timeout_seconds
    ):
        _logger.info(
            f"{SERVICE_NAME} ready with {len(app.state.store)} record(s); "
            f"bot verification {'enabled' if settings.captcha_enabled else 'disabled'}"
        )
        yield
        _logger.info(f"Shutting down {SERVICE_NAME}...")


def create_app(
    settings: LeaveSettings | None = None,
    store: RecordStore | None = None,
    gate: RequestGate | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use. Loaded from the environment when omitted;
                  a missing signing secret raises ConfigurationError here.
        store: Pre-built record store. Seeded from configuration when omitted.
        gate: Pre-built request gate. Built from settings when omitted.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=SERVICE_NAME,
        description="Leave record lookup and append API",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.store = store if store is not None else RecordStore.from_seed(
        load_seed_records(settings.seed_file)
    )
    app.state.gate = gate or RequestGate.from_settings(settings)
    app.state.authenticator = Authenticator.from_settings(settings)

    # Never fall back to "*": an empty allow-list blocks cross-origin calls.
    allowed_origins = settings.allowed_origins
    app.add_middleware(
        EnvelopeCORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )
    if allowed_origins:
        _logger.info(f"CORS configured with {len(allowed_origins)} origin(s): {allowed_origins}")
    else:
        _logger.warning("CORS configured with no allowed origins (all cross-origin requests will be blocked)")

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        response.headers["Cross-Origin-Resource-Policy"] = "same-origin"
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    _register_exception_handlers(app)
    _register_core_routes(app)

    from leave_portal.leave.router import router as leave_router
    app.include_router(leave_router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    """Render every outcome in the ``{success, message, code}`` envelope."""

    @app.exception_handler(LeaveError)
    async def leave_error_handler(request: Request, exc: LeaveError) -> JSONResponse:
        log = _logger.error if exc.status_code >= 500 else _logger.info
        log(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc}")

        headers: dict[str, str] = {}
        if isinstance(exc, RateLimitedError):
            headers["Retry-After"] = str(exc.retry_after)
        if isinstance(exc, AuthenticationError):
            headers["WWW-Authenticate"] = "Bearer"
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.public_message, exc.code),
            headers=headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            body = _error_body("Route not found.", "not_found")
        else:
            body = _error_body(str(exc.detail), "http_error")
        return JSONResponse(
            status_code=exc.status_code,
            content=body,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        _logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("Internal server error.", "internal_error"),
        )


def _register_core_routes(app: FastAPI) -> None:
    """Register core API routes (health check)."""

    @app.get("/health")
    async def health_check(request: Request) -> dict[str, object]:
        """Health check endpoint."""
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "records": len(request.app.state.store),
        }
