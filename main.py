"""
FastAPI application entry point.

create_app() builds the gateway with all middleware, routers and service
objects. run() is the process entry point: it validates configuration,
exits on failure, and serves the app with uvicorn.

Processing order matters. The Stripe webhook verifies a signature over the
exact request bytes, so it is the first route in the table, reads the raw
body itself, and is exempt from JSON body handling.
"""
import logging
import sys
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware import Middleware
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from core.body_limit import JSONBodyLimitMiddleware
from core.config import Settings, get_settings, validate_settings
from core.cors import build_cors_options
from core.exceptions import ConfigurationError, error_envelope
from core.logging import setup_logging
from routers import ai, auth, events, payments, profile, stripe_webhook
from schemas import HealthResponse
from services.coaching import CoachingAssistant
from services.email_service import EmailService
from services.event_store import EventStore
from services.openrouter_coach import OpenRouterCoach
from services.otp_service import OTPStore
from services.profile_store import ProfileStore
from services.stripe_service import StripeService

logger = logging.getLogger(__name__)

UPLOADS_PATH = "/uploads"
NOT_FOUND_MESSAGE = "The requested resource does not exist"


async def log_requests(request: Request, call_next):
    """Log all requests with timing information."""
    start_time = time.time()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(
            f"Request failed: {request.method} {request.url.path}",
            extra={"extra_fields": {"method": request.method, "path": request.url.path, "error": str(e)}},
        )
        raise

    process_time = time.time() - start_time
    logger.info(
        f"Response: {request.method} {request.url.path} - {response.status_code}",
        extra={
            "extra_fields": {
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "process_time_ms": round(process_time * 1000, 2),
                "client_ip": request.client.host if request.client else None,
            }
        },
    )
    response.headers["X-Process-Time"] = str(process_time)
    return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(f"Athleon backend starting ({settings.NODE_ENV})")
    # Mail health is informational only; OTP delivery degrades to mock mode or False.
    await app.state.email_service.verify_connection()
    yield
    logger.info("Athleon backend shutting down")


def _register_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            message = NOT_FOUND_MESSAGE
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(exc.status_code, str(message)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
        )
        return JSONResponse(
            status_code=422,
            content={"error": "Validation Error", "message": problems},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unhandled errors."""
        logger.error(
            f"Unhandled exception: {exc}",
            exc_info=exc,
            extra={"extra_fields": {"method": request.method, "path": request.url.path}},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal Server Error",
                "message": str(exc) if settings.is_development else "Something went wrong",
            },
        )


def create_app(
    settings: Optional[Settings] = None,
    *,
    email_service: Optional[EmailService] = None,
    coach: Optional[CoachingAssistant] = None,
    stripe_service: Optional[StripeService] = None,
    otp_store: Optional[OTPStore] = None,
    profile_store: Optional[ProfileStore] = None,
    event_store: Optional[EventStore] = None,
) -> FastAPI:
    """
    Build the API gateway.

    Raises ConfigurationError if required settings are missing.
    """
    settings = settings or get_settings()
    validate_settings(settings)

    order = []

    # Middleware runs in list order, outermost first.
    middleware = [Middleware(CORSMiddleware, **build_cors_options(settings))]
    order.append("cors")
    middleware.append(
        Middleware(
            JSONBodyLimitMiddleware,
            max_bytes=settings.JSON_BODY_LIMIT_BYTES,
            raw_body_paths=[stripe_webhook.STRIPE_WEBHOOK_PATH],
        )
    )
    order.append("json_body")
    middleware.append(Middleware(BaseHTTPMiddleware, dispatch=log_requests))
    order.append("request_logging")

    app = FastAPI(
        title="Athleon Global API",
        description="Sports networking backend: auth, profiles, AI coaching, events and payments",
        version="1.0.0",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        middleware=middleware,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.email_service = email_service or EmailService(settings)
    app.state.coach = coach or OpenRouterCoach.from_settings(settings)
    app.state.stripe_service = stripe_service or StripeService.from_settings(settings)
    app.state.otp_store = otp_store or OTPStore()
    app.state.profile_store = profile_store or ProfileStore()
    app.state.event_store = event_store or EventStore()

    # Raw-body webhook goes first in the routing table.
    app.include_router(stripe_webhook.router)
    order.append("stripe_webhook")

    uploads_dir = Path(settings.UPLOADS_DIR)
    uploads_dir.mkdir(parents=True, exist_ok=True)
    app.mount(UPLOADS_PATH, StaticFiles(directory=str(uploads_dir)), name="uploads")
    order.append("uploads")

    @app.get("/api/health", response_model=HealthResponse, tags=["health"])
    async def health():
        """Liveness check for load balancers and uptime monitors."""
        return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc).isoformat())

    order.append("health")

    for name, module in (
        ("auth", auth),
        ("profile", profile),
        ("ai", ai),
        ("events", events),
        ("payments", payments),
    ):
        app.include_router(module.router)
        order.append(name)

    _register_error_handlers(app, settings)
    order.extend(["not_found", "error_handler"])

    app.state.registration_order = order
    return app


def _init_sentry(settings: Settings) -> None:
    """Initialize Sentry for error tracking when a DSN is configured."""
    if not settings.SENTRY_DSN:
        return

    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration

    def _filter_sensitive_data(event, hint):
        # Remove Authorization headers
        if "request" in event and "headers" in event["request"]:
            headers = event["request"]["headers"]
            if isinstance(headers, dict):
                headers.pop("authorization", None)
                headers.pop("cookie", None)
        return event

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.NODE_ENV,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[FastApiIntegration(transaction_style="endpoint")],
        send_default_pii=False,
        before_send=_filter_sensitive_data,
    )
    logger.info(f"Sentry initialized for environment: {settings.NODE_ENV}")


def run() -> None:
    """Process entry point."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings)

    try:
        app = create_app(settings)
    except ConfigurationError as e:
        logger.critical(f"Invalid configuration, refusing to start: {e}")
        sys.exit(1)

    _init_sentry(settings)
    logger.info(f"Athleon backend running on http://localhost:{settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
