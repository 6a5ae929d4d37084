"""AudioMind - audio knowledge service: upload, transcribe, highlight, summarize."""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.config import Settings, get_settings
from app.rate_limit import limiter
from app.routers import audio_content_router, audio_router, auth_router, highlights_router, jobs_router
from app.services.ai_gateway import AIGateway
from app.services.jobs import JobManager
from app.storage import ContentStore, create_store

# Logging
logger = logging.getLogger("audiomind")

APP_VERSION = "0.1.0"


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = "default-src 'self'; media-src 'self'"
        return response


# --- Request size limit middleware ---
class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, max_body_size: int) -> None:
        super().__init__(app)
        self.max_body_size = max_body_size

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_body_size:
            return JSONResponse(status_code=413, content={"detail": "Request body too large"})
        return await call_next(request)


# --- Audit logging middleware ---
class AuditLogMiddleware(BaseHTTPMiddleware):
    AUDIT_PATHS = ("/api/audio-content", "/api/highlights", "/api/jobs", "/api/auth/register", "/api/auth/login")

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000

        # Log mutating operations
        path = request.url.path
        method = request.method
        if method in ("POST", "PATCH", "DELETE") and path.startswith(self.AUDIT_PATHS):
            logger.info(
                "AUDIT %s %s -> %d (%.0fms) from %s",
                method,
                path,
                response.status_code,
                duration_ms,
                request.client.host if request.client else "unknown",
            )

        return response


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Handle rate limit exceeded."""
    return JSONResponse(status_code=429, content={"detail": "Rate limit exceeded. Try again later."})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Render HTTP errors as JSON."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> Response:
    """Request validation failures are client errors: 400 with the offending fields."""
    errors = [{"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()]
    return JSONResponse(status_code=400, content={"detail": "Invalid request data", "errors": errors})


def create_app(
    settings: Settings | None = None,
    store: ContentStore | None = None,
    gateway: AIGateway | None = None,
) -> FastAPI:
    """Build the application with its store, AI gateway and job registry on app.state."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    for warning in settings.validate():
        logger.warning(warning)

    app = FastAPI(title="AudioMind", version=APP_VERSION)
    app.state.settings = settings
    app.state.store = store or create_store(settings)
    app.state.gateway = gateway or AIGateway(settings)
    app.state.jobs = JobManager(max_finished=settings.JOB_HISTORY_LIMIT)
    app.state.limiter = limiter

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_body_size=settings.max_upload_bytes + 5 * 1024 * 1024)
    app.add_middleware(AuditLogMiddleware)

    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # API routers
    app.include_router(auth_router)
    app.include_router(audio_content_router)
    app.include_router(audio_router)
    app.include_router(highlights_router)
    app.include_router(jobs_router)

    @app.get("/api/health")
    def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "ok", "app": "audiomind", "version": APP_VERSION}

    logger.info("AudioMind ready (storage=%s)", type(app.state.store).__name__)
    return app


app = create_app()
