"""
JobNest Identity - Main Application.

FastAPI application exposing the authentication endpoints.
"""

import logging
import sys
import traceback
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobnest import __version__
from jobnest.api.routes.metrics import router as metrics_router
from jobnest.config import get_settings
from jobnest.exceptions import JobNestException
from jobnest.modules.identity.router import router as identity_router
from jobnest.observability import get_metrics_store
from jobnest.schemas import HealthResponse

# Configure standard logging
logging.basicConfig(
    level=get_settings().app_log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("jobnest")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    if settings.is_production and settings.uses_dev_jwt_secret:
        raise RuntimeError("AUTH_JWT_SECRET must be set in production")

    logger.info(
        f"Starting JobNest Identity API v{__version__} "
        f"[env={settings.app_env}] "
        f"[identity_store={settings.identity_store}]"
    )
    yield
    logger.info("Shutting down JobNest Identity API")


# Create FastAPI application
app = FastAPI(
    title="JobNest Identity API",
    description="Login for students and employers via name/role, Google or Supabase, with signed session tokens.",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Middleware
# =============================================================================


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.info(f"[{request_id}] {request.method} {request.url.path}")

    response = await call_next(request)

    logger.info(f"[{request_id}] {request.method} {request.url.path} -> {response.status_code}")

    return response


# Registered last so it runs first and the request id exists for logging.
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to all requests."""
    request_id = request.headers.get("X-Request-ID") or str(uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    return response


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(JobNestException)
async def jobnest_exception_handler(request: Request, exc: JobNestException):
    """Handle JobNest custom exceptions."""
    request_id = getattr(request.state, "request_id", None)

    logger.warning(f"[{request_id}] JobNestException: {exc.code} - {exc.message}")
    get_metrics_store().record_error(exc.code)

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.code,
                "message": exc.message,
                "details": exc.details,
                "request_id": request_id,
            }
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    request_id = getattr(request.state, "request_id", None)

    # Log the full traceback
    logger.error(f"[{request_id}] Unhandled exception on {request.url.path}")
    logger.error(f"Exception type: {type(exc).__name__}")
    logger.error(f"Exception message: {str(exc)}")
    logger.error(f"Traceback:\n{traceback.format_exc()}")
    get_metrics_store().record_error("INTERNAL_ERROR")

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": str(exc) if get_settings().app_debug else "An unexpected error occurred",
                "request_id": request_id,
            }
        },
    )


# =============================================================================
# Health Check
# =============================================================================


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint."""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        version=__version__,
        app_env=settings.app_env,
        is_production=settings.is_production,
        identity_store=settings.identity_store,
    )


# =============================================================================
# Register Routers
# =============================================================================

app.include_router(identity_router)
app.include_router(metrics_router)


# =============================================================================
# Root Endpoint
# =============================================================================


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint redirect to docs."""
    return {"message": "Welcome to JobNest Identity API", "docs": "/docs"}
