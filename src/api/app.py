"""
Main FastAPI application factory.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .dependencies import get_logger, get_supabase_client, clear_service_cache
from .routes import (
    admin, auth, bookings, concierge, favorites, health, messages, payments, payouts, properties, reviews,
    verification,
)
from .models import ErrorResponse
from .security.jwt import verify_token, TokenError
from ..utils.errors import MarketplaceError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger = get_logger()
    logger.info("Starting FastAPI application", environment=settings.environment, api_version=settings.api_version)

    # Supabase may be absent; services fall back to the local store
    if not get_supabase_client().initialize():
        logger.warning("Supabase unavailable at startup, using local store fallback")

    yield

    logger.info("Shutting down FastAPI application")
    clear_service_cache()


def _open_path(path: str, method: str) -> bool:
    """Endpoints reachable without a bearer token."""
    v1 = f"{settings.api_prefix}/v1"
    always_open = (
        f"{v1}/auth/register",
        f"{v1}/auth/login",
        f"{v1}/auth/verify",
        f"{v1}/auth/resend-code",
        f"{v1}/auth/forgot-password",
        f"{v1}/auth/reset-password",
        f"{v1}/health",
        f"{v1}/concierge",
        f"{settings.api_prefix}/docs",
        f"{settings.api_prefix}/redoc",
        f"{settings.api_prefix}/openapi.json",
    )
    public_reads = (
        f"{v1}/properties",
        f"{v1}/reviews",
        f"{v1}/bookings/quote",
        f"{v1}/bookings/availability",
    )
    if path == "/" or any(path.startswith(p) for p in always_open):
        return True
    return method == "GET" and any(path.startswith(p) for p in public_reads)


def _error_response(status_code: int, message: str, error_code: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            success=False, message=message, error_code=error_code, details=details
        ).model_dump(mode="json"),
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.app_name,
        description=settings.app_description,
        version=settings.app_version,
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        lifespan=lifespan
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(MarketplaceError)
    async def marketplace_exception_handler(request: Request, exc: MarketplaceError):
        """Domain errors carry their own status and error code."""
        get_logger().warning(
            "Request rejected", path=request.url.path, error_code=exc.code, status_code=exc.status_code
        )
        return _error_response(exc.status_code, exc.message, exc.code, exc.details or None)

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unhandled errors."""
        get_logger().error("Unhandled exception", path=request.url.path, error=str(exc), exc_info=True)
        return _error_response(500, "Internal server error", "INTERNAL_ERROR", {"error": str(exc)})

    @app.middleware("http")
    async def auth_middleware(request: Request, call_next):
        path = request.url.path
        method = request.method
        auth_header = request.headers.get("Authorization", "")

        if auth_header.startswith("Bearer "):
            token = auth_header.split(" ", 1)[1]
            try:
                payload = verify_token(token)
            except TokenError as e:
                return _error_response(401, "Invalid token", "UNAUTHORIZED", {"error": str(e)})
            request.state.user_id = payload.get("sub")
            request.state.user_email = payload.get("email")
            request.state.user_role = payload.get("role")
        elif method != "OPTIONS" and not _open_path(path, method):
            return _error_response(401, "Unauthorized", "UNAUTHORIZED")
        return await call_next(request)

    # Include routers with versioning
    for module in (auth, properties, bookings, payments, payouts, messages, reviews, favorites,
                   verification, admin, concierge, health):
        app.include_router(module.router, prefix=f"{settings.api_prefix}/v1")

    # Root endpoint
    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "message": "LOCADZ Marketplace API is running",
            "version": settings.api_version,
            "environment": settings.environment,
            "docs": f"{settings.api_prefix}/docs"
        }

    return app
