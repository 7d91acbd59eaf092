"""Main FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import DEFAULT_SECRET_KEY, Settings, settings
from .core.exceptions import ConfigurationError
from .core.logging import configure_logging
from .database import init_db, close_db
from .api.error_handling import register_exception_handlers
from .api.middleware import (
    RequestLoggingMiddleware,
    ErrorHandlingMiddleware,
    RateLimitingMiddleware,
    SecurityHeadersMiddleware
)
from .api.routes import auth, notifications
from .schemas.common import HealthResponse


def validate_runtime_config(app_settings: Settings) -> None:
    """Refuse to start production with the placeholder signing key."""
    if app_settings.is_production and app_settings.auth.secret_key == DEFAULT_SECRET_KEY:
        raise ConfigurationError("AUTH_SECRET_KEY must be set in production.")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    configure_logging()
    validate_runtime_config(settings)
    await init_db()
    yield
    # Shutdown
    await close_db()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""

    app = FastAPI(
        title=settings.api.title,
        description=settings.api.description,
        version=settings.api.version,
        lifespan=lifespan
    )

    register_exception_handlers(app)

    # Add middleware; the last one added runs outermost
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        RateLimitingMiddleware,
        requests_per_window=settings.api.rate_limit_requests,
        window_seconds=settings.api.rate_limit_window
    )
    app.add_middleware(SecurityHeadersMiddleware)

    # CORS middleware; credentials are needed for the session cookie
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(auth.router, prefix=settings.api.prefix)
    app.include_router(notifications.router, prefix=settings.api.prefix)

    # Root endpoint
    @app.get("/")
    async def root():
        return {
            "success": True,
            "message": "SkillIt LMS API",
            "version": settings.api.version,
        }

    # Health check endpoint
    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(status="healthy", version=settings.api.version)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "lms_backend.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.reload,
        workers=settings.api.workers if not settings.api.reload else 1,
    )
