"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from nofish.config import get_settings
from nofish.logging_config import setup_logging
from nofish.routes.forecast import limiter
from nofish.routes.forecast import router as forecast_router
from nofish.services.http import close_http_client
from nofish.services.lookups import clear_lookup_store

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    settings = get_settings()
    setup_logging(level=settings.log_level, json_format=settings.log_json)
    yield
    # Cleanup on shutdown
    await close_http_client()
    clear_lookup_store()


app = FastAPI(
    title="NoFish API",
    description="Hourly weather, ocean and tide conditions for fishing spots",
    version=VERSION,
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

app.include_router(forecast_router, tags=["forecast"])


@app.get("/health")
async def health_check() -> dict:
    """
    Health check endpoint with configuration status.

    Returns:
        Status dictionary with service health information.
    """
    settings = get_settings()
    return {
        "status": "healthy",
        "service": "nofish",
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "services": {
            "lookup_store": "redis" if settings.use_redis else "memory",
        },
    }


@app.get("/")
async def root() -> dict:
    """
    Root endpoint.

    Returns:
        Welcome message with API information.
    """
    return {
        "message": "NoFish API",
        "docs": "/docs",
        "health": "/health",
    }
