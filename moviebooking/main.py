"""
Movie Booking API - Main Application Entry Point

Seat reservation engine for scheduled screenings:
- Conflict-free seat booking serialised per show, backed by a unique index
- Cancellation that releases seats immediately
- Booking listings, per-movie revenue summaries and customer history
- Structured logging with request correlation and Prometheus metrics
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from moviebooking.core.config import get_settings
from moviebooking.core.exceptions import BookingError
from moviebooking.core.logging import setup_logging, get_logger
from moviebooking.core.metrics import metrics_endpoint
from moviebooking.api.router import api_router
from moviebooking.api.middleware import RequestLoggingMiddleware
from moviebooking.infrastructure.redis_client import RedisClient, ping_redis
from moviebooking.services.lock_factory import get_show_lock

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    if settings.REDIS_ENABLED:
        if await ping_redis():
            logger.info("redis_ready")
        else:
            logger.warning("redis_unavailable", message="Show lock falls back to process-local")

    logger.info("show_lock_ready", strategy=type(get_show_lock()).__name__)

    yield

    if settings.REDIS_ENABLED:
        await RedisClient.close()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Movie seat booking API with conflict-free reservations",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    redis_status = "disabled"
    if settings.REDIS_ENABLED:
        redis_status = "connected" if await ping_redis() else "unreachable"
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "redis": redis_status,
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
