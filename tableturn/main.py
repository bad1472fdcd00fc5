"""
TableTurn - restaurant table reservation API
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
import structlog

from tableturn.config import settings
from tableturn.api import auth, restaurants, tables, menu, availability, reservations
from tableturn.booking import BookingError


def configure_logging() -> None:
    """Configure structured logging"""
    logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting TableTurn API", version="1.0.0")
    yield
    logger.info("Shutting down TableTurn API")


# Create FastAPI application
app = FastAPI(
    title="TableTurn",
    description="Table availability and reservation lifecycle for restaurants",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    """Render booking engine errors as JSON with their status code"""
    if exc.status_code >= 500:
        logger.warning("Booking request failed", path=request.url.path, error=exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Health check endpoints
@app.get("/health")
async def health():
    """Basic health check"""
    return {"status": "healthy", "service": "api", "version": "1.0.0"}


@app.get("/health/ready")
async def ready():
    """Readiness check with dependency verification"""
    from tableturn.database import get_session_factory

    checks = {}

    # Check database
    try:
        async with get_session_factory()() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"failed: {str(e)}"

    all_ok = all(v == "ok" for v in checks.values())

    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
    }


# Include API routers
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(restaurants.router, prefix="/restaurants", tags=["Restaurants"])
app.include_router(tables.router, prefix="/restaurants/{restaurant_id}/tables", tags=["Tables"])
app.include_router(menu.router, prefix="/restaurants/{restaurant_id}/menu_items", tags=["Menu"])
app.include_router(
    reservations.restaurant_router,
    prefix="/restaurants/{restaurant_id}/reservations",
    tags=["Reservations"],
)
app.include_router(availability.router, prefix="/tables", tags=["Availability"])
app.include_router(availability.restaurant_router, prefix="/restaurants/{restaurant_id}", tags=["Availability"])
app.include_router(reservations.router, prefix="/reservations", tags=["Reservations"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tableturn.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
