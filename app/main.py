from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.api.v1.router import api_router
import structlog
import time

# Import models to ensure they are registered with Base
import models  # noqa: F401
from core.config import get_settings
from core.database import Base, engine
from services.exceptions import WeddingGuestsError

# Configure structured logging
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
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()
settings = get_settings()

# Create tables if they don't exist
try:
    Base.metadata.create_all(bind=engine)
    logger.info("database_tables_created", status="success")
except Exception as e:
    logger.warning("database_table_creation_warning", error=str(e))

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Guest lists, RSVPs and day-of check-in for wedding planners"
)

app.state.startup_time = time.time()

# Setup rate limiting
from app.middleware.rate_limit import setup_rate_limiting
setup_rate_limiting(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "X-API-Key"],
)


@app.exception_handler(WeddingGuestsError)
async def domain_error_handler(request: Request, exc: WeddingGuestsError):
    """
    Map service-layer errors onto HTTP responses.

    The status code comes from the exception class; the message is meant
    to be shown to the user as-is.
    """
    logger.info(
        "request_rejected",
        path=request.url.path,
        error=type(exc).__name__,
        status_code=exc.status_code,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    # RSVP links carry a bearer token in the path
    if request.url.path.startswith("/api/v1/rsvp/"):
        response.headers["Cache-Control"] = "no-store"

    return response


@app.middleware("http")
async def request_logging_middleware(request, call_next):
    """
    Log all API requests with structured logging.

    RSVP tokens are masked in the logged path.
    """
    start_time = time.time()
    path = request.url.path
    if path.startswith("/api/v1/rsvp/"):
        path = "/api/v1/rsvp/***"

    logger.info(
        "request_started",
        method=request.method,
        path=path,
        client_ip=request.client.host if request.client else None
    )

    try:
        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "request_completed",
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2)
        )

        return response

    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        logger.error(
            "request_failed",
            method=request.method,
            path=path,
            error=str(e),
            duration_ms=round(duration_ms, 2),
            exc_info=True
        )
        raise


# Include API router
app.include_router(api_router, prefix="/api/v1")


@app.get("/api")
async def api_root():
    return {
        "message": f"{settings.APP_NAME} API",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "uptime_seconds": round(time.time() - app.state.startup_time, 1),
    }
