"""
FastAPI Main Application for MarketLens
REST API over queries, products, reviews, keywords and recommendations
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from contextlib import asynccontextmanager
import time
import logging

from .. import __version__
from ..config import settings, setup_logging
from ..database import db_manager, RecordNotFoundError, InvalidStatusTransitionError
from ..services.scheduler import sweep_scheduler

logger = logging.getLogger(__name__)


# ============================================================
# Application Lifespan Management
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle

    Startup:
        - Configure logging
        - Initialize database
        - Start the expiry sweep scheduler (when enabled)

    Shutdown:
        - Stop scheduler
        - Close database connections
    """
    setup_logging()
    logger.info("Starting MarketLens API...")

    try:
        logger.info("Initializing database...")
        await db_manager.initialize()
        logger.info("Database initialized successfully")

        await sweep_scheduler.start()

        logger.info("MarketLens API started successfully")

    except Exception as e:
        logger.error(f"Failed to start MarketLens API: {e}")
        raise

    yield

    logger.info("Shutting down MarketLens API...")

    try:
        await sweep_scheduler.stop()
        await db_manager.close()
        logger.info("MarketLens API shut down successfully")

    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


# ============================================================
# FastAPI Application
# ============================================================

app = FastAPI(
    title="MarketLens - Marketplace Review Analysis Tracker",
    description="Stores marketplace analysis queries with their products, reviews, keywords and recommendations",
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)


# ============================================================
# CORS Middleware
# ============================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.API_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================
# Middleware: Request Logging
# ============================================================

@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    """
    Log all requests with timing information
    Adds X-Process-Time header to response
    """
    start_time = time.time()

    response = await call_next(request)

    process_time = time.time() - start_time

    logger.info(
        f"{request.method} {request.url.path} "
        f"- {response.status_code} - {process_time:.3f}s"
    )

    response.headers["X-Process-Time"] = f"{process_time:.3f}"

    return response


# ============================================================
# Exception Handlers
# ============================================================

@app.exception_handler(RecordNotFoundError)
async def not_found_handler(request: Request, exc: RecordNotFoundError):
    """Unknown ids -> 404"""
    logger.warning(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=404,
        content={"error": "Not found", "message": str(exc), "path": request.url.path}
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    """Constraint violations, e.g. an owner id that does not exist -> 409"""
    logger.error(f"{request.method} {request.url.path}: integrity error: {exc.orig}")
    return JSONResponse(
        status_code=409,
        content={"error": "Constraint violation", "message": str(exc.orig), "path": request.url.path}
    )


@app.exception_handler(InvalidStatusTransitionError)
async def status_transition_handler(request: Request, exc: InvalidStatusTransitionError):
    """Illegal status change under STRICT_STATUS_TRANSITIONS -> 409"""
    logger.warning(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=409,
        content={"error": "Invalid status transition", "message": str(exc), "path": request.url.path}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Handle unhandled exceptions globally

    In development: Return full error message
    In production: Return generic error message
    """
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    error_detail = None
    if settings.ENVIRONMENT.value == "development":
        error_detail = str(exc)

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": error_detail,
            "path": request.url.path
        }
    )


# ============================================================
# Root Endpoint
# ============================================================

@app.get("/")
async def root():
    """
    Root endpoint - API information
    """
    return {
        "name": "MarketLens API",
        "version": __version__,
        "status": "running",
        "docs": "/api/docs",
        "redoc": "/api/redoc",
        "openapi": "/api/openapi.json"
    }


# ============================================================
# Router Registration
# ============================================================

from .routes import queries, products, reviews, keywords, recommendations, system

app.include_router(system.router, tags=["system"])

app.include_router(
    queries.router,
    prefix=f"{settings.API_PREFIX}/queries",
    tags=["queries"]
)

app.include_router(
    products.router,
    prefix=f"{settings.API_PREFIX}/products",
    tags=["products"]
)

app.include_router(
    reviews.router,
    prefix=f"{settings.API_PREFIX}/reviews",
    tags=["reviews"]
)

app.include_router(
    keywords.router,
    prefix=f"{settings.API_PREFIX}/keywords",
    tags=["keywords"]
)

app.include_router(
    recommendations.router,
    prefix=f"{settings.API_PREFIX}/recommendations",
    tags=["recommendations"]
)
