"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from pymongo.errors import PyMongoError
from starlette.responses import Response

from coop_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from coop_gateway.api.v1 import loan, payment
from coop_gateway.api.v1.schemas import ErrorResponse
from coop_gateway.config import settings
from coop_gateway.domain.exceptions import DomainException, UnavailableError
from coop_gateway.infrastructure.database.indexes import ensure_indexes
from coop_gateway.infrastructure.database.store import DocumentStore
from coop_gateway.infrastructure.observability.logging import setup_logging

# Setup structured logging
setup_logging(settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect the store and ensure indexes on startup; release the client on shutdown"""
    store: DocumentStore = app.state.store
    try:
        store.connect()
    except UnavailableError as e:
        # Requests answer 503 until the store is reachable
        logger.error(f"Document store unavailable: {e.message}", extra={"error": e.error})

    if store.is_connected:
        try:
            ensure_indexes(store.database())
        except PyMongoError as e:
            logger.warning(f"Failed to ensure indexes: {e}")

    yield
    store.close()


def error_response(status_code: int, message: str, error: str | None = None) -> JSONResponse:
    body = ErrorResponse(code=status_code, message=message, error=error)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def create_app(store: DocumentStore | None = None) -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Coop Loan Gateway",
        description="Generic collection gateway and internal transfer service for the cooperative app",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.store = store or DocumentStore()

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(RequestIDMiddleware)

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException):
        return error_response(exc.status_code, exc.message, exc.error)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(400, "Invalid request body", str(exc.errors()))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception", extra={"request_id": getattr(request.state, "request_id", None)})
        return error_response(500, "Internal server error")

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {
            "status": "ok",
            "service": settings.service_name,
            "database": "connected" if app.state.store.is_connected else "disconnected",
        }

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(loan.router, prefix="/api/v1/loan", tags=["gateway"])
    app.include_router(payment.router, prefix="/api/v1/payment", tags=["payments"])

    return app


app = create_app()
