"""FastAPI application factory"""

import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from finquest.api.middleware import RequestIDMiddleware, MetricsMiddleware
from finquest.api.validation import format_errors
from finquest.api.v1 import auth, users, transactions, financial, payments, goals, games
from finquest.infrastructure.observability.logging import setup_logging
from finquest.config import settings

# Setup structured logging
setup_logging(settings.log_level)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap HTTP errors in the {success: false} envelope"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request validation failures are user-correctable: 400 with every failing field"""
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Validation Error", "errors": format_errors(exc.errors())},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logging.error(
        f"Unexpected error: {exc}",
        extra={"request_id": getattr(request.state, "request_id", "unknown"), "path": request.url.path},
    )
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="FinQuest API",
        description="Gamified personal finance: goals, payments and mini-games",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(auth.router, prefix="/api", tags=["auth"])
    app.include_router(users.router, prefix="/api", tags=["users"])
    app.include_router(transactions.router, prefix="/api", tags=["transactions"])
    app.include_router(financial.router, prefix="/api", tags=["financial"])
    app.include_router(payments.router, prefix="/api", tags=["payments"])
    app.include_router(goals.router, prefix="/api", tags=["goals"])
    app.include_router(games.router, prefix="/api", tags=["games"])

    return app


app = create_app()
