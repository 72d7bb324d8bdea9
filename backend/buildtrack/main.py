"""
Main FastAPI application.

WHY: This is the entry point for the application. It configures logging,
middleware, routes and exception handlers.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from buildtrack.core.config import settings
from buildtrack.core.exceptions import AppException
from buildtrack.core.exception_handlers import (
    app_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    database_exception_handler,
    generic_exception_handler,
)
from buildtrack.core.logging_config import setup_logging
from buildtrack.middleware import RequestContextMiddleware
from buildtrack.api import estimates, projects


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    WHY: Factory pattern allows easier testing with different configurations
    and makes it possible to create multiple app instances if needed.

    Returns:
        Configured FastAPI application instance
    """
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Construction project estimates API",
        version=settings.VERSION,
        docs_url=f"{settings.API_PREFIX}/docs",
        redoc_url=f"{settings.API_PREFIX}/redoc",
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
    )

    # Register exception handlers
    # WHY: Every failure leaves the API in the same JSON envelope and
    # storage errors never expose driver messages
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Request ID and caller identity for logging
    app.add_middleware(RequestContextMiddleware)

    # Configure CORS
    # WHY: The web frontend runs on a different origin during development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["health"])
    async def health_check() -> dict:
        """
        Health check endpoint.

        WHY: Allows load balancers and monitoring to verify the service is
        up without touching the database.
        """
        return {
            "status": "healthy",
            "version": settings.VERSION,
        }

    @app.get("/", tags=["root"])
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": f"{settings.API_PREFIX}/docs",
        }

    # Register API routers
    app.include_router(projects.router, prefix=settings.API_PREFIX)
    app.include_router(estimates.router, prefix=settings.API_PREFIX)
    app.include_router(estimates.project_router, prefix=settings.API_PREFIX)

    return app


# Create app instance
# WHY: Creating the app instance here allows it to be imported by uvicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn

    # WHY: This allows running the app directly with `python -m buildtrack.main`
    # for development. In production, use `uvicorn buildtrack.main:app` directly.
    uvicorn.run(
        "buildtrack.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info" if settings.DEBUG else "warning",
    )
