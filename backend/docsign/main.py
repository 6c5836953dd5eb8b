"""
DocSign FastAPI Application

Main application entry point for the DocSign backend.
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docsign.config import CORS_ALLOW_HEADERS, CORS_ALLOW_METHODS, Settings, settings as default_settings
from docsign.middleware import RequestSizeLimitMiddleware, register_exception_handlers
from docsign.routers import auth, documents
from docsign.services.database_service import DatabaseService
from docsign.services.logging_service import AuditLoggingService
from docsign.services.storage_service import StorageService

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    database_service: Optional[DatabaseService] = None,
    storage_service: Optional[StorageService] = None,
    audit_logger: Optional[AuditLoggingService] = None,
) -> FastAPI:
    """
    Build the application and wire its services.

    Args:
        settings: Configuration (defaults to the environment-loaded settings)
        database_service: Pre-built database service (tests pass an initialized one)
        storage_service: Pre-built file storage service
        audit_logger: Pre-built audit logger

    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings

    app = FastAPI(
        title="DocSign API",
        description="Document upload, listing and signing with credential-based sessions",
        version="0.1.0"
    )

    # Make services available to routers
    app.state.settings = settings
    app.state.database_service = database_service or DatabaseService(settings.DATABASE_URL)
    app.state.storage_service = storage_service or StorageService(
        project_id=settings.PROJECT_ID,
        bucket_name=settings.UPLOAD_BUCKET
    )
    app.state.audit_logger = audit_logger or AuditLoggingService(
        project_id=settings.PROJECT_ID,
        enabled=settings.AUDIT_LOGGING_ENABLED
    )

    @app.on_event("startup")
    async def startup_event():
        """
        Run on application startup.
        Opens the database and creates missing tables.
        """
        logger.info("Starting DocSign Backend")
        if not settings.UPLOAD_BUCKET:
            logger.warning("UPLOAD_BUCKET is not set; uploads will fail")

        db = app.state.database_service
        if db.engine is None:
            db.initialize()
        logger.info("✓ DocSign Backend Ready")

    @app.on_event("shutdown")
    async def shutdown_event():
        """
        Run on application shutdown.
        Closes database connections.
        """
        logger.info("Shutting down DocSign Backend...")
        app.state.database_service.close()

    # Configure CORS for the /api routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
    )
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.BODY_SIZE_LIMIT)
    register_exception_handlers(app)

    # Include routers
    app.include_router(auth.router)
    app.include_router(documents.router)

    @app.get("/", tags=["health"])
    async def health_check():
        """
        Health check endpoint.

        Returns:
            Dictionary containing service status
        """
        return {
            "status": "healthy",
            "service": "docsign-api",
            "version": "0.1.0"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8000)
