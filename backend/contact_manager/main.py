"""
FastAPI application factory
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from contact_manager import __version__
from contact_manager.api.routes import contacts, health, metrics
from contact_manager.core.config import Settings
from contact_manager.core.database import Database
from contact_manager.core.logging_config import LoggingConfig
from contact_manager.core.middleware import (LoggingContextMiddleware,
                                             MetricsMiddleware)
from contact_manager.services.contact_gateway import (DEFAULT_HOOKS,
                                                      PersistenceHooks)

logger = LoggingConfig.get_logger(__name__)

BODY_NOT_OBJECT_MESSAGE = "must be a JSON object"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database at startup and release it at shutdown"""
    settings: Settings = app.state.settings
    database: Database = app.state.database
    logger.info(f"Starting {settings.app_name} in {settings.app_env} mode...")
    database.init()

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    # A database handed in by the caller is released by the caller
    if app.state.owns_database:
        database.dispose()


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed or non-object request bodies use the same error shape as field errors"""
    logger.info("Request body rejected", extra={"errors": str(exc.errors())})
    return JSONResponse(status_code=422, content={"errors": {"body": [BODY_NOT_OBJECT_MESSAGE]}})


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"errors": {"type": "HTTPException", "detail": exc.detail}},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Log every unhandled error and answer in the API error shape"""
    logger.error(
        "Unhandled exception",
        exc_info=exc,
        extra={
            "error_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
        }
    )
    return JSONResponse(
        status_code=500,
        content={"errors": {"type": type(exc).__name__, "detail": "Internal server error"}},
    )


def create_app(
    settings: Settings,
    database: Optional[Database] = None,
    hooks: PersistenceHooks = DEFAULT_HOOKS,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Build the application around explicitly provided collaborators

    Args:
        settings: resolved application settings
        database: database handle; built from settings when omitted
        hooks: persistence hooks passed to every ContactGateway
        configure_logging: set up handlers from settings
    """
    if configure_logging:
        LoggingConfig.configure(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Contact intake API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.owns_database = database is None
    app.state.database = database or Database(settings)
    app.state.persistence_hooks = hooks

    app.add_middleware(LoggingContextMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(contacts.router)
    app.include_router(health.router)
    app.include_router(metrics.router)

    @app.get("/api")
    async def root():
        """Root API endpoint"""
        return {
            "name": settings.app_name,
            "version": __version__,
            "status": "running",
            "environment": settings.app_env,
        }

    return app
