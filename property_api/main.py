import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from property_api.config import settings
from property_api.core.exceptions import (
    ConflictException,
    InvalidStateException,
    NotFoundException,
    ValidationException,
)
from property_api.core.logging import configure_logging
from property_api.database import Database
from property_api.routes import (
    invoice_routes,
    lease_routes,
    payment_routes,
    report_routes,
    tenant_routes,
    unit_routes,
)

logger = logging.getLogger(__name__)


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        database: Persistence gateway to use; defaults to one built from DATABASE_URL

    Returns:
        Configured FastAPI app; the database is connected in its lifespan
    """
    configure_logging(settings.LOG_LEVEL)
    database = database or Database(settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Only release connections this app opened
        owns_connection = not database.is_connected
        database.connect()
        if settings.DB_CREATE_TABLES:
            database.create_all()
        logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
        yield
        if owns_connection:
            database.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,  # Disable in production
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )
    app.state.database = database

    # CORS middleware
    cors_origins = settings.cors_origins_list
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": settings.APP_VERSION}

    # Include routers
    app.include_router(tenant_routes.router, prefix="/api/tenants", tags=["Tenants"])
    app.include_router(unit_routes.router, prefix="/api/units", tags=["Units"])
    app.include_router(lease_routes.router, prefix="/api/leases", tags=["Leases"])
    app.include_router(payment_routes.router, prefix="/api/payments", tags=["Payments"])
    app.include_router(invoice_routes.router, prefix="/api/invoices", tags=["Invoices"])
    app.include_router(report_routes.router, prefix="/api/reports", tags=["Reports"])

    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain exceptions to {"error": message} responses"""

    @app.exception_handler(NotFoundException)
    async def not_found_exception_handler(request: Request, exc: NotFoundException):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": str(exc)})

    @app.exception_handler(ConflictException)
    async def conflict_exception_handler(request: Request, exc: ConflictException):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})

    @app.exception_handler(InvalidStateException)
    async def invalid_state_exception_handler(request: Request, exc: InvalidStateException):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})

    @app.exception_handler(ValidationException)
    async def validation_exception_handler(request: Request, exc: ValidationException):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )


app = create_app()
