"""FastAPI application factory."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import IntegrityError
from starlette.middleware.sessions import SessionMiddleware

from hr_compliance import __version__
from hr_compliance.api.limits import limiter, request_limit_exceeded_handler
from hr_compliance.api.routes import (
    api_keys_router,
    audits_router,
    auth_router,
    clinic_licenses_router,
    compliance_documents_router,
    compliance_router,
    documents_router,
    employee_records_router,
    employees_router,
    health_router,
    locations_router,
    reports_router,
    responsible_persons_router,
)
from hr_compliance.config import Settings, get_settings
from hr_compliance.database import dispose_db, init_db
from hr_compliance.services.errors import ServiceError
from hr_compliance.services.rate_limiter import rate_limiter

logger = logging.getLogger(__name__)

RATE_LIMIT_PURGE_SECONDS = 3600


async def _purge_rate_limits() -> None:
    while True:
        await asyncio.sleep(RATE_LIMIT_PURGE_SECONDS)
        purged = rate_limiter.purge_expired()
        if purged:
            logger.debug("Purged %d expired rate limit windows", purged)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    init_db()
    purge_task = asyncio.create_task(_purge_rate_limits())
    logger.info("HR compliance API started")
    yield
    purge_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await purge_task
    await dispose_db()


def _field_path(loc: tuple) -> str:
    # Drop the leading "body"/"query"/"path" marker
    parts = loc[1:] if len(loc) > 1 else loc
    return ".".join(str(part) for part in parts)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(
        title="HR Compliance API",
        description="Employee credentialing and clinic licence compliance",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(SessionMiddleware, secret_key=settings.session_secret, same_site="lax")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    app.add_exception_handler(RateLimitExceeded, request_limit_exceeded_handler)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "Validation failed",
                "details": [
                    {
                        "field": _field_path(error["loc"]),
                        "message": error["msg"],
                        "type": error["type"],
                    }
                    for error in exc.errors()
                ],
            },
        )

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
            headers=exc.headers,
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
        logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": "Record conflicts with existing data"},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(employees_router)
    app.include_router(documents_router)
    app.include_router(locations_router)
    app.include_router(responsible_persons_router)
    app.include_router(clinic_licenses_router)
    app.include_router(compliance_documents_router)
    app.include_router(compliance_router)
    app.include_router(reports_router)
    app.include_router(audits_router)
    app.include_router(api_keys_router)
    # Generic /api/{kind}/{id} routes go last
    app.include_router(employee_records_router)

    return app


# Default app instance for uvicorn
app = create_app()
