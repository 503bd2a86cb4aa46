"""
Main FastAPI application.
"""
import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1.api import api_router
from app.core.config import DEV_FALLBACK_JWT_SECRET, settings
from app.core.error_responses import ErrorCodes, ErrorMessages, error_body
from app.core.exceptions import UpstreamServiceError
from app.core.logging_config import setup_logging
from app.middleware import RequestLoggingMiddleware

# Initialize logging configuration at startup
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan event handler.

    - On startup: logs the configuration that affects behavior
    - On shutdown: releases pooled database connections
    """
    logger.info(
        f"Starting {settings.APP_NAME} {settings.APP_VERSION} "
        f"(env={settings.ENV}, survey version {settings.CURRENT_SURVEY_VERSION})"
    )
    if settings.JWT_SECRET_KEY == DEV_FALLBACK_JWT_SECRET:
        logger.warning(
            "JWT_SECRET_KEY is not set; magic links are signed with the "
            "development fallback secret"
        )

    yield

    from app.models import engine

    engine.dispose()
    logger.info("Application shutting down - database connections released")


tags_metadata = [
    {
        "name": "health",
        "description": "Health check endpoints for monitoring application status",
    },
    {
        "name": "stats",
        "description": "Population percentile and comparison statistics",
    },
    {
        "name": "survey",
        "description": "Survey submission",
    },
    {
        "name": "results",
        "description": "Results lookup, magic-link requests and the results page",
    },
]


def _serialize_validation_errors(exc: RequestValidationError) -> list:
    errors = []
    for error in exc.errors():
        error_dict = {
            "loc": list(error.get("loc", [])),
            "msg": str(error.get("msg", "")),
            "type": str(error.get("type", "")),
        }
        if "input" in error:
            error_dict["input"] = error["input"]
        errors.append(error_dict)
    return jsonable_encoder(errors)


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        lifespan=lifespan,
        description=(
            "**Quick Quality Assessment API** - backend for a 27-question "
            "quality self-assessment for ABA service providers.\n\n"
            "This API provides:\n"
            "* Survey submission and scoring\n"
            "* Population percentile and comparison statistics\n"
            "* Passwordless access to stored results via magic links\n\n"
            "## Magic links\n\n"
            "Results pages are opened with a signed, time-limited token. "
            "Request a new link with `/v1/results/magic-link`."
        ),
        docs_url=f"{settings.API_V1_PREFIX}/docs",
        redoc_url=f"{settings.API_V1_PREFIX}/redoc",
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        openapi_tags=tags_metadata,
    )

    # Configure CORS
    # The public site only needs read endpoints plus the two POSTs
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Render HTTP exceptions in the standard error body.
        """
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(ErrorCodes.for_status(exc.status_code), str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        """
        Handle request validation errors.
        """
        errors = _serialize_validation_errors(exc)
        logger.info(
            f"Request validation failed with {len(errors)} error(s)",
            extra={"path": str(request.url.path), "method": request.method},
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=error_body(
                ErrorCodes.VALIDATION_ERROR, ErrorMessages.INVALID_REQUEST, errors
            ),
        )

    @app.exception_handler(UpstreamServiceError)
    async def upstream_exception_handler(request: Request, exc: UpstreamServiceError):
        """
        Handle collaborator failures that no endpoint translated itself.

        The cause is logged with an error_id; the response stays generic.
        """
        error_id = str(uuid.uuid4())
        logger.error(
            f"Upstream failure [error_id={error_id}] during {exc.operation_name}: "
            f"{exc.original_error}",
            extra={
                "error_id": error_id,
                "error_type": exc.__class__.__name__,
                "operation": exc.operation_name,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(
                ErrorCodes.INTERNAL_ERROR,
                ErrorMessages.INTERNAL_ERROR,
                {"error_id": error_id},
            ),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """
        Handle unexpected exceptions.

        Generates a unique error_id (UUID) for each exception so support can
        find the full traceback in the logs. Internal details never reach the
        response.
        """
        error_id = str(uuid.uuid4())
        logger.exception(
            f"Unhandled exception [error_id={error_id}]: {exc}",
            extra={"error_id": error_id, "error_type": exc.__class__.__name__},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(
                ErrorCodes.INTERNAL_ERROR,
                ErrorMessages.INTERNAL_ERROR,
                {"error_id": error_id},
            ),
        )

    return app


app = create_application()


@app.get("/")
async def root():
    """
    Root endpoint.
    """
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": f"{settings.API_V1_PREFIX}/docs",
    }
