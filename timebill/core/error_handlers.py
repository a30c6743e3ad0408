import logging
from typing import Dict

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError

from timebill.core.config import settings
from timebill.core.exceptions import BusinessException

# Set up module logger
logger = logging.getLogger(__name__)


def _request_extra(request: Request) -> Dict[str, str]:
    return {
        "path": request.url.path,
        "method": request.method,
        "client_host": request.client.host if request.client else "unknown",
    }


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers for the FastAPI application.

    Args:
        app: The FastAPI application instance
    """

    @app.exception_handler(BusinessException)
    async def business_exception_handler(
        request: Request, exc: BusinessException
    ) -> JSONResponse:
        """
        Convert business exceptions (billing preconditions, missing resources,
        conflicts) to a standardized JSON response.
        """
        logger.warning(
            f"Business exception: {exc.code}: {exc.message}",
            extra={**_request_extra(request), "details": exc.details},
        )

        content = {
            "error": exc.code,
            "message": exc.message,
        }
        if exc.details:
            content["details"] = exc.details

        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """
        Flatten pydantic validation errors into a field -> message mapping.
        """
        simplified_errors: Dict[str, str] = {}

        for error in exc.errors():
            loc = error.get("loc", [])
            if loc and loc[0] in ("body", "query", "path"):
                loc = loc[1:]

            field = ".".join(str(x) for x in loc) or "__root__"
            simplified_errors[field] = error.get("msg", "Validation error")

        logger.warning(
            f"Validation error: {simplified_errors}", extra=_request_extra(request)
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": "validation_error",
                "message": "Input validation failed",
                "details": simplified_errors,
            },
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(
        request: Request, exc: SQLAlchemyError
    ) -> JSONResponse:
        """
        Storage failures are surfaced to the caller without leaking SQL.
        """
        logger.error(
            f"Database error: {exc.__class__.__name__}",
            exc_info=True,
            extra=_request_extra(request),
        )

        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "error": "storage_error",
                "message": "The data store could not complete the operation",
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """
        Log unhandled exceptions and return a generic error message.
        """
        logger.error(
            f"Unhandled exception: {str(exc)}",
            exc_info=True,
            extra=_request_extra(request),
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "internal_server_error",
                "message": str(exc)
                if settings.ENVIRONMENT != "production"
                else "An internal server error occurred",
            },
        )
