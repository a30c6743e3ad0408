import logging
import time
import uuid

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from timebill.core.logging import request_context

# Set up logger
logger = logging.getLogger(__name__)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Middleware that tags every request with an id.

    The id is taken from the incoming header when present, stored on
    ``request.state`` and echoed back in the response headers so that log
    lines about a bill or balance call can be correlated with the client side.
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception as exc:
            self._log_exception(request, exc, start_time)
            raise

        response.headers[self.header_name] = request_id
        self._log_request(request, response, start_time)
        return response

    @staticmethod
    def _url(request: Request) -> str:
        if request.query_params:
            return f"{request.url.path}?{request.query_params}"
        return request.url.path

    def _log_request(
        self, request: Request, response: Response, start_time: float
    ) -> None:
        """Log details about the request and response."""
        log_dict = {
            "request_id": getattr(request.state, "request_id", "unknown"),
            "method": request.method,
            "url": self._url(request),
            "status_code": response.status_code,
            "process_time_ms": round((time.time() - start_time) * 1000, 2),
        }

        if response.status_code >= 500:
            logger.error(f"Request failed: {log_dict}")
        elif response.status_code >= 400:
            logger.warning(f"Request error: {log_dict}")
        else:
            logger.info(f"Request completed: {log_dict}")

    def _log_exception(
        self, request: Request, exc: Exception, start_time: float
    ) -> None:
        """Log unhandled exceptions."""
        log_dict = {
            "request_id": getattr(request.state, "request_id", "unknown"),
            "method": request.method,
            "url": self._url(request),
            "process_time_ms": round((time.time() - start_time) * 1000, 2),
            "exception": str(exc),
        }
        logger.error(f"Unhandled exception during request: {log_dict}", exc_info=True)


class LogContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that puts request information into the logging context.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        token = request_context.set(
            {
                "request_id": getattr(request.state, "request_id", "unknown"),
                "method": request.method,
                "path": request.url.path,
            }
        )
        try:
            return await call_next(request)
        finally:
            request_context.reset(token)


def register_middlewares(app: FastAPI) -> None:
    """
    Register all middlewares with the FastAPI app.

    Middleware runs in reverse order of registration, so the request id is
    assigned before the log context is populated.
    """
    app.add_middleware(LogContextMiddleware)
    app.add_middleware(RequestIdMiddleware, header_name="X-Request-ID")
