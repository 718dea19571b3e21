import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tenantcrm.core.errors import AuthenticationError, ServiceError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str, code: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": code},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        log_fn = logger.error if exc.status_code >= 500 else logger.warning
        log_fn(
            "service_error path=%s method=%s status=%s code=%s message=%s",
            request.url.path,
            request.method,
            exc.status_code,
            exc.error_code,
            exc.message,
        )
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
        return _error_response(exc.status_code, exc.message, exc.error_code, headers)

    @app.exception_handler(Exception)
    async def handle_uncaught(request: Request, exc: Exception):
        logger.exception(
            "unhandled_exception path=%s method=%s error_type=%s",
            request.url.path,
            request.method,
            type(exc).__name__,
        )
        return _error_response(500, "Internal server error", "server_error")
