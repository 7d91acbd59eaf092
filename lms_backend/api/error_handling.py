"""Exception handlers rendering the response envelope."""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from ..core.exceptions import BaseAPIException
from ..schemas.common import ErrorResponse

logger = structlog.get_logger("api.error")

_STATUS_TO_CODE = {
    400: "VALIDATION_ERROR",
    401: "AUTHENTICATION_ERROR",
    403: "AUTHORIZATION_ERROR",
    404: "NOT_FOUND_ERROR",
    405: "METHOD_NOT_ALLOWED",
    429: "RATE_LIMIT_EXCEEDED",
}


def error_response(
    status_code: int,
    message: str,
    error_code: str,
    details: dict = None,
    headers: dict = None
) -> JSONResponse:
    """Build a ``{success: false, message, ...}`` response."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse.from_parts(message, error_code, details),
        headers=headers or None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install envelope handlers for API, validation and HTTP errors."""

    @app.exception_handler(BaseAPIException)
    async def handle_api_exception(request: Request, exc: BaseAPIException):
        log_fn = logger.error if exc.status_code >= 500 else logger.info
        log_fn(
            "API error",
            path=request.url.path,
            method=request.method,
            status_code=exc.status_code,
            error_code=exc.error_code,
            message=exc.message,
        )
        return error_response(exc.status_code, exc.message, exc.error_code, exc.details, exc.headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
                "message": error.get("msg", "Invalid value"),
            }
            for error in exc.errors()
        ]
        logger.info(
            "Request validation failed",
            path=request.url.path,
            method=request.method,
            errors=errors,
        )
        message = errors[0]["message"] if len(errors) == 1 else "Invalid request data"
        return error_response(400, message, "VALIDATION_ERROR", {"errors": errors})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return error_response(
            exc.status_code,
            str(exc.detail),
            _STATUS_TO_CODE.get(exc.status_code, "HTTP_EXCEPTION"),
            headers=getattr(exc, "headers", None),
        )
