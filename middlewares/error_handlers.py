"""Exception handlers rendering service errors as the common error shape."""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from schemas.common import ErrorResponse
from services.exceptions import ServiceError
from utils.logger import api_logger

RETRY_AFTER_SECONDS = "1"


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """`ServiceError` -> `{success: false, error, message, details}`."""
    log = api_logger.error if exc.status_code >= 500 else api_logger.info
    log(
        f"Service error: {exc.error}",
        path=request.url.path,
        status_code=exc.status_code,
        error_message=exc.message,
    )
    headers = {"Retry-After": RETRY_AFTER_SECONDS} if exc.retryable else None
    body = ErrorResponse(error=exc.error, message=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"), headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    body = ErrorResponse(
        error="ValidationError",
        message="Request validation failed",
        details=[
            {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
            for error in exc.errors()
        ],
    )
    return JSONResponse(status_code=422, content=body.model_dump(mode="json"))


def setup_error_handlers(app):
    """
    Register the handlers.

    Usage:
        from middlewares.error_handlers import setup_error_handlers

        app = FastAPI()
        setup_error_handlers(app)
    """
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
