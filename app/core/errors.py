from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import ProPricingError, MethodNotAllowed
from app.schemas.response import ErrorResponse
from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump()
    )


def add_exception_handlers(app: FastAPI):
    """
    Registers exception handlers with the FastAPI app.
    Every failure leaves as {"error": "..."}.
    """
    @app.exception_handler(ProPricingError)
    async def propricing_exception_handler(request: Request, exc: ProPricingError):
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            f"{exc.code}: {exc.message}",
            extra={"method": request.method, "path": request.url.path}
        )
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Handles routing errors (404, 405).
        """
        if exc.status_code == 405:
            return error_response(405, MethodNotAllowed().message)
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Handles pydantic body validation errors as a plain 400.
        """
        logger.info(
            "Request body rejected",
            extra={"path": request.url.path, "errors": exc.errors()}
        )
        return error_response(400, "Invalid payload")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all for unhandled exceptions.
        """
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "method": request.method,
                "url": str(request.url),
                "client": request.client.host if request.client else "unknown"
            },
            exc_info=True
        )

        message = "An internal error occurred. Please try again later." if settings.is_production else str(exc)
        return error_response(500, message)
