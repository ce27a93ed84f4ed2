# pcb_quote/core/error_handlers.py

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import logging
import traceback

from .exceptions import QuoteEngineError, ErrorCode

logger = logging.getLogger(__name__)

STATUS_CODE_MAP = {
    ErrorCode.INVALID_PARAMETERS: 400,
    ErrorCode.PRICING_CALCULATION_FAILED: 500,
    ErrorCode.INVALID_CONFIGURATION: 500,
    ErrorCode.INTERNAL_SERVER_ERROR: 500,
}

def setup_error_handlers(app: FastAPI):
    """Set up global error handlers for the FastAPI application."""

    @app.exception_handler(QuoteEngineError)
    async def quote_engine_error_handler(request: Request, exc: QuoteEngineError):
        status_code = STATUS_CODE_MAP.get(exc.code, 400)

        logger.error(
            f"Quote engine error: {exc.code.value}",
            extra={
                "error_code": exc.code.value,
                "technical_details": exc.technical_details,
                "request_url": str(request.url),
                "request_method": request.method,
            }
        )

        return JSONResponse(
            status_code=status_code,
            content=exc.to_response()
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors with better formatting."""

        errors = []
        for error in exc.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"])
            errors.append({
                "field": field_path,
                "message": error["msg"],
                "type": error["type"],
            })

        logger.warning(
            "Validation error",
            extra={
                "validation_errors": errors,
                "request_url": str(request.url),
                "request_method": request.method
            }
        )

        return JSONResponse(
            status_code=422,
            content={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Request validation failed",
                    "details": errors
                }
            }
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle standard HTTP exceptions with consistent format."""

        if isinstance(exc.detail, dict) and "error" in exc.detail:
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.detail
            )

        logger.warning(f"HTTP Exception: {exc.status_code}")

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": f"HTTP_{exc.status_code}",
                    "message": exc.detail,
                    "status_code": exc.status_code
                }
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions with proper logging."""

        logger.error(
            f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
            extra={
                "exception_type": type(exc).__name__,
                "request_url": str(request.url),
                "request_method": request.method,
                "traceback": traceback.format_exc()
            }
        )

        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_SERVER_ERROR",
                    "message": "An internal server error occurred. Please try again later.",
                }
            }
        )
