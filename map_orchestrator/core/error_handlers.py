"""
Error handlers for the FastAPI application.

Tool calls never surface errors this way (the dispatcher turns them into
strings for the model); these handlers cover the HTTP surface only.
"""

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
from typing import Dict, Any, Optional

from map_orchestrator.core.exceptions import MapOrchestrationException, ErrorCode
from map_orchestrator.schemas.base import ErrorEnvelope

logger = logging.getLogger(__name__)


class ErrorHandler:
    """
    Error handling for the HTTP surface with logging and error counting.
    """

    def __init__(self):
        self.error_counts: Dict[str, int] = {}

    async def handle_orchestration_exception(
        self,
        request: Request,
        exc: MapOrchestrationException
    ) -> JSONResponse:
        """
        Handle MapOrchestrationException with detailed logging.

        Args:
            request: FastAPI request object
            exc: MapOrchestrationException instance

        Returns:
            JSONResponse with structured error information
        """
        logger.error(
            f"MapOrchestrationException on {request.url.path}: {exc.message}",
            extra={'error_code': exc.error_code.value}
        )
        self._track_error(exc.error_code.value)

        return self._create_error_response(
            error_code=exc.error_code.value,
            message=exc.message,
            details=exc.details,
            status_code=exc.status_code
        )

    async def handle_validation_error(
        self,
        request: Request,
        exc: RequestValidationError
    ) -> JSONResponse:
        """Handle Pydantic validation errors with field information."""
        validation_errors = [
            {
                'field': '.'.join(str(loc) for loc in error['loc']),
                'message': error['msg'],
                'type': error['type'],
            }
            for error in exc.errors()
        ]

        logger.warning(
            f"Validation error on {request.url.path}: {len(validation_errors)} field errors",
            extra={'error_code': ErrorCode.VALIDATION_ERROR.value}
        )

        return self._create_error_response(
            error_code=ErrorCode.VALIDATION_ERROR.value,
            message="Request validation failed",
            details={'validation_errors': validation_errors},
            status_code=422
        )

    async def handle_http_exception(
        self,
        request: Request,
        exc: HTTPException
    ) -> JSONResponse:
        """Handle HTTP exceptions raised by routes or routing."""
        error_code = "NOT_FOUND" if exc.status_code == 404 else ErrorCode.INTERNAL_SERVER_ERROR.value

        logger.warning(f"HTTP exception on {request.url.path}: {exc.status_code} - {exc.detail}")

        return self._create_error_response(
            error_code=error_code,
            message=str(exc.detail),
            status_code=exc.status_code
        )

    async def handle_generic_exception(
        self,
        request: Request,
        exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions with full error logging."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {type(exc).__name__}: {str(exc)}",
            exc_info=True,
            extra={'error_code': ErrorCode.INTERNAL_SERVER_ERROR.value}
        )
        self._track_error(ErrorCode.INTERNAL_SERVER_ERROR.value)

        return self._create_error_response(
            error_code=ErrorCode.INTERNAL_SERVER_ERROR.value,
            message="An internal server error occurred",
            status_code=500
        )

    def _create_error_response(
        self,
        error_code: str,
        message: str,
        status_code: int,
        details: Optional[Dict[str, Any]] = None
    ) -> JSONResponse:
        error_response = ErrorEnvelope(
            error=message,
            error_code=error_code,
            details=details or {},
        )
        return JSONResponse(
            status_code=status_code,
            content=error_response.model_dump(mode="json")
        )

    def _track_error(self, error_code: str) -> None:
        self.error_counts[error_code] = self.error_counts.get(error_code, 0) + 1

        if self.error_counts[error_code] % 10 == 0:
            logger.warning(
                f"High frequency error detected: {error_code} occurred {self.error_counts[error_code]} times"
            )


# Global error handler instance
error_handler = ErrorHandler()


def setup_error_handlers(app):
    """
    Set up all error handlers for the FastAPI application.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(MapOrchestrationException)
    async def orchestration_exception_handler(request: Request, exc: MapOrchestrationException):
        return await error_handler.handle_orchestration_exception(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return await error_handler.handle_validation_error(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        fastapi_exc = HTTPException(status_code=exc.status_code, detail=exc.detail)
        return await error_handler.handle_http_exception(request, fastapi_exc)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        return await error_handler.handle_generic_exception(request, exc)
