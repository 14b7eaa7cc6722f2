"""Domain exceptions and global exception handlers for the FastAPI application."""

import traceback

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..messages import MessageCode, get_default_message
from src.utils.logger import get_logger

logger = get_logger(__name__)


class PharmaStockException(Exception):
    """Base exception for PharmaStock API with unified message codes."""

    def __init__(
        self,
        message_code: MessageCode,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict | None = None,
        headers: dict | None = None,
        message: str | None = None,
    ):
        self.message_code = message_code
        self.status_code = status_code
        self.message: str = message or get_default_message(message_code)
        self.details = details or {}
        self.headers = headers or {}
        super().__init__(self.message)

    def to_response_dict(self) -> dict:
        """Convert exception to API response format."""
        return {
            "message_code": self.message_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(PharmaStockException):
    """Malformed or semantically invalid input. Raised before any write."""

    def __init__(
        self,
        message_code: MessageCode = MessageCode.VALIDATION_INVALID_INPUT,
        details: dict | None = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        message: str | None = None,
    ):
        super().__init__(message_code, status_code, details, message=message)


class AuthorizationError(PharmaStockException):
    """Caller lacks the required role or organization scope."""

    def __init__(
        self,
        message_code: MessageCode = MessageCode.INSUFFICIENT_PERMISSIONS,
        details: dict | None = None,
        message: str | None = None,
    ):
        super().__init__(
            message_code, status.HTTP_403_FORBIDDEN, details, message=message
        )


class NotFoundError(PharmaStockException):
    """Referenced request, notification or profile does not exist for the caller."""

    def __init__(
        self,
        message_code: MessageCode = MessageCode.RESOURCE_NOT_FOUND,
        details: dict | None = None,
        message: str | None = None,
    ):
        super().__init__(
            message_code, status.HTTP_404_NOT_FOUND, details, message=message
        )


class PersistenceError(PharmaStockException):
    """The store rejected a write. The session has been rolled back."""

    def __init__(
        self,
        message_code: MessageCode = MessageCode.PERSISTENCE_ERROR,
        details: dict | None = None,
        message: str | None = None,
    ):
        super().__init__(
            message_code,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            details,
            message=message,
        )


class RequestAlreadyProcessedError(ValidationError):
    """A role change request left the pending state and cannot transition again."""

    def __init__(self, details: dict | None = None):
        super().__init__(
            MessageCode.ROLE_REQUEST_ALREADY_PROCESSED,
            details,
            status_code=status.HTTP_409_CONFLICT,
        )


def _serializable_errors(exc: RequestValidationError | PydanticValidationError):
    try:
        serializable_errors = []
        for error in exc.errors():
            error_dict = dict(error)
            if "input" in error_dict and hasattr(error_dict["input"], "isoformat"):
                error_dict["input"] = error_dict["input"].isoformat()
            # ctx may hold the raw exception instance
            error_dict.pop("ctx", None)
            serializable_errors.append(error_dict)
        return serializable_errors
    except Exception:
        return [{"msg": "Validation error occurred", "type": "validation_error"}]


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""

    @app.exception_handler(PharmaStockException)
    async def pharmastock_exception_handler(
        request: Request, exc: PharmaStockException
    ) -> JSONResponse:
        """Handle custom PharmaStock exceptions."""
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            f"PharmaStock exception: {exc.message_code.value}",
            path=request.url.path,
            method=request.method,
            status_code=exc.status_code,
            details=exc.details,
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_response_dict(),
            headers=exc.headers,
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        """Handle FastAPI HTTP exceptions."""
        logger.warning(
            f"HTTP exception {exc.status_code}: {exc.detail}",
            path=request.url.path,
            method=request.method,
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "message_code": MessageCode.BAD_REQUEST
                if exc.status_code < 500
                else MessageCode.INTERNAL_SERVER_ERROR,
                "message": str(exc.detail),
                "details": {"description": "HTTP exception occurred"},
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def starlette_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle Starlette HTTP exceptions (routing 404/405)."""
        logger.warning(
            f"Starlette HTTP exception {exc.status_code}: {exc.detail}",
            path=request.url.path,
            method=request.method,
        )

        message_code = (
            MessageCode.RESOURCE_NOT_FOUND
            if exc.status_code == status.HTTP_404_NOT_FOUND
            else MessageCode.BAD_REQUEST
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "message_code": message_code,
                "message": str(exc.detail),
                "details": {"description": "HTTP exception occurred"},
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors."""
        logger.warning(
            "Validation error occurred",
            path=request.url.path,
            method=request.method,
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "message_code": MessageCode.INVALID_INPUT,
                "message": get_default_message(MessageCode.INVALID_INPUT),
                "details": {
                    "description": "Request validation failed",
                    "validation_errors": _serializable_errors(exc),
                },
            },
        )

    @app.exception_handler(PydanticValidationError)
    async def pydantic_validation_exception_handler(
        request: Request, exc: PydanticValidationError
    ) -> JSONResponse:
        """Handle Pydantic validation errors raised outside request parsing."""
        logger.warning(
            "Pydantic validation error occurred",
            path=request.url.path,
            method=request.method,
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "message_code": MessageCode.VALIDATION_ERROR,
                "message": "Validation failed",
                "details": {
                    "validation_errors": _serializable_errors(exc),
                },
            },
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(
        request: Request, exc: SQLAlchemyError
    ) -> JSONResponse:
        """Handle SQLAlchemy database errors."""
        logger.error(
            f"Database error: {str(exc)}",
            path=request.url.path,
            method=request.method,
            exception_type=type(exc).__name__,
        )

        if isinstance(exc, IntegrityError):
            return JSONResponse(
                status_code=status.HTTP_409_CONFLICT,
                content={
                    "message_code": MessageCode.CONFLICT,
                    "message": "Data integrity constraint violated",
                    "details": {"database_error": "Constraint violation"},
                },
            )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "message_code": MessageCode.PERSISTENCE_ERROR,
                "message": "Database error occurred",
                "details": {"database_error": "Internal database error"},
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle all other unhandled exceptions."""
        if isinstance(exc, PharmaStockException):
            return await pharmastock_exception_handler(request, exc)

        logger.error(
            f"Unhandled exception: {str(exc)}",
            path=request.url.path,
            method=request.method,
            exception_type=type(exc).__name__,
            traceback=traceback.format_exc(),
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "message_code": MessageCode.INTERNAL_ERROR,
                "message": "Internal server error",
                "details": {"error_type": type(exc).__name__},
            },
        )
