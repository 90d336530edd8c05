# app/core/errors.py
"""
Application error taxonomy and FastAPI exception handlers.

Every expected failure is raised as an AppError subclass and rendered as
{"error": <message>} with the matching status code. Dependency failures and
anything unexpected are logged server-side with the full stack, while the
client only ever sees a generic message.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("uvicorn.error")

GENERIC_SERVER_ERROR = "Error interno del servidor"


class AppError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = GENERIC_SERVER_ERROR

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Faltan datos"


class AuthenticationError(AppError):
    """No token, unusable token or bad credentials."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "No autorizado"


class AuthorizationError(AppError):
    """Valid identity, but insufficient role or ownership."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Acceso denegado"


class NotFoundError(AppError):
    """Referenced record does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Recurso no encontrado"


class DependencyError(AppError):
    """Store, hasher, signing or blob storage failure."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = GENERIC_SERVER_ERROR


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, DependencyError):
        # The cause carries the store/hasher detail; keep it in the logs only.
        logger.error(
            "[error] dependency failure on %s %s: %s",
            request.method, request.url.path, exc.message,
            exc_info=exc.__cause__ or exc,
        )
        return JSONResponse(status_code=exc.status_code, content={"error": GENERIC_SERVER_ERROR})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("[error] invalid request on %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Datos inválidos"})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("[error] unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": GENERIC_SERVER_ERROR})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
