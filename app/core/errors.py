# app/core/errors.py
"""
Domain error taxonomy.

Services raise these instead of building HTTPException by hand. Each error is
an HTTPException with a fixed status code, so FastAPI renders it as
`{"detail": "..."}` without extra plumbing.

    ValidationError      422  malformed / missing input
    NotFoundError        404  referenced entity absent
    AuthorizationError   403  authenticated, insufficient rights
    ConflictError        409  state machine violation / uniqueness collision
    TransientStoreError  503  storage or database collaborator failure
"""
import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

logger = logging.getLogger(__name__)


class DomainError(HTTPException):
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str):
        super().__init__(status_code=self.http_status, detail=detail)

    def __str__(self) -> str:
        return str(self.detail)


class ValidationError(DomainError):
    http_status = 422


class NotFoundError(DomainError):
    http_status = status.HTTP_404_NOT_FOUND


class AuthorizationError(DomainError):
    http_status = status.HTTP_403_FORBIDDEN


class ConflictError(DomainError):
    http_status = status.HTTP_409_CONFLICT


class TransientStoreError(DomainError):
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE


async def _operational_error_handler(request: Request, exc: OperationalError):
    logger.error("Database unavailable on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Service temporarily unavailable"},
    )


async def _unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Attach boundary handlers for errors that are not DomainErrors.

    Internal details are logged, never returned to the client.
    """
    app.add_exception_handler(OperationalError, _operational_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
