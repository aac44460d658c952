"""Navigation error taxonomy and the Litestar handlers that render it."""

from __future__ import annotations

import logging
from typing import Any

from litestar import Request, Response
from litestar.exceptions import HTTPException, ValidationException
from litestar.status_codes import (
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from consolenav.lib import observability

logger = logging.getLogger(__name__)


class NavigationError(Exception):
    """Base class for every error raised by the navigation manager."""

    status_code: int = HTTP_422_UNPROCESSABLE_ENTITY
    error: str = "navigation_error"
    retryable: bool = False

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        return {
            "status_code": self.status_code,
            "error": self.error,
            "detail": self.detail,
            "retryable": self.retryable,
        }


class ValidationError(NavigationError):
    """A field is missing or malformed, or a key/route is already taken."""

    error = "validation_error"

    def __init__(self, detail: str, field: str | None = None) -> None:
        super().__init__(detail)
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "field": self.field}


class DeletionBlocked(NavigationError):
    """Delete refused because the target, or one of its pages, is still visible."""

    status_code = HTTP_409_CONFLICT
    error = "deletion_blocked"

    def __init__(self, detail: str, key: str, blocking_keys: list[str] | None = None) -> None:
        super().__init__(detail)
        self.key = key
        self.blocking_keys = list(blocking_keys or [])

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "key": self.key, "blocking_keys": self.blocking_keys}


class PersistenceError(NavigationError):
    """The store failed; nothing was applied and callers must refetch."""

    status_code = HTTP_503_SERVICE_UNAVAILABLE
    error = "persistence_error"
    retryable = True


class NotFoundError(NavigationError):
    """The referenced key no longer exists (usually stale client state)."""

    status_code = HTTP_404_NOT_FOUND
    error = "not_found"

    def __init__(self, detail: str, key: str | None = None) -> None:
        super().__init__(detail)
        self.key = key

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "key": self.key}


def navigation_exception_handler(request: Request, exc: NavigationError) -> Response:
    """Render navigation errors as JSON with their own status code."""
    if isinstance(exc, PersistenceError):
        logger.warning("Navigation store failure on %s %s: %s", request.method, request.url.path, exc.detail)
    return Response(content=exc.to_dict(), status_code=exc.status_code, media_type="application/json")


def http_exception_handler(request: Request, exc: HTTPException) -> Response:
    """Render framework HTTP exceptions (auth, routing, body validation) as JSON."""
    status_code = exc.status_code
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    content: dict[str, Any] = {"status_code": status_code, "detail": detail}
    if getattr(exc, "extra", None):
        content["extra"] = exc.extra
    return Response(content=content, status_code=status_code, media_type="application/json")


def request_validation_handler(request: Request, exc: ValidationException) -> Response:
    """Malformed request bodies are validation errors like any other."""
    content = {
        "status_code": HTTP_422_UNPROCESSABLE_ENTITY,
        "error": ValidationError.error,
        "detail": exc.detail,
        "retryable": False,
        "extra": exc.extra,
    }
    return Response(content=content, status_code=HTTP_422_UNPROCESSABLE_ENTITY, media_type="application/json")


def internal_server_error_handler(request: Request, exc: Exception) -> Response:
    """Log unexpected exceptions and return a generic JSON 500."""
    if not observability.exception(
        "Unhandled exception on {method} {path}",
        method=request.method,
        path=request.url.path,
    ):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)

    return Response(
        content={"status_code": HTTP_500_INTERNAL_SERVER_ERROR, "detail": "Internal Server Error"},
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        media_type="application/json",
    )


EXCEPTION_HANDLERS: dict[type[Exception], Any] = {
    NavigationError: navigation_exception_handler,
    ValidationException: request_validation_handler,
    HTTPException: http_exception_handler,
    Exception: internal_server_error_handler,
}
