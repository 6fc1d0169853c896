# =============================================================================
# app/exceptions.py - Domain Errors and the Error Translator
# =============================================================================
# Every failure in a request chain is raised as an HTTPError (or a subclass).
# translate_error() is the single place where an error becomes an HTTP
# response; the exception handlers installed by the Microservice all
# delegate to it.
# =============================================================================

import logging
from http import HTTPStatus
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.context import RequestPhase, get_phase

logger = logging.getLogger(__name__)

DEFAULT_STATUS_CODE = 500


def resolve_status_code(value: Any) -> int:
    """
    Resolve an error status code.

    Integers (or numeric strings) in the 400-599 range are used as-is;
    anything else falls back to 500.
    """
    try:
        code = int(value)
    except (TypeError, ValueError):
        return DEFAULT_STATUS_CODE
    if 400 <= code <= 599:
        return code
    return DEFAULT_STATUS_CODE


def default_message(status_code: int) -> str:
    """Standard reason phrase for a status code ("Error" if unknown)."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


class HTTPError(Exception):
    """
    Base domain error: a message plus an HTTP status code.

    Raise it (or a subclass) from any preloader, middleware or handler;
    the chain stops and the error is translated into the response.
    """

    default_status_code = DEFAULT_STATUS_CODE
    default_code = "HTTP_ERROR"

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        code: str | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.status_code = resolve_status_code(
            self.default_status_code if status_code is None else status_code
        )
        self.message = message or default_message(self.status_code)
        self.code = code or self.default_code
        self.headers = headers or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to API response dict."""
        return {
            "status": "error",
            "message": self.message,
            "code": self.code,
        }


# =============================================================================
# Error Taxonomy
# =============================================================================

class NotFoundError(HTTPError):
    """Raised when a lookup returns nothing."""

    default_status_code = 404
    default_code = "NOT_FOUND"


class InvalidPayloadError(HTTPError):
    """Raised for malformed input to create/update."""

    default_status_code = 400
    default_code = "VALIDATION_ERROR"

    def __init__(self, message: str | None = None, errors: list[Any] | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.errors:
            result["errors"] = self.errors
        return result


class StorageError(HTTPError):
    """Raised when the storage backend fails during a CRUD operation."""

    default_status_code = 500
    default_code = "STORAGE_ERROR"


class AuthError(HTTPError):
    """Raised by the authentication gate."""

    default_status_code = 401
    default_code = "UNAUTHORIZED"

    def __init__(self, message: str | None = None, **kwargs):
        kwargs.setdefault("headers", {"WWW-Authenticate": "Bearer"})
        super().__init__(message, **kwargs)


class SyntheticError(HTTPError):
    """Raised on purpose by the diagnostic /error/{code} route."""

    default_code = "SYNTHETIC_ERROR"


class MessagingError(HTTPError):
    """Raised when an outbound message could not be delivered."""

    default_status_code = 502
    default_code = "MESSAGING_ERROR"


# =============================================================================
# Translator
# =============================================================================

def to_http_error(exc: BaseException) -> HTTPError:
    """Coerce any exception into an HTTPError."""
    if isinstance(exc, HTTPError):
        return exc

    if isinstance(exc, StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else None
        return HTTPError(detail, exc.status_code, headers=dict(exc.headers or {}))

    if isinstance(exc, RequestValidationError):
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
            for err in exc.errors()
        ]
        return InvalidPayloadError("Invalid request", errors=errors)

    # Unknown errors never leak their message to the client
    return HTTPError(status_code=DEFAULT_STATUS_CODE)


def translate_error(exc: BaseException, phase: RequestPhase | None = None) -> JSONResponse:
    """
    Convert an error into the JSON response sent to the client.

    Returns a response with the error's status code and a body of
    {"status": "error", "message": ..., "code": ...}. This function
    does not raise.
    """
    err = to_http_error(exc)
    where = f" during {phase.value}" if phase else ""

    if err.status_code >= 500:
        logger.error(
            f"{err.status_code} {err.code}{where}: {exc!r}",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
    else:
        logger.info(f"{err.status_code} {err.code}{where}: {err.message}")

    return JSONResponse(
        status_code=err.status_code,
        content=err.to_dict(),
        headers=err.headers or None,
    )


# =============================================================================
# Exception Handlers
# =============================================================================

async def error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Terminal stage of every request chain that failed.

    Installed by the Microservice for HTTPError, Starlette's HTTPException,
    RequestValidationError and Exception.
    """
    failed_in = get_phase(request)
    request.state.phase = RequestPhase.ERRORING
    response = translate_error(exc, failed_in)
    request.state.phase = RequestPhase.RESPONDED
    return response
