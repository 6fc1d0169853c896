# =============================================================================
# app/context.py - Request Context Helpers
# =============================================================================
# Per-request state lives on the Starlette Request (request.state) and is
# never shared between requests. This module holds the request lifecycle
# phases and the request-id ContextVar used for log correlation.
# =============================================================================

import uuid
from contextvars import ContextVar
from enum import Enum

from fastapi import Request


class RequestPhase(str, Enum):
    """
    Lifecycle of a single request.

    Flow: matched -> preloading -> authenticating -> handling -> responded
    Per-route middleware other than the auth gate runs as "middleware".
    Any raised error moves the request to erroring -> responded.
    """
    MATCHED = "matched"
    PRELOADING = "preloading"
    AUTHENTICATING = "authenticating"
    MIDDLEWARE = "middleware"
    HANDLING = "handling"
    ERRORING = "erroring"
    RESPONDED = "responded"


def get_phase(request: Request) -> RequestPhase | None:
    """Current phase of the request, or None before routing."""
    return getattr(request.state, "phase", None)


def set_phase(request: Request, phase: RequestPhase) -> None:
    """Move the request to a new phase; responded is terminal."""
    if get_phase(request) is RequestPhase.RESPONDED:
        raise RuntimeError("request has already been responded to")
    request.state.phase = phase


# -----------------------------------------------------------------------------
# Request IDs
# -----------------------------------------------------------------------------
# ContextVar values are per asyncio task, so each request keeps its own id.

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    return _request_id.get()


def set_request_id(rid: str | None) -> None:
    _request_id.set(rid)


def ensure_request_id(incoming: str | None = None) -> str:
    """Reuse an incoming request id or generate a new one."""
    rid = (incoming or "").strip() or str(uuid.uuid4())
    set_request_id(rid)
    return rid
