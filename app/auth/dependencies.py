# =============================================================================
# app/auth/dependencies.py - Auth Middleware
# =============================================================================
# app_authc accepts "Authorization: Bearer <app key>" where the key is one of
# the configured app keys (see Settings.app_keys). It can be attached to any
# subset of routes; routes without it (e.g. /health) never check credentials.
#
# dont_log has no authorization effect; it only keeps a route out of the
# access log.
# =============================================================================

import logging

from fastapi import Request
from fastapi.security import HTTPBearer

from app.auth.models import AppClient
from app.context import RequestPhase, set_phase
from app.exceptions import AuthError

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor; returns None instead of raising
bearer = HTTPBearer(auto_error=False)


async def app_authc(request: Request) -> None:
    """
    Authenticate the calling app.

    On success marks the request as authenticated and records the app
    name on request.state.

    Raises:
        AuthError: 401 if the key is missing or unknown
    """
    set_phase(request, RequestPhase.AUTHENTICATING)
    if getattr(request.state, "authenticated", False):
        return

    credentials = await bearer(request)
    if credentials is None:
        raise AuthError("Authorization required")

    app_name = request.app.state.settings.app_keys.get(credentials.credentials)
    if app_name is None:
        logger.warning(f"Rejected unknown app key on {request.method} {request.url.path}")
        raise AuthError("Invalid app key")

    request.state.client = AppClient(name=app_name)
    request.state.app_name = app_name
    request.state.authenticated = True
    logger.debug(f"Authenticated app: {app_name}")


def dont_log(request: Request) -> None:
    """Exclude this request from the access log."""
    request.state.dont_log = True
