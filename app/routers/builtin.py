# =============================================================================
# app/routers/builtin.py - Built-in Service Routes
# =============================================================================
# Routes every Microservice exposes regardless of its resource:
#
#   GET /version       service name and version          (no auth)
#   GET /health        liveness                          (no auth, not logged)
#   GET /schema        resource schemas                  (no auth)
#   GET /error/{code}  raises an error with that code    (auth)
#
# /error/{code}?message=... exists to exercise the error translator end to end.
# =============================================================================

from fastapi import Request

from app.auth import app_authc, dont_log
from app.exceptions import SyntheticError


def setup_params(router) -> None:
    router.param("code", preload_error_code)


def setup_routes(router) -> None:
    router.get("/version", version)
    router.get("/health", dont_log, health)
    router.get("/schema", schema)
    router.get("/error/{code}", app_authc, raise_error)


# =============================================================================
# Preloaders
# =============================================================================

def preload_error_code(request: Request, code: str) -> None:
    """Pass the raw code through; it is parsed when the error is built."""
    request.state.error_code = code


# =============================================================================
# Handlers
# =============================================================================

async def version(request: Request) -> dict:
    settings = request.app.state.settings
    return {"name": settings.SERVICE_NAME, "version": settings.SERVICE_VERSION}


async def health(request: Request) -> dict:
    return {"status": "OK"}


async def schema(request: Request) -> dict:
    return request.app.state.resource.get_schema()


async def raise_error(request: Request) -> None:
    """Always fails with the preloaded code (500 if it isn't a valid error code)."""
    message = request.query_params.get("message") or "Error"
    raise SyntheticError(message, status_code=request.state.error_code)
