# =============================================================================
# app/microservice.py - The Dispatcher
# =============================================================================
# Microservice takes a Resource, lets it register preloaders and routes on a
# ResourceRouter, and mounts the result on a FastAPI application. Each route
# runs as one chain per request:
#
#   preloaders (path order) -> per-route middleware (auth, ...) -> handler
#
# Any HTTPError raised along the way stops the chain and is turned into the
# response by app.exceptions.error_handler.
#
# Usage:
#   service = Microservice(WidgetResource(store, slack), settings)
#   app = service.create_app()
# =============================================================================

import inspect
import logging
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Union

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, get_settings
from app.context import RequestPhase, set_phase
from app.exceptions import HTTPError, error_handler
from app.middleware import log_requests
from app.resource import Resource
from app.routers import builtin

logger = logging.getLogger(__name__)

# {name} or {name:converter} segments of a path pattern
PATH_PARAM_PATTERN = re.compile(r"{(\w+)(?::[^}]*)?}")

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")

Preloader = Callable[[Request, str], Union[None, Awaitable[None]]]
Middleware = Callable[[Request], Union[None, Awaitable[None]]]
Handler = Callable[[Request], Any]


@dataclass(frozen=True)
class RouteRegistration:
    """One registered route: method, path pattern and its ordered chain."""
    method: str
    path: str
    middleware: tuple[Middleware, ...]
    handler: Handler
    params: tuple[tuple[str, Preloader], ...]

    @property
    def name(self) -> str:
        return getattr(self.handler, "__name__", "handler")


class ResourceRouter:
    """
    Collects preloaders and routes from a Resource.

    Preloaders must be registered before the routes that use them: a route
    binds the preloaders known at the time it is registered.
    """

    def __init__(self):
        self._params: dict[str, Preloader] = {}
        self._routes: list[RouteRegistration] = []

    @property
    def routes(self) -> tuple[RouteRegistration, ...]:
        return tuple(self._routes)

    @property
    def params(self) -> dict[str, Preloader]:
        return dict(self._params)

    def param(self, name: str, loader: Preloader) -> None:
        """Register the preloader for path parameter ``name``."""
        if not callable(loader):
            raise TypeError(f"preloader for '{name}' is not callable")
        self._params[name] = loader

    def route(self, method: str, path: str, *chain: Callable) -> RouteRegistration:
        """
        Register a route.

        ``chain`` is zero or more middleware callables followed by the handler.
        """
        method = method.upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"unsupported method: {method}")
        if not chain:
            raise ValueError(f"route {method} {path} has no handler")

        *middleware, handler = chain
        params = tuple(
            (name, self._params[name])
            for name in PATH_PARAM_PATTERN.findall(path)
            if name in self._params
        )
        registration = RouteRegistration(method, path, tuple(middleware), handler, params)
        self._routes.append(registration)
        return registration

    def get(self, path: str, *chain: Callable) -> RouteRegistration:
        return self.route("GET", path, *chain)

    def post(self, path: str, *chain: Callable) -> RouteRegistration:
        return self.route("POST", path, *chain)

    def put(self, path: str, *chain: Callable) -> RouteRegistration:
        return self.route("PUT", path, *chain)

    def patch(self, path: str, *chain: Callable) -> RouteRegistration:
        return self.route("PATCH", path, *chain)

    def delete(self, path: str, *chain: Callable) -> RouteRegistration:
        return self.route("DELETE", path, *chain)


# =============================================================================
# Chain Stages
# =============================================================================

async def _call(fn: Callable, *args: Any) -> Any:
    # Preloaders, middleware and handlers may be sync or async
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


async def _mark_matched(request: Request) -> None:
    set_phase(request, RequestPhase.MATCHED)


def _preload_stage(name: str, loader: Preloader) -> Callable:
    async def preload(request: Request) -> None:
        set_phase(request, RequestPhase.PRELOADING)
        await _call(loader, request, request.path_params[name])

    preload.__name__ = f"preload_{name}"
    return preload


def _middleware_stage(middleware: Middleware) -> Callable:
    async def run(request: Request) -> None:
        set_phase(request, RequestPhase.MIDDLEWARE)
        await _call(middleware, request)

    run.__name__ = getattr(middleware, "__name__", "middleware")
    return run


def _handler_stage(handler: Handler) -> Callable:
    async def endpoint(request: Request) -> Response:
        set_phase(request, RequestPhase.HANDLING)
        result = await _call(handler, request)

        if isinstance(result, Response):
            response = result
        elif result is None:
            response = Response(status_code=204)
        else:
            response = JSONResponse(jsonable_encoder(result))

        set_phase(request, RequestPhase.RESPONDED)
        return response

    endpoint.__name__ = getattr(handler, "__name__", "endpoint")
    return endpoint


# =============================================================================
# Microservice
# =============================================================================

class Microservice:
    """
    Generic service core.

    Wires one Resource (schema, preloaders, routes) plus the built-in
    /version, /health, /schema and /error/{code} routes into a FastAPI app,
    with a single error translator for every failure.
    """

    def __init__(self, resource: Resource, settings: Settings | None = None):
        self.resource = resource
        self.settings = settings or get_settings()
        self.router = ResourceRouter()
        self._registered = False

    def register(self) -> ResourceRouter:
        """Collect preloaders, then routes. Runs once."""
        if not self._registered:
            builtin.setup_params(self.router)
            self.resource.setup_params(self.router)
            builtin.setup_routes(self.router)
            self.resource.setup_routes(self.router)
            self._registered = True
        return self.router

    def create_app(self) -> FastAPI:
        """Build the FastAPI application for this service."""
        settings = self.settings
        resource = self.resource

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            logger.info(
                f"Starting {settings.SERVICE_NAME} {settings.SERVICE_VERSION} "
                f"in {settings.ENVIRONMENT} mode"
            )
            await resource.startup()
            yield
            logger.info(f"Shutting down {settings.SERVICE_NAME}")
            await resource.shutdown()

        app = FastAPI(
            title=settings.SERVICE_NAME,
            version=settings.SERVICE_VERSION,
            debug=settings.DEBUG,
            lifespan=lifespan,
        )
        app.state.settings = settings
        app.state.resource = resource

        # Middleware
        app.middleware("http")(log_requests)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        # Exception handlers: every failure goes through the translator
        for exc_class in (HTTPError, StarletteHTTPException, RequestValidationError, Exception):
            app.add_exception_handler(exc_class, error_handler)

        # Routes
        for registration in self.register().routes:
            self._mount(app, registration)

        logger.debug(f"Mounted {len(self.router.routes)} routes for {resource.name}")
        return app

    @staticmethod
    def _mount(app: FastAPI, registration: RouteRegistration) -> None:
        stages = [Depends(_mark_matched)]
        stages += [Depends(_preload_stage(name, loader)) for name, loader in registration.params]
        stages += [Depends(_middleware_stage(mw)) for mw in registration.middleware]

        app.add_api_route(
            registration.path,
            _handler_stage(registration.handler),
            methods=[registration.method],
            dependencies=stages,
            name=registration.name,
        )
