# =============================================================================
# tests/test_microservice.py - Dispatcher Tests
# =============================================================================
# Tests for the Microservice/ResourceRouter contract using a small fake
# resource that records every stage it runs:
# - registration order and preloader binding
# - chain order (preload -> middleware -> handler)
# - short-circuit on the first error
# - built-in routes and error translation
# =============================================================================

import logging

import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from app.auth import app_authc
from app.context import RequestPhase
from app.exceptions import InvalidPayloadError, NotFoundError
from app.microservice import Microservice, ResourceRouter
from app.resource import Resource


# =============================================================================
# Fake Resource
# =============================================================================

class RecordingResource(Resource):
    """Resource whose preloaders, middleware and handlers append to self.calls."""

    name = "thing"

    def __init__(self):
        self.calls: list[str] = []
        self.started = False
        self.stopped = False

    def get_schema(self):
        return {"thing": {"type": "object"}}

    def setup_params(self, router):
        router.param("a", self.load_a)
        router.param("b", self.load_b)

    def setup_routes(self, router):
        router.get("/thing/{a}", self.gate, self.read)
        router.get("/pair/{a}/{b}", self.gate, self.read_pair)
        router.get("/guarded/{a}", app_authc, self.read)
        router.get("/checked/{a}", self.reject, self.read)
        router.get("/empty", self.nothing)
        router.get("/sync", self.sync_handler)
        router.get("/boom", self.explode)
        router.get("/phase", self.report_phase)

    async def startup(self):
        self.started = True

    async def shutdown(self):
        self.stopped = True

    async def load_a(self, request: Request, value: str):
        self.calls.append(f"preload:a={value}")
        if value == "missing":
            raise NotFoundError(f"No thing {value}")
        request.state.a = value

    def load_b(self, request: Request, value: str):
        self.calls.append(f"preload:b={value}")
        if value == "missing":
            raise NotFoundError(f"No thing {value}")
        request.state.b = value

    async def gate(self, request: Request):
        self.calls.append("gate")

    async def reject(self, request: Request):
        self.calls.append("reject")
        raise InvalidPayloadError("rejected by middleware")

    async def read(self, request: Request):
        self.calls.append("handler")
        return {"a": request.state.a}

    async def read_pair(self, request: Request):
        self.calls.append("handler")
        return {"a": request.state.a, "b": request.state.b}

    async def nothing(self, request: Request):
        return None

    def sync_handler(self, request: Request):
        return {"sync": True}

    async def explode(self, request: Request):
        raise RuntimeError("secret internals")

    async def report_phase(self, request: Request):
        return {"phase": request.state.phase.value}


@pytest.fixture
def resource():
    return RecordingResource()


@pytest.fixture
def service(resource, settings):
    return Microservice(resource, settings)


@pytest.fixture
def thing_client(service):
    with TestClient(service.create_app()) as test_client:
        yield test_client


# =============================================================================
# ResourceRouter Tests
# =============================================================================

class TestResourceRouter:
    """Tests for route and preloader registration."""

    def test_route_binds_params_in_path_order(self):
        """Preloaders follow the order of the path segments."""
        router = ResourceRouter()
        router.param("b", lambda request, value: None)
        router.param("a", lambda request, value: None)

        registration = router.get("/x/{a}/y/{b}", lambda request: None)

        assert [name for name, _ in registration.params] == ["a", "b"]

    def test_param_registered_after_route_is_not_bound(self):
        """Routes only see preloaders registered before them."""
        router = ResourceRouter()
        registration = router.get("/x/{id}", lambda request: None)
        router.param("id", lambda request, value: None)

        assert registration.params == ()

    def test_unregistered_params_pass_through(self):
        """Path parameters without a preloader are not bound."""
        router = ResourceRouter()
        router.param("id", lambda request, value: None)

        registration = router.get("/x/{id}/{other:path}", lambda request: None)

        assert [name for name, _ in registration.params] == ["id"]

    def test_chain_splits_middleware_and_handler(self):
        """The last callable is the handler, the rest is middleware."""
        router = ResourceRouter()

        def first(request): ...
        def second(request): ...
        def handler(request): ...

        registration = router.post("/x", first, second, handler)

        assert registration.method == "POST"
        assert registration.middleware == (first, second)
        assert registration.handler is handler
        assert registration.name == "handler"

    def test_route_without_handler_rejected(self):
        with pytest.raises(ValueError):
            ResourceRouter().get("/x")

    def test_unsupported_method_rejected(self):
        with pytest.raises(ValueError):
            ResourceRouter().route("TRACE", "/x", lambda request: None)

    def test_non_callable_preloader_rejected(self):
        with pytest.raises(TypeError):
            ResourceRouter().param("id", "not callable")

    def test_registrations_are_immutable(self):
        registration = ResourceRouter().get("/x", lambda request: None)

        with pytest.raises(Exception):
            registration.path = "/y"


# =============================================================================
# Dispatch Tests
# =============================================================================

class TestDispatch:
    """Tests for the per-request chain."""

    def test_register_runs_params_before_routes(self, service, resource):
        """Resource preloaders are bound to resource routes."""
        router = service.register()

        thing = next(r for r in router.routes if r.path == "/thing/{a}")
        assert [name for name, _ in thing.params] == ["a"]

    def test_register_is_idempotent(self, service):
        first = len(service.register().routes)
        second = len(service.register().routes)

        assert first == second

    def test_chain_order(self, thing_client, resource):
        """Preloader, then middleware, then handler."""
        response = thing_client.get("/thing/42")

        assert response.status_code == 200
        assert response.json() == {"a": "42"}
        assert resource.calls == ["preload:a=42", "gate", "handler"]

    def test_multiple_preloaders_in_declaration_order(self, thing_client, resource):
        response = thing_client.get("/pair/1/2")

        assert response.status_code == 200
        assert response.json() == {"a": "1", "b": "2"}
        assert resource.calls == ["preload:a=1", "preload:b=2", "gate", "handler"]

    def test_first_preloader_failure_short_circuits(self, thing_client, resource):
        """A failed preloader stops later preloaders, middleware and handler."""
        response = thing_client.get("/pair/missing/2")

        assert response.status_code == 404
        assert response.json()["message"] == "No thing missing"
        assert resource.calls == ["preload:a=missing"]

    def test_second_preloader_failure_short_circuits(self, thing_client, resource):
        response = thing_client.get("/pair/1/missing")

        assert response.status_code == 404
        assert resource.calls == ["preload:a=1", "preload:b=missing"]

    def test_auth_failure_skips_handler(self, thing_client, resource):
        """Unauthenticated requests never reach the handler."""
        response = thing_client.get("/guarded/42")

        assert response.status_code == 401
        assert resource.calls == ["preload:a=42"]

    def test_none_result_is_no_content(self, thing_client):
        response = thing_client.get("/empty")

        assert response.status_code == 204
        assert response.content == b""

    def test_sync_handler(self, thing_client):
        response = thing_client.get("/sync")

        assert response.json() == {"sync": True}

    def test_handler_runs_in_handling_phase(self, thing_client):
        response = thing_client.get("/phase")

        assert response.json() == {"phase": RequestPhase.HANDLING.value}

    def test_error_logged_with_phase(self, thing_client, caplog):
        caplog.set_level(logging.INFO, logger="app.exceptions")

        thing_client.get("/thing/missing")

        assert any("during preloading" in record.getMessage() for record in caplog.records)

    def test_auth_failure_logged_as_authenticating(self, thing_client, caplog):
        caplog.set_level(logging.INFO, logger="app.exceptions")

        thing_client.get("/guarded/42")

        messages = [r.getMessage() for r in caplog.records if r.name == "app.exceptions"]
        assert any("401 UNAUTHORIZED during authenticating" in m for m in messages)

    def test_other_middleware_failure_logged_as_middleware(self, thing_client, resource, caplog):
        """Only the auth gate is reported as authenticating."""
        caplog.set_level(logging.INFO, logger="app.exceptions")

        response = thing_client.get("/checked/42")

        assert response.status_code == 400
        assert resource.calls == ["preload:a=42", "reject"]
        messages = [r.getMessage() for r in caplog.records if r.name == "app.exceptions"]
        assert any("during middleware" in m for m in messages)
        assert not any("during authenticating" in m for m in messages)

    def test_unexpected_exception_is_500(self, service):
        """Unknown errors map to 500 without leaking their message."""
        with TestClient(service.create_app(), raise_server_exceptions=False) as test_client:
            response = test_client.get("/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["status"] == "error"
        assert body["message"] == "Internal Server Error"
        assert "secret" not in response.text

    def test_unexpected_exception_keeps_request_id_and_cors(self, thing_client):
        """The 500 for an unknown error carries the same headers as other errors."""
        response = thing_client.get(
            "/boom",
            headers={"X-Request-Id": "req-boom", "Origin": "http://example.test"},
        )

        assert response.status_code == 500
        assert response.json()["message"] == "Internal Server Error"
        assert response.headers["X-Request-Id"] == "req-boom"
        assert "access-control-allow-origin" in response.headers

    def test_unexpected_exception_logged_with_phase(self, thing_client, caplog):
        caplog.set_level(logging.INFO, logger="app.exceptions")

        thing_client.get("/boom")

        errors = [r for r in caplog.records if r.name == "app.exceptions" and r.levelname == "ERROR"]
        assert len(errors) == 1
        assert "during handling" in errors[0].getMessage()

    def test_unknown_route_is_translated(self, thing_client):
        response = thing_client.get("/no/such/route")

        assert response.status_code == 404
        assert response.json()["status"] == "error"

    def test_wrong_method_is_translated(self, thing_client):
        response = thing_client.delete("/sync")

        assert response.status_code == 405
        assert response.json()["status"] == "error"

    def test_lifespan_hooks(self, service, resource):
        with TestClient(service.create_app()):
            assert resource.started

        assert resource.stopped

    def test_request_id_echoed(self, thing_client):
        response = thing_client.get("/sync", headers={"X-Request-Id": "req-123"})

        assert response.headers["X-Request-Id"] == "req-123"

    def test_request_id_generated(self, thing_client):
        response = thing_client.get("/sync")

        assert response.headers["X-Request-Id"]


# =============================================================================
# Built-in Route Tests
# =============================================================================

class TestBuiltinRoutes:
    """Tests for routes every Microservice provides."""

    def test_version(self, thing_client):
        response = thing_client.get("/version")

        assert response.status_code == 200
        assert response.json() == {"name": "widget", "version": "0.1.0"}

    def test_health(self, thing_client):
        response = thing_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "OK"}

    def test_schema(self, thing_client):
        response = thing_client.get("/schema")

        assert response.json() == {"thing": {"type": "object"}}

    def test_health_not_logged(self, thing_client, caplog):
        caplog.set_level(logging.INFO, logger="app.http")

        thing_client.get("/health")
        thing_client.get("/version")

        logged = [r.getMessage() for r in caplog.records if r.name == "app.http"]
        assert any("/version" in message for message in logged)
        assert not any("/health" in message for message in logged)

    def test_error_route(self, thing_client, auth_headers):
        response = thing_client.get("/error/404?message=boom", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"status": "error", "message": "boom", "code": "SYNTHETIC_ERROR"}

    def test_error_route_default_message(self, thing_client, auth_headers):
        response = thing_client.get("/error/418", headers=auth_headers)

        assert response.status_code == 418
        assert response.json()["message"] == "Error"

    @pytest.mark.parametrize("code", ["abc", "200", "999"])
    def test_error_route_invalid_code(self, thing_client, auth_headers, code):
        response = thing_client.get(f"/error/{code}", headers=auth_headers)

        assert response.status_code == 500

    def test_error_route_requires_auth(self, thing_client):
        response = thing_client.get("/error/404?message=boom")

        assert response.status_code == 401
