# =============================================================================
# app/routers/widgets.py - Widget Resource
# =============================================================================
# CRUD routes for widgets plus POST /message. All routes require an app key.
#
#   POST   /widget        create
#   GET    /widget        list all
#   GET    /widget/{id}   read (preloaded)
#   PUT    /widget/{id}   placeholder, does nothing
#   PATCH  /widget/{id}   merge fields and save
#   DELETE /widget/{id}   delete
#   POST   /message       send a Slack message
# =============================================================================

import logging
from typing import Any, Awaitable

from fastapi import Request
from pydantic import BaseModel, Field

from app.auth import app_authc
from app.dependencies import parse_body
from app.exceptions import HTTPError, MessagingError, StorageError
from app.resource import Resource
from core.models.widget import Widget, WidgetCreate, WidgetUpdate
from core.services.widget_store import InMemoryWidgetStore, WidgetStore
from lib.slack_client import SlackClient, SlackClientError

logger = logging.getLogger(__name__)


# =============================================================================
# Request Models
# =============================================================================

class MessageRequest(BaseModel):
    """Body of POST /message."""
    type: str = Field(
        default="info",
        min_length=1,
        max_length=32,
        examples=["info", "warning", "error"],
        description="Message type; selects the icon"
    )
    message: str = Field(
        ...,
        min_length=1,
        description="Text to send"
    )


# =============================================================================
# Resource
# =============================================================================

class WidgetResource(Resource):
    """The widget resource: storage-backed CRUD and Slack messages."""

    name = "widget"

    def __init__(self, store: WidgetStore | None = None, messenger: SlackClient | None = None):
        self.store = store if store is not None else InMemoryWidgetStore()
        self.messenger = messenger if messenger is not None else SlackClient()

    def get_schema(self) -> dict[str, dict[str, Any]]:
        return {"widget": Widget.model_json_schema()}

    def setup_params(self, router) -> None:
        router.param("id", self.load_widget)

    def setup_routes(self, router) -> None:
        router.post("/widget", app_authc, self.create_widget)
        router.get("/widget", app_authc, self.list_widgets)
        router.get("/widget/{id}", app_authc, self.read_widget)
        router.put("/widget/{id}", app_authc, self.replace_widget)
        router.patch("/widget/{id}", app_authc, self.update_widget)
        router.delete("/widget/{id}", app_authc, self.delete_widget)
        router.post("/message", app_authc, self.send_message)

    async def shutdown(self) -> None:
        await self.messenger.aclose()

    async def _storage(self, operation: str, pending: Awaitable) -> Any:
        # Domain errors pass through; backend failures become StorageError
        try:
            return await pending
        except HTTPError:
            raise
        except Exception as e:
            raise StorageError(f"Widget {operation} failed") from e

    # -------------------------------------------------------------------------
    # Preloaders
    # -------------------------------------------------------------------------

    async def load_widget(self, request: Request, widget_id: str) -> None:
        """Resolve {id} to request.state.widget."""
        request.state.widget = await self._storage("get", self.store.get(widget_id))

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    async def create_widget(self, request: Request) -> Widget:
        payload = await parse_body(request, WidgetCreate)
        return await self._storage("create", self.store.create(payload))

    async def list_widgets(self, request: Request) -> list[Widget]:
        widgets: list[Widget] = []
        await self._storage("scan", self.store.scan(widgets.append))
        return widgets

    async def read_widget(self, request: Request) -> Widget:
        return request.state.widget

    async def replace_widget(self, request: Request) -> None:
        """Deliberately a no-op; answers 204."""

    async def update_widget(self, request: Request) -> Widget:
        update = await parse_body(request, WidgetUpdate)
        merged = request.state.widget.merge(update)
        saved = await self._storage("save", self.store.save(merged))
        request.state.widget = saved
        return saved

    async def delete_widget(self, request: Request) -> dict:
        widget = request.state.widget
        await self._storage("delete", self.store.delete(widget.id))
        return {"status": "OK"}

    async def send_message(self, request: Request) -> dict:
        body = await parse_body(request, MessageRequest)
        try:
            await self.messenger.send(body.type, body.message)
        except SlackClientError as e:
            raise MessagingError(e.message) from e
        return {"type": body.type, "message": body.message, "status": "OK"}
