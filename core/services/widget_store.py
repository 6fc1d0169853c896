# =============================================================================
# core/services/widget_store.py - Widget Storage
# =============================================================================
# The storage collaborator behind the widget resource. Every operation is a
# coroutine that either returns its result or raises; a missing widget is
# always a NotFoundError.
#
# InMemoryWidgetStore copies widgets on the way in and out, so a caller that
# mutates a widget without saving it never changes what is stored.
# =============================================================================

import inspect
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable
from uuid import uuid4

from app.exceptions import NotFoundError
from core.models.widget import Widget, WidgetCreate

logger = logging.getLogger(__name__)


class WidgetStore(ABC):
    """Interface of a widget storage backend."""

    @abstractmethod
    async def create(self, payload: WidgetCreate) -> Widget:
        """Store a new widget and return it with its id and timestamps."""

    @abstractmethod
    async def get(self, widget_id: str) -> Widget:
        """Return the widget with this id or raise NotFoundError."""

    @abstractmethod
    async def scan(self, visit: Callable[[Widget], Any]) -> None:
        """Call ``visit(widget)`` for every stored widget."""

    @abstractmethod
    async def save(self, widget: Widget) -> Widget:
        """Persist changes to an existing widget and return the saved copy."""

    @abstractmethod
    async def delete(self, widget_id: str) -> None:
        """Remove the widget with this id or raise NotFoundError."""


class InMemoryWidgetStore(WidgetStore):
    """Widget store backed by a dict. Used by default and in tests."""

    def __init__(self):
        self._widgets: dict[str, Widget] = {}

    def __len__(self) -> int:
        return len(self._widgets)

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    async def create(self, payload: WidgetCreate) -> Widget:
        now = self._now()
        widget = Widget(
            id=uuid4().hex,
            created_at=now,
            updated_at=now,
            **payload.model_dump(),
        )
        self._widgets[widget.id] = widget.model_copy()
        logger.info(f"Created widget: {widget.id}")
        return widget

    async def get(self, widget_id: str) -> Widget:
        widget = self._widgets.get(widget_id)
        if widget is None:
            raise NotFoundError(f"No widget with id {widget_id}")
        return widget.model_copy()

    async def scan(self, visit: Callable[[Widget], Any]) -> None:
        # snapshot so visitors may create or delete while scanning
        for widget in list(self._widgets.values()):
            result = visit(widget.model_copy())
            if inspect.isawaitable(result):
                await result

    async def save(self, widget: Widget) -> Widget:
        if widget.id not in self._widgets:
            raise NotFoundError(f"No widget with id {widget.id}")
        saved = widget.model_copy(update={"updated_at": self._now()})
        self._widgets[saved.id] = saved
        logger.info(f"Saved widget: {saved.id}")
        return saved.model_copy()

    async def delete(self, widget_id: str) -> None:
        if self._widgets.pop(widget_id, None) is None:
            raise NotFoundError(f"No widget with id {widget_id}")
        logger.info(f"Deleted widget: {widget_id}")
