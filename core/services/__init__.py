# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .widget_store import InMemoryWidgetStore, WidgetStore

__all__ = [
    "WidgetStore",
    "InMemoryWidgetStore",
]
