# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - widget.py: Widget create/update schemas and the stored Widget
#
# These models define the "contract" between API and clients.
# =============================================================================

from .widget import Widget, WidgetCreate, WidgetUpdate

__all__ = [
    "Widget",
    "WidgetCreate",
    "WidgetUpdate",
]
