# =============================================================================
# core/models/widget.py - Widget Schemas
# =============================================================================
# These models define the API contract for widget operations:
# - WidgetCreate: Input for POST /widget
# - WidgetUpdate: Partial input for PATCH /widget/{id} (merge semantics)
# - Widget: A stored widget, as returned to clients
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WidgetCreate(BaseModel):
    """
    Schema for creating a widget.

    Example:
        {
            "name": "sprocket",
            "color": "blue",
            "size": 3
        }
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Human-readable widget name"
    )

    color: str | None = Field(
        default=None,
        max_length=64,
        description="Optional color"
    )

    size: int | None = Field(
        default=None,
        ge=0,
        description="Optional size"
    )


class WidgetUpdate(BaseModel):
    """
    Schema for patching a widget.

    Only the fields present in the request are applied; everything else
    keeps its stored value.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=255)
    color: str | None = Field(default=None, max_length=64)
    size: int | None = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def name_not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("name cannot be null")
        return value

    def changes(self) -> dict:
        """Fields explicitly set by the client."""
        return self.model_dump(exclude_unset=True)


class Widget(WidgetCreate):
    """
    A stored widget.

    Example:
        {
            "id": "3f2b9c0e4d7a4c1e9b8a6f5d4c3b2a19",
            "name": "sprocket",
            "color": "blue",
            "size": 3,
            "created_at": "2024-01-15T10:30:00Z",
            "updated_at": "2024-01-15T10:30:00Z"
        }
    """

    # Unique identifier (uuid4 hex), assigned by the store
    id: str = Field(
        ...,
        description="Unique widget identifier"
    )

    created_at: datetime = Field(
        ...,
        description="Timestamp when the widget was created"
    )

    updated_at: datetime = Field(
        ...,
        description="Timestamp of the last save"
    )

    def merge(self, update: WidgetUpdate) -> "Widget":
        """Return a copy with the update's fields applied."""
        return self.model_copy(update=update.changes())
