# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# Builds the widget service: a Microservice around the WidgetResource.
#
# Usage:
#   uvicorn app.main:app --reload
#   python -m app.main
# =============================================================================

import logging

import uvicorn
from fastapi import FastAPI

from app.config import Settings, settings as default_settings
from app.logging_config import setup_logging
from app.microservice import Microservice
from app.routers.widgets import WidgetResource
from core.services.widget_store import WidgetStore
from lib.slack_client import SlackClient

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    store: WidgetStore | None = None,
    messenger: SlackClient | None = None,
) -> FastAPI:
    """
    Create the widget service application.

    Collaborators default to an in-memory store and a Slack client built
    from settings; tests pass their own.
    """
    settings = settings or default_settings
    resource = WidgetResource(
        store=store,
        messenger=messenger if messenger is not None else SlackClient.from_settings(settings),
    )
    return Microservice(resource, settings).create_app()


setup_logging(default_settings.LOG_LEVEL, debug=default_settings.DEBUG)

app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=default_settings.API_HOST,
        port=default_settings.API_PORT,
        reload=default_settings.is_development,
    )
