# =============================================================================
# lib/slack_client.py - Slack Webhook Client
# =============================================================================
# Posts short notifications to a Slack incoming webhook. Used by
# POST /message.
#
# Usage:
#   from lib.slack_client import SlackClient
#   slack = SlackClient.from_settings(settings)
#   await slack.send("info", "Deployed 0.1.0")
#
# When no webhook is configured send() returns False and makes no request.
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

# Emoji shown next to the message, by message type
ICONS = {
    "error": ":rotating_light:",
    "warning": ":warning:",
    "info": ":information_source:",
    "success": ":white_check_mark:",
}
DEFAULT_ICON = ":speech_balloon:"


class SlackClientError(Exception):
    """Error delivering a message to Slack."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code:
            return f"[{self.status_code}] {self.message}"
        return self.message


class SlackClient:
    """
    Async wrapper around a Slack incoming webhook.

    The underlying httpx.AsyncClient is created on first use and must be
    released with aclose() on shutdown.
    """

    def __init__(
        self,
        hook: str | None = None,
        channel: str | None = None,
        username: str = "widget",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.hook = hook
        self.channel = channel
        self.username = username
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings, transport: httpx.AsyncBaseTransport | None = None) -> SlackClient:
        return cls(
            hook=settings.SLACK_HOOK,
            channel=settings.SLACK_CHANNEL,
            username=settings.SLACK_USERNAME or settings.SERVICE_NAME,
            timeout=settings.SLACK_TIMEOUT,
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self.hook)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    def build_payload(self, type: str, message: str) -> dict[str, Any]:
        """Webhook payload for a message of the given type."""
        payload: dict[str, Any] = {
            "text": message,
            "username": self.username,
            "icon_emoji": ICONS.get(type, DEFAULT_ICON),
        }
        if self.channel:
            payload["channel"] = self.channel
        return payload

    async def send(self, type: str, message: str) -> bool:
        """
        Send a message.

        Returns:
            True if the message was posted, False if no webhook is configured

        Raises:
            SlackClientError: If the request fails or Slack rejects it
        """
        if not self.configured:
            logger.debug(f"No Slack hook configured; dropping {type} message")
            return False

        try:
            response = await self._get_client().post(self.hook, json=self.build_payload(type, message))
        except httpx.HTTPError as e:
            logger.warning(f"Slack request failed: {e}")
            raise SlackClientError(f"Could not reach Slack: {e}") from e

        if response.is_error:
            logger.warning(f"Slack rejected message: {response.status_code} {response.text}")
            raise SlackClientError(
                f"Slack rejected message: {response.text or response.reason_phrase}",
                status_code=response.status_code,
            )

        logger.info(f"Sent {type} message to Slack")
        return True

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
