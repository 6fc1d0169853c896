# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - slack_client.py: Async Slack incoming-webhook client
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.slack_client import SlackClient, SlackClientError

__all__ = [
    "SlackClient",
    "SlackClientError",
]
