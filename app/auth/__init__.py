# =============================================================================
# app/auth/__init__.py - Authentication Gate
# =============================================================================
# Per-route middleware for app-key authentication, plus the dont_log marker.
#
# Usage:
#   from app.auth import app_authc, dont_log
#
#   def setup_routes(self, router):
#       router.get("/gadget", app_authc, self.list_gadgets)
#       router.get("/ping", dont_log, self.ping)
# =============================================================================

from app.auth.dependencies import app_authc, dont_log
from app.auth.models import AppClient

__all__ = [
    "app_authc",
    "dont_log",
    "AppClient",
]
