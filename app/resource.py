# =============================================================================
# app/resource.py - Resource Contract
# =============================================================================
# A Resource is what a concrete service plugs into the Microservice: its
# schema, its path-parameter preloaders and its routes. The Microservice
# never knows anything resource-specific beyond this interface.
#
# Usage:
#   class GadgetResource(Resource):
#       name = "gadget"
#
#       def get_schema(self):
#           return {"gadget": Gadget.model_json_schema()}
#
#       def setup_params(self, router):
#           router.param("id", self.load_gadget)
#
#       def setup_routes(self, router):
#           router.get("/gadget/{id}", app_authc, self.read_gadget)
# =============================================================================

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.microservice import ResourceRouter


class Resource(ABC):
    """
    Interface every concrete resource implements.

    Preloaders are called as ``loader(request, value)`` and handlers as
    ``handler(request)``; either may be a plain function or a coroutine.
    Both abort the request by raising an HTTPError.
    """

    name: str = "resource"

    @abstractmethod
    def get_schema(self) -> dict[str, dict[str, Any]]:
        """Map of resource name -> schema definition. No side effects."""

    def setup_params(self, router: ResourceRouter) -> None:
        """Register path-parameter preloaders. Called before setup_routes()."""

    @abstractmethod
    def setup_routes(self, router: ResourceRouter) -> None:
        """Register the resource's routes."""

    async def startup(self) -> None:
        """Called once when the application starts."""

    async def shutdown(self) -> None:
        """Called once when the application stops."""
