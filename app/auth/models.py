# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================

from pydantic import BaseModel, ConfigDict


class AppClient(BaseModel):
    """
    Client application identified by its app key.

    Attached to request.state.client by app_authc.
    """

    model_config = ConfigDict(frozen=True)

    name: str
