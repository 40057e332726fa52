from pydantic import BaseModel, ConfigDict


class Identity(BaseModel):
    """
    An active user as seen by the connection registry.

    Attributes:
        id: Stable user identifier.
        display_name: Human-readable name shown next to chat messages.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
