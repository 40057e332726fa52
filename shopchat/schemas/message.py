from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Annotated

from shopchat.constants import WsEvent


class EventModel(BaseModel):
    """
    Outbound WebSocket frame.

    Attributes:
        event: Event name.
        data: Event payload.
    """

    event: WsEvent = Field(frozen=True)
    data: Any = None

    @classmethod
    def clients_updated(cls, connection_ids: list[str]) -> "EventModel":
        return cls(event=WsEvent.CLIENTS_UPDATED, data=connection_ids)

    @classmethod
    def message_from_server(
        cls, full_name: str, message: str
    ) -> "EventModel":
        payload = ChatBroadcast(full_name=full_name, message=message)
        return cls(
            event=WsEvent.MESSAGE_FROM_SERVER,
            data=payload.model_dump(by_alias=True),
        )

    @classmethod
    def exception(cls, msg: str, errors: Any = None) -> "EventModel":
        data: dict[str, Any] = {"status": "error", "message": msg}
        if errors:
            data["errors"] = errors
        return cls(event=WsEvent.EXCEPTION, data=data)


class InboundEventModel(BaseModel):
    """
    Inbound WebSocket frame.

    Attributes:
        event: Event name chosen by the client.
        data: Event payload, validated per event.
    """

    event: str
    data: dict[str, Any] = {}


class WsMessage(BaseModel):
    """Payload of a ``message-form-client`` event."""

    message: Annotated[str, Field(min_length=1)]


class ChatBroadcast(BaseModel):
    """Payload of a ``message-from-server`` event."""

    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(alias="fullName")
    message: str
