from typing import Any

from fastapi import APIRouter
from pydantic import ValidationError

from shopchat.api.ws.websocket import RegistryWebSocketEndpoint
from shopchat.constants import WS_CLOSE_REASON_UNREGISTERED, WsEvent
from shopchat.exceptions import ConnectionNotFoundError
from shopchat.logging import logger
from shopchat.schemas.message import EventModel, InboundEventModel, WsMessage
from shopchat.utils.metrics import (
    ws_messages_received_total,
    ws_messages_rejected_total,
)

router = APIRouter()


class MessagesGateway(RegistryWebSocketEndpoint):
    """
    Presence and chat channel for shop users.

    Every chat message is relayed to all connections, the sender included,
    tagged with the sender's display name.
    """

    async def on_receive(self, websocket, data: dict[str, Any]) -> None:
        """
        Handle an inbound frame.

        Frames failing validation are answered with an ``exception`` event
        and never reach the registry. A chat message from a connection that
        is not registered closes that connection.

        Args:
            websocket: The sender's WebSocket.
            data: The decoded frame.
        """
        ws_messages_received_total.inc()

        try:
            frame = InboundEventModel.model_validate(data)
        except ValidationError as ex:
            await self.reject(websocket, "Invalid frame", ex)
            return

        if frame.event != WsEvent.MESSAGE_FROM_CLIENT:
            logger.debug(f"Ignoring unknown event {frame.event!r}")
            return

        try:
            payload = WsMessage.model_validate(frame.data)
        except ValidationError as ex:
            await self.reject(websocket, "Invalid message", ex)
            return

        try:
            full_name = self.registry.lookup_display_name(self.connection_id)
        except ConnectionNotFoundError as ex:
            logger.warning(f"Message from unregistered connection: {ex}")
            await self.close(websocket, WS_CLOSE_REASON_UNREGISTERED)
            return

        await self.connections.broadcast(
            EventModel.message_from_server(full_name, payload.message)
        )

    async def reject(
        self, websocket, msg: str, error: ValidationError
    ) -> None:
        logger.debug(f"Rejected frame from {self.connection_id}: {error}")
        ws_messages_rejected_total.inc()
        await self.send_event(
            websocket,
            EventModel.exception(
                msg, errors=error.errors(include_url=False, include_context=False)
            ),
        )


router.add_websocket_route("/ws/messages", MessagesGateway, name="messages")
