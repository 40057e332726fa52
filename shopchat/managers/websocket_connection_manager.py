import asyncio

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect

from shopchat.logging import logger
from shopchat.schemas.message import EventModel
from shopchat.utils.metrics import ws_broadcasts_total


class ConnectionManager:
    """
    Manager for open WebSocket transports.

    Tracks the sockets of registered connections by connection id and fans
    broadcasts out to all of them.
    """

    def __init__(self) -> None:
        self.connections: dict[str, WebSocket] = {}

    def __len__(self) -> int:
        return len(self.connections)

    def connect(self, connection_id: str, websocket: WebSocket) -> None:
        """
        Adds a WebSocket connection under its connection id.

        Args:
            connection_id: Unique identifier for this connection.
            websocket: The WebSocket connection to be added.
        """
        self.connections[connection_id] = websocket
        logger.debug(
            f"websocket object ({id(websocket)}) added to active connections "
            f"with key {connection_id}"
        )

    def disconnect(self, connection_id: str) -> None:
        """
        Removes a WebSocket connection by connection id.

        Args:
            connection_id: The connection to remove.
        """
        if connection_id not in self.connections:
            return

        websocket = self.connections.pop(connection_id)
        logger.debug(
            f"websocket object ({id(websocket)}) removed from active connections "
            f"for key {connection_id}"
        )

    async def broadcast(self, message: EventModel) -> None:
        """
        Broadcasts message to all open connections concurrently.

        Connections that fail to receive the message are dropped.

        Args:
            message: The event to send to every connection.
        """
        if not self.connections:
            return

        payload = message.model_dump(mode="json")

        # Snapshot: failed sends mutate the dict
        connections_snapshot = list(self.connections.items())

        async def safe_send(connection_id: str, connection: WebSocket) -> None:
            try:
                await connection.send_json(payload)
            except (WebSocketDisconnect, ConnectionError, RuntimeError) as e:
                # RuntimeError: WebSocket already closed
                logger.warning(
                    f"Failed to send to connection {id(connection)} "
                    f"(key: {connection_id}): {e}"
                )
                self.disconnect(connection_id)
            except Exception as e:
                logger.warning(
                    f"Unexpected error sending to connection {id(connection)} "
                    f"(key: {connection_id}): {e}"
                )
                self.disconnect(connection_id)

        await asyncio.gather(
            *[safe_send(key, conn) for key, conn in connections_snapshot],
            return_exceptions=True,
        )
        ws_broadcasts_total.labels(event=message.event.value).inc()
