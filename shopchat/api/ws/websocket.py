import json
import uuid
from functools import partial
from typing import Any, Callable

from starlette import status
from starlette.endpoints import WebSocketEndpoint
from starlette.websockets import WebSocket

from shopchat.constants import (
    WS_CLOSE_REASON_REGISTRATION_FAILED,
    WS_CLOSE_REASON_SUPERSEDED,
    WS_CLOSE_REASON_UNAUTHENTICATED,
    WS_POLICY_VIOLATION_CODE,
)
from shopchat.logging import clear_log_context, logger, set_log_context
from shopchat.managers.connection_registry import ConnectionRegistry
from shopchat.managers.websocket_connection_manager import ConnectionManager
from shopchat.schemas.message import EventModel
from shopchat.utils.device import classify_device
from shopchat.utils.metrics import ws_connections_active, ws_connections_total


class WebSocketHandle:
    """
    Termination capability handed to the connection registry.

    Exposes the connection id and a way to close the socket, nothing else.
    ``on_terminate`` runs before the socket is closed, so an evicted
    connection stops receiving broadcasts right away.
    """

    def __init__(
        self,
        websocket: WebSocket,
        connection_id: str,
        on_terminate: Callable[[], None] | None = None,
    ) -> None:
        self.id = connection_id
        self._websocket = websocket
        self._on_terminate = on_terminate

    async def terminate(self) -> None:
        if self._on_terminate is not None:
            self._on_terminate()
        await self._websocket.close(
            code=WS_POLICY_VIOLATION_CODE, reason=WS_CLOSE_REASON_SUPERSEDED
        )

    def __repr__(self) -> str:
        return f"WebSocketHandle(id={self.id!r})"


class RegistryWebSocketEndpoint(WebSocketEndpoint):  # type: ignore[misc]
    """
    WebSocket endpoint bound to the connection registry.

    Handles the connection lifecycle: rejects unauthenticated clients,
    registers authenticated ones under their device class, and rebroadcasts
    the roster of registered connections whenever it changes. Subclasses
    implement ``on_receive`` for inbound frames.

    The registry and the transport manager are read from the application
    state (``app.state.connection_registry`` and
    ``app.state.connection_manager``).
    """

    encoding = None  # Frames are decoded in decode() below

    async def dispatch(self) -> None:
        """
        Run the connection lifecycle.

        1. Calls on_connect (authentication and registration).
        2. Receives frames until the client disconnects, passing every
           decodable frame to on_receive.
        3. Always calls on_disconnect, even when a handler raised.
        """
        websocket = WebSocket(self.scope, receive=self.receive, send=self.send)
        await self.on_connect(websocket)

        close_code = status.WS_1000_NORMAL_CLOSURE

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.receive":
                    data = await self.decode(websocket, message)
                    if data is not None:
                        await self.on_receive(websocket, data)
                elif message["type"] == "websocket.disconnect":
                    close_code = int(
                        message.get("code") or status.WS_1000_NORMAL_CLOSURE
                    )
                    break
        except Exception as exc:
            close_code = status.WS_1011_INTERNAL_ERROR
            raise exc
        finally:
            await self.on_disconnect(websocket, close_code)

    async def decode(
        self, websocket: WebSocket, message: dict[str, Any]
    ) -> dict[str, Any] | None:
        """
        Decode a JSON frame.

        Text and binary frames are both accepted. Frames that are not a JSON
        object are answered with an ``exception`` event and dropped.

        Returns:
            The decoded object, or None when the frame was rejected.
        """
        raw = message.get("text")
        if raw is None:
            raw = (message.get("bytes") or b"").decode("utf-8", "replace")

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as ex:
            logger.debug(f"Received malformed frame: {ex}")
            await self.send_event(
                websocket, EventModel.exception("Malformed JSON frame")
            )
            return None

        if not isinstance(data, dict):
            await self.send_event(
                websocket, EventModel.exception("Frame must be a JSON object")
            )
            return None

        return data

    @property
    def registry(self) -> ConnectionRegistry:
        return self.scope["app"].state.connection_registry

    @property
    def connections(self) -> ConnectionManager:
        return self.scope["app"].state.connection_manager

    async def on_connect(self, websocket: WebSocket) -> None:
        """
        Authenticate and register a new connection.

        Connection is closed without any broadcast if:
        - No verified credential was presented
        - The claimed user does not resolve to an active user
        - Registration failed unexpectedly

        Otherwise the connection is added to the broadcast set and the new
        roster is broadcast to every connection.
        """
        await super().on_connect(websocket)

        self.connection_id = str(uuid.uuid4())
        self.registered = False
        set_log_context(connection_id=self.connection_id)

        user = self.scope.get("user")
        if user is None or not user.is_authenticated:
            logger.debug(
                "Client is not logged in, websocket connection will be closed!"
            )
            ws_connections_total.labels(status="rejected_auth").inc()
            await self.close(websocket, WS_CLOSE_REASON_UNAUTHENTICATED)
            return

        self.user = user
        device_class = classify_device(websocket.headers.get("user-agent"))
        set_log_context(user_id=user.id, device_class=device_class.value)

        handle = WebSocketHandle(
            websocket,
            self.connection_id,
            on_terminate=partial(self.connections.disconnect, self.connection_id),
        )
        try:
            result = await self.registry.register(handle, user.id, device_class)
        except Exception as ex:
            logger.error(f"Unexpected error registering connection: {ex}")
            ws_connections_total.labels(status="error").inc()
            await self.close(websocket, WS_CLOSE_REASON_REGISTRATION_FAILED)
            return

        if not result.ok:
            ws_connections_total.labels(status="rejected_registration").inc()
            await self.close(websocket, WS_CLOSE_REASON_REGISTRATION_FAILED)
            return

        self.registered = True
        self.connections.connect(self.connection_id, websocket)
        ws_connections_total.labels(status="accepted").inc()
        ws_connections_active.inc()
        logger.debug(
            f"Client connected to websocket from {device_class} "
            f"(connection_id: {self.connection_id})"
        )

        await self.broadcast_roster()

    async def on_disconnect(self, websocket: WebSocket, close_code: int) -> None:
        """
        Forget the connection and broadcast the updated roster.

        Removal is idempotent, so connections that were evicted or never
        registered are handled the same way.
        """
        await super().on_disconnect(websocket, close_code)

        self.registry.remove(self.connection_id)
        self.connections.disconnect(self.connection_id)
        if self.registered:
            ws_connections_active.dec()

        logger.debug(
            f"Connection {self.connection_id} disconnected with code {close_code}"
        )

        await self.broadcast_roster()
        clear_log_context()

    async def broadcast_roster(self) -> None:
        await self.connections.broadcast(
            EventModel.clients_updated(self.registry.list_connection_ids())
        )

    async def send_event(self, websocket: WebSocket, event: EventModel) -> None:
        await websocket.send_json(event.model_dump(mode="json"))

    async def close(self, websocket: WebSocket, reason: str) -> None:
        """Close the socket with a policy-violation code."""
        try:
            await websocket.close(code=WS_POLICY_VIOLATION_CODE, reason=reason)
        except RuntimeError as ex:
            # Socket already closed by the client
            logger.debug(f"Close skipped for {self.connection_id}: {ex}")
