"""
Tests for WebSocket connection manager.

This module tests the ConnectionManager functionality including
connection tracking and broadcasting.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import WebSocket

from shopchat.managers.websocket_connection_manager import ConnectionManager
from shopchat.schemas.message import EventModel


def make_ws(send_side_effect=None):
    ws = MagicMock(spec=WebSocket)
    ws.send_json = AsyncMock(side_effect=send_side_effect)
    return ws


class TestConnectionManager:
    """Tests for ConnectionManager class."""

    def test_init(self):
        """Test ConnectionManager initialization."""
        manager = ConnectionManager()
        assert manager.connections == {}
        assert len(manager) == 0

    def test_connect_multiple(self):
        """Test adding multiple WebSocket connections."""
        manager = ConnectionManager()
        sockets = {f"c{i}": make_ws() for i in range(3)}

        for key, ws in sockets.items():
            manager.connect(key, ws)

        assert manager.connections == sockets

    def test_disconnect(self):
        """Test removing WebSocket connection."""
        manager = ConnectionManager()
        manager.connect("c1", make_ws())

        manager.disconnect("c1")

        assert manager.connections == {}

    def test_disconnect_nonexistent(self):
        """Test disconnecting non-existent key (should do nothing)."""
        manager = ConnectionManager()
        ws = make_ws()
        manager.connect("c1", ws)

        manager.disconnect("c2")

        assert manager.connections == {"c1": ws}

    @pytest.mark.asyncio
    async def test_broadcast_no_connections(self):
        """Test broadcast when no active connections (should return early)."""
        manager = ConnectionManager()

        await manager.broadcast(EventModel.clients_updated([]))

    @pytest.mark.asyncio
    async def test_broadcast_multiple_connections(self):
        """Test every connection receives the serialized event."""
        manager = ConnectionManager()
        sockets = [make_ws() for _ in range(3)]
        for i, ws in enumerate(sockets):
            manager.connect(f"c{i}", ws)

        await manager.broadcast(EventModel.message_from_server("john", "hi"))

        for ws in sockets:
            ws.send_json.assert_awaited_once_with(
                {
                    "event": "message-from-server",
                    "data": {"fullName": "john", "message": "hi"},
                }
            )

    @pytest.mark.asyncio
    async def test_broadcast_handles_send_error(self):
        """Test broadcast drops connections that fail and reaches the rest."""
        manager = ConnectionManager()
        closed = make_ws(RuntimeError("Cannot call send once closed"))
        broken = make_ws(Exception("Connection closed"))
        healthy = make_ws()

        manager.connect("closed", closed)
        manager.connect("broken", broken)
        manager.connect("healthy", healthy)

        await manager.broadcast(EventModel.clients_updated(["healthy"]))

        assert list(manager.connections) == ["healthy"]
        healthy.send_json.assert_awaited_once_with(
            {"event": "clients-updated", "data": ["healthy"]}
        )
