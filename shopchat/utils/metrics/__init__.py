"""
Prometheus metrics definitions and utilities.

All metrics are re-exported here so callers can import them directly:

    from shopchat.utils.metrics import registry_evictions_total
"""

from shopchat.utils.metrics.websocket import (
    get_registered_connections,
    registry_connections_registered,
    registry_evictions_total,
    registry_registration_duration_seconds,
    registry_registrations_total,
    ws_broadcasts_total,
    ws_connections_active,
    ws_connections_total,
    ws_messages_received_total,
    ws_messages_rejected_total,
)

__all__ = [
    "get_registered_connections",
    "registry_connections_registered",
    "registry_evictions_total",
    "registry_registration_duration_seconds",
    "registry_registrations_total",
    "ws_broadcasts_total",
    "ws_connections_active",
    "ws_connections_total",
    "ws_messages_received_total",
    "ws_messages_rejected_total",
]
