"""
Prometheus metrics for WebSocket connection monitoring.

This module defines metrics for tracking WebSocket connections, registry
outcomes, evictions and chat message rates.
"""

from shopchat.utils.metrics._helpers import (
    _get_or_create_counter,
    _get_or_create_gauge,
    _get_or_create_histogram,
)

# WebSocket Connection Metrics
ws_connections_active = _get_or_create_gauge(
    "ws_connections_active", "Number of open WebSocket transports"
)

ws_connections_total = _get_or_create_counter(
    "ws_connections_total",
    "Total WebSocket connections",
    ["status"],  # accepted, rejected_auth, rejected_registration, error
)

# Connection Registry Metrics
registry_connections_registered = _get_or_create_gauge(
    "registry_connections_registered",
    "Number of connections currently held by the connection registry",
)

registry_registrations_total = _get_or_create_counter(
    "registry_registrations_total",
    "Registration attempts by outcome",
    ["outcome"],  # registered, not_found, inactive, lookup_error
)

registry_evictions_total = _get_or_create_counter(
    "registry_evictions_total",
    "Connections evicted by a newer connection of the same user and device",
    ["device_class"],
)

registry_registration_duration_seconds = _get_or_create_histogram(
    "registry_registration_duration_seconds",
    "Time spent registering a connection, identity lookup included",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

# Message Metrics
ws_messages_received_total = _get_or_create_counter(
    "ws_messages_received_total", "Total WebSocket messages received"
)

ws_messages_rejected_total = _get_or_create_counter(
    "ws_messages_rejected_total",
    "Inbound WebSocket messages rejected by validation",
)

ws_broadcasts_total = _get_or_create_counter(
    "ws_broadcasts_total",
    "Total broadcasts sent to all connections",
    ["event"],
)


def get_registered_connections() -> int:
    """
    Get the current number of registered connections.

    Returns:
        int: Number of records held by the connection registry.
    """
    try:
        return int(registry_connections_registered._value.get())
    except (AttributeError, ValueError):
        return 0
