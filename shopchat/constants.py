"""
Application-level constants for the messages gateway.

These values define the wire protocol spoken with WebSocket clients and
should NEVER be changed via environment variables. For configurable values
(database, token lifetime, logging) see shopchat/settings.py.
"""

from enum import StrEnum

# ============================================================================
# WebSocket Protocol Constants
# ============================================================================

# Close code used when a connection is refused or superseded (RFC 6455)
WS_POLICY_VIOLATION_CODE = 1008

# Close reasons sent with WS_POLICY_VIOLATION_CODE
WS_CLOSE_REASON_UNAUTHENTICATED = "Authentication required"
WS_CLOSE_REASON_REGISTRATION_FAILED = "Connection could not be registered"
WS_CLOSE_REASON_SUPERSEDED = "Replaced by a newer connection"
WS_CLOSE_REASON_UNREGISTERED = "Connection is not registered"


class WsEvent(StrEnum):
    """
    Event names carried in the ``event`` field of every WebSocket frame.

    Attributes:
        CLIENTS_UPDATED: Server -> client, current roster of connection ids
        MESSAGE_FROM_SERVER: Server -> client, relayed chat message
        MESSAGE_FROM_CLIENT: Client -> server, chat message to relay
        EXCEPTION: Server -> client, inbound frame was rejected
    """

    CLIENTS_UPDATED = "clients-updated"
    MESSAGE_FROM_SERVER = "message-from-server"
    MESSAGE_FROM_CLIENT = "message-form-client"
    EXCEPTION = "exception"


# ============================================================================
# Logging Constants
# ============================================================================

# Messages longer than this are truncated by the JSON formatter
MAX_LOG_SIZE_BYTES = 250_000
