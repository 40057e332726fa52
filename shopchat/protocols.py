"""
Protocol classes for structural subtyping (duck typing with type safety).

The connection registry depends only on these interfaces, never on the
WebSocket transport or the database directly, so tests and alternative
transports can supply any compatible object.

Example:
    ```python
    from shopchat.protocols import ConnectionHandle


    class FakeHandle:
        def __init__(self, id: str) -> None:
            self.id = id

        async def terminate(self) -> None:
            ...
    ```
"""

from typing import Protocol, runtime_checkable

from shopchat.schemas.identity import Identity


@runtime_checkable
class ConnectionHandle(Protocol):
    """
    Narrow capability over a live transport connection.

    The registry may read the connection id and ask the transport to
    terminate; nothing else of the transport is exposed.

    Attributes:
        id: Opaque connection identifier, stable for the connection's life.
    """

    id: str

    async def terminate(self) -> None:
        """Force the underlying transport to close."""
        ...


@runtime_checkable
class IdentityVerifier(Protocol):
    """
    Resolves a claimed user id to an active identity.

    Implementations are queried on every registration; results must not be
    cached between calls.
    """

    async def resolve_active_identity(self, user_id: str) -> Identity:
        """
        Resolve a user id.

        Args:
            user_id: The identity claimed by the connection's credential.

        Returns:
            Identity: The user's id and current display name.

        Raises:
            IdentityNotFoundError: No such user.
            IdentityInactiveError: The user is deactivated.
            IdentityLookupError: The identity store could not be queried.
        """
        ...
