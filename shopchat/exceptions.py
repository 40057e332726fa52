"""
Custom exception classes for the application.

This module defines the errors raised by the connection registry and its
identity collaborator so callers can tell failure causes apart.
"""


class RegistryError(Exception):
    """
    Connection registry operation failed.

    Base class for every error produced while registering or looking up
    connections.
    """

    pass


class IdentityError(RegistryError):
    """
    Identity could not be resolved to an active user.

    Attributes:
        user_id: The claimed identity that failed to resolve.
    """

    def __init__(self, user_id: str, detail: str) -> None:
        self.user_id = user_id
        self.detail = detail
        super().__init__(f"{detail} (user_id={user_id})")


class IdentityNotFoundError(IdentityError):
    """No user exists for the claimed identity."""

    def __init__(self, user_id: str) -> None:
        super().__init__(user_id, "User not found")


class IdentityInactiveError(IdentityError):
    """The user exists but is not active."""

    def __init__(self, user_id: str) -> None:
        super().__init__(user_id, "User is not active")


class IdentityLookupError(IdentityError):
    """The identity store could not be queried."""

    def __init__(self, user_id: str) -> None:
        super().__init__(user_id, "Identity lookup failed")


class ConnectionNotFoundError(RegistryError, KeyError):
    """
    Connection id is not registered.

    Raised by lookups for connections that never registered or were
    already removed.
    """

    def __init__(self, connection_id: str) -> None:
        self.connection_id = connection_id
        super().__init__(f"Connection {connection_id} is not registered")

    def __str__(self) -> str:
        return str(self.args[0])
