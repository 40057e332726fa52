"""
Mock factory functions for connection registry testing.

Provides fake connection handles and identity verifiers that record how
the registry used them.
"""

import asyncio
from unittest.mock import AsyncMock
from uuid import UUID

from shopchat.exceptions import IdentityInactiveError, IdentityNotFoundError
from shopchat.schemas.identity import Identity


class FakeHandle:
    """
    Connection handle counting terminate() calls.

    With ``slow=True`` terminate() yields to the event loop once, like
    closing a real socket does.
    """

    def __init__(self, id: str, fail: bool = False, slow: bool = False) -> None:
        self.id = id
        if fail:
            side_effect = RuntimeError("socket already closed")
        elif slow:
            side_effect = _yield_once
        else:
            side_effect = None
        self.terminate = AsyncMock(side_effect=side_effect)


async def _yield_once() -> None:
    await asyncio.sleep(0)


class FakeIdentityVerifier:
    """
    In-memory identity verifier.

    Users are stored as ``{user_id: (display_name, is_active)}``. Every
    resolution is recorded in ``calls``. When ``gate`` is set, lookups
    block until the event is set, which lets tests interleave concurrent
    registrations.
    """

    def __init__(self, users: dict[str, tuple[str, bool]] | None = None):
        self.users = dict(users or {})
        self.calls: list[str] = []
        self.gate: asyncio.Event | None = None

    def rename(self, user_id: str, display_name: str) -> None:
        _, is_active = self.users[user_id]
        self.users[user_id] = (display_name, is_active)

    async def resolve_active_identity(self, user_id: str) -> Identity:
        self.calls.append(user_id)
        if self.gate is not None:
            await self.gate.wait()

        if user_id not in self.users:
            raise IdentityNotFoundError(user_id)

        display_name, is_active = self.users[user_id]
        if not is_active:
            raise IdentityInactiveError(user_id)

        return Identity(id=user_id, display_name=display_name)


def create_fake_identity_verifier() -> FakeIdentityVerifier:
    """
    Creates a verifier with two active users and one inactive user.

    Returns:
        FakeIdentityVerifier: Verifier knowing ``u1``, ``u2`` and ``u3``
    """
    return FakeIdentityVerifier(
        {
            "u1": ("john doe", True),
            "u2": ("jane roe", True),
            "u3": ("inactive user", False),
        }
    )


class UUIDIdentityVerifier(FakeIdentityVerifier):
    """
    Verifier accepting any spelling of a UUID claim.

    Like the database verifier, it resolves the claim to the canonical
    ``str(UUID)`` form, so differently spelled claims name the same user.
    """

    async def resolve_active_identity(self, user_id: str) -> Identity:
        try:
            canonical = str(UUID(user_id))
        except ValueError:
            raise IdentityNotFoundError(user_id)
        return await super().resolve_active_identity(canonical)
