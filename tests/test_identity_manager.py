"""Tests for DatabaseIdentityVerifier."""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from shopchat.exceptions import (
    IdentityInactiveError,
    IdentityLookupError,
    IdentityNotFoundError,
    RegistryError,
)
from shopchat.managers.identity_manager import DatabaseIdentityVerifier
from shopchat.models.user import User
from shopchat.schemas.identity import Identity


def make_verifier(get_by_id):
    """Build a verifier whose repository returns ``get_by_id``'s result."""
    session_factory = MagicMock()
    session_factory.return_value.__aenter__.return_value = AsyncMock()
    repo = MagicMock()
    repo.get_by_id = get_by_id
    return DatabaseIdentityVerifier(session_factory), repo


@pytest.fixture
def user():
    return User(
        id=uuid.uuid4(), email="john@example.com", full_name="john doe"
    )


@pytest.mark.asyncio
async def test_resolves_active_user(user):
    verifier, repo = make_verifier(AsyncMock(return_value=user))

    with patch(
        "shopchat.managers.identity_manager.UserRepository", return_value=repo
    ):
        identity = await verifier.resolve_active_identity(str(user.id))

    assert identity == Identity(id=str(user.id), display_name="john doe")
    repo.get_by_id.assert_awaited_once_with(user.id)


@pytest.mark.asyncio
async def test_inactive_user(user):
    user.is_active = False
    verifier, repo = make_verifier(AsyncMock(return_value=user))

    with patch(
        "shopchat.managers.identity_manager.UserRepository", return_value=repo
    ):
        with pytest.raises(IdentityInactiveError) as exc_info:
            await verifier.resolve_active_identity(str(user.id))

    assert exc_info.value.user_id == str(user.id)


@pytest.mark.asyncio
async def test_unknown_user():
    verifier, repo = make_verifier(AsyncMock(return_value=None))

    with patch(
        "shopchat.managers.identity_manager.UserRepository", return_value=repo
    ):
        with pytest.raises(IdentityNotFoundError):
            await verifier.resolve_active_identity(str(uuid.uuid4()))


@pytest.mark.asyncio
async def test_malformed_id_is_not_found():
    """Test ids that are not UUIDs never reach the database."""
    verifier, repo = make_verifier(AsyncMock())

    with pytest.raises(IdentityNotFoundError):
        await verifier.resolve_active_identity("not-a-uuid")

    verifier.session_factory.assert_not_called()


@pytest.mark.asyncio
async def test_database_error_is_lookup_error():
    verifier, repo = make_verifier(
        AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))
    )

    with patch(
        "shopchat.managers.identity_manager.UserRepository", return_value=repo
    ):
        with pytest.raises(IdentityLookupError) as exc_info:
            await verifier.resolve_active_identity(str(uuid.uuid4()))

    assert isinstance(exc_info.value, RegistryError)
    assert isinstance(exc_info.value.__cause__, OperationalError)
