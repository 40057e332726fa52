from typing import Callable
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from shopchat.exceptions import (
    IdentityInactiveError,
    IdentityLookupError,
    IdentityNotFoundError,
)
from shopchat.logging import logger
from shopchat.repositories.user_repository import UserRepository
from shopchat.schemas.identity import Identity
from shopchat.storage.db import async_session


class DatabaseIdentityVerifier:
    """
    Resolves claimed user ids against the users table.

    A fresh session is opened for every lookup, so deactivations and
    renames are visible to the next registration.
    """

    def __init__(
        self, session_factory: Callable[[], AsyncSession] = async_session
    ) -> None:
        self.session_factory = session_factory

    async def resolve_active_identity(self, user_id: str) -> Identity:
        """
        Look up an active user.

        Args:
            user_id: The ``id`` claim of a verified token.

        Returns:
            Identity: The user's id and full name.

        Raises:
            IdentityNotFoundError: Malformed id or no such user.
            IdentityInactiveError: The user is deactivated.
            IdentityLookupError: The database query failed.
        """
        try:
            pk = UUID(str(user_id))
        except ValueError:
            raise IdentityNotFoundError(user_id)

        try:
            async with self.session_factory() as session:
                user = await UserRepository(session).get_by_id(pk)
        except SQLAlchemyError as ex:
            logger.error(f"Identity lookup failed for user {user_id}: {ex}")
            raise IdentityLookupError(user_id) from ex

        if user is None:
            raise IdentityNotFoundError(user_id)
        if not user.is_active:
            raise IdentityInactiveError(user_id)

        return Identity(id=str(user.id), display_name=user.full_name)
