"""
Repository for User entity with specialized query methods.

Example:
    ```python
    from shopchat.repositories.user_repository import UserRepository
    from shopchat.storage.db import async_session

    async with async_session() as session:
        repo = UserRepository(session)
        user = await repo.get_by_email("john@example.com")
    ```
"""

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from shopchat.models.user import User
from shopchat.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """
    Repository for User entity operations.

    Provides CRUD operations inherited from BaseRepository plus
    User-specific query methods.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> User | None:
        """
        Get user by email (case-insensitive).

        Args:
            email: Email address to look up.

        Returns:
            User if found, None otherwise.
        """
        stmt = select(User).where(User.email == email.lower().strip())
        result = await self.session.exec(stmt)
        return result.first()

    async def create_user(
        self, email: str, full_name: str, roles: list[str] | None = None
    ) -> User:
        """
        Create a user with normalized email and name.

        Email is trimmed and lowercased; full name is lowercased.

        Args:
            email: Login email.
            full_name: Display name.
            roles: Granted roles, ``["user"]`` when omitted.

        Returns:
            The persisted user.
        """
        user = User(
            email=email.lower().strip(),
            full_name=full_name.lower(),
            roles=roles or ["user"],
        )
        return await self.create(user)

    async def set_active(self, user: User, is_active: bool) -> User:
        user.is_active = is_active
        return await self.update(user)
