"""
Base repository with common CRUD operations.

Repositories encapsulate all database operations for a specific entity,
keeping data access out of the managers that use them.

Example:
    ```python
    from shopchat.repositories.base import BaseRepository
    from shopchat.models.user import User


    class UserRepository(BaseRepository[User]):
        def __init__(self, session: AsyncSession):
            super().__init__(session, User)
    ```
"""

from typing import Any, Generic, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from shopchat.logging import logger

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base repository providing common CRUD operations.

    Type Parameters:
        T: The SQLModel type this repository manages.

    Attributes:
        session: The database session for executing queries.
        model: The SQLModel class this repository manages.
    """

    def __init__(self, session: AsyncSession, model: Type[T]):
        self.session = session
        self.model = model

    async def get_by_id(self, id: Any) -> T | None:
        """
        Get entity by primary key.

        Args:
            id: Primary key value.

        Returns:
            Entity if found, None otherwise.

        Raises:
            SQLAlchemyError: If database query fails.
        """
        try:
            return await self.session.get(self.model, id)
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving {self.model.__name__} {id}: {e}")
            raise

    async def create(self, entity: T) -> T:
        """
        Create new entity in database.

        Args:
            entity: The entity instance to create.

        Returns:
            The created entity with generated fields populated.

        Raises:
            SQLAlchemyError: If database operation fails.
        """
        try:
            self.session.add(entity)
            await self.session.flush()
            await self.session.refresh(entity)
            return entity
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error creating {self.model.__name__}: {e}")
            raise

    async def update(self, entity: T) -> T:
        """
        Update existing entity in database.

        Args:
            entity: The entity instance with updated values.

        Returns:
            The updated entity.

        Raises:
            SQLAlchemyError: If database operation fails.
        """
        try:
            self.session.add(entity)
            await self.session.flush()
            await self.session.refresh(entity)
            return entity
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error updating {self.model.__name__}: {e}")
            raise
