"""User account model."""

from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    """
    SQLModel representing a shop user in the database.

    This is a clean data model without Active Record methods.
    Use UserRepository for all database operations.

    Attributes:
        id: Primary key (UUID), also the ``id`` claim of issued tokens
        email: Unique login email, stored lowercased
        full_name: Display name shown in chat, stored lowercased
        is_active: Inactive users cannot open WebSocket connections
        roles: Role names granted to the user. Stored for the rest of the
            shop backend (catalog management guards); the messages gateway
            admits any active user and never reads them
    """

    __tablename__ = "users"
    __table_args__ = {"extend_existing": True}

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    full_name: str = Field(max_length=255)
    is_active: bool = Field(default=True)
    roles: list[str] = Field(
        default_factory=lambda: ["user"],
        sa_column=Column(JSON, nullable=False),
    )
