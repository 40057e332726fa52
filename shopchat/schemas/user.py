from starlette.authentication import BaseUser


class ClaimedUser(BaseUser):  # type: ignore[misc]
    """
    Identity claimed by a verified bearer token.

    The claim is not proof that the user exists or is active; the
    connection registry resolves it again when the connection registers.
    """

    def __init__(self, id: str, expires_at: int | None = None) -> None:
        self.id = id
        self.expires_at = expires_at

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def display_name(self) -> str:
        return self.id

    @property
    def identity(self) -> str:
        return self.id

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ClaimedUser) and other.id == self.id

    def __hash__(self) -> int:
        return hash(self.id)
