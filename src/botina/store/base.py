"""User store interface."""

from typing import Protocol

from .models import UserRecord


class UserStore(Protocol):
    """Key-value store of user records keyed by user_id.

    Implementations raise PersistenceUnavailable when the backend cannot
    be reached or fails.
    """

    async def get_all_users(self) -> list[UserRecord]:
        ...

    async def get_user(self, user_id: str) -> UserRecord | None:
        ...

    async def upsert_user(self, record: UserRecord) -> None:
        """Insert or fully replace the record with the same user_id."""
        ...

    async def close(self) -> None:
        ...
