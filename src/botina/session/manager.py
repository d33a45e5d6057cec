"""Per-user record access with concurrency control."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from ..store import DEFAULT_HISTORY_CAP, UserRecord, UserStore


class SessionManager:
    """Loads, creates and saves user records, one user at a time.

    Each user id has its own asyncio.Lock. Everything that reads and
    rewrites a record (message handling, the reminder sweep) holds it via
    `locked` or `transaction`, so two updates to the same user never
    interleave while different users proceed concurrently. A lock is
    dropped once nobody holds or waits on it.
    """

    def __init__(self, store: UserStore, history_cap: int = DEFAULT_HISTORY_CAP) -> None:
        self.store = store
        self.history_cap = history_cap
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    def get_lock(self, user_id: str) -> asyncio.Lock:
        """Get the lock for a user_id."""
        if user_id not in self._locks:
            self._locks[user_id] = asyncio.Lock()
        return self._locks[user_id]

    def is_busy(self, user_id: str) -> bool:
        """Check if a user's record is currently being processed."""
        lock = self._locks.get(user_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def locked(self, user_id: str) -> AsyncIterator[None]:
        """Hold a user's lock for the duration of the block."""
        lock = self.get_lock(user_id)
        self._holders[user_id] = self._holders.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[user_id] -= 1
            if self._holders[user_id] == 0:
                del self._holders[user_id]
                self._locks.pop(user_id, None)

    async def load(self, user_id: str) -> UserRecord:
        """Load a user's record, or a fresh UNINITIALIZED one for new users."""
        record = await self.store.get_user(user_id)
        if record is None:
            return UserRecord(user_id=user_id, history_cap=self.history_cap)
        record.history_cap = self.history_cap
        return record

    async def save(self, record: UserRecord) -> None:
        """Replace the stored record with this one."""
        record.touch()
        await self.store.upsert_user(record)

    @asynccontextmanager
    async def transaction(self, user_id: str) -> AsyncIterator[UserRecord]:
        """Lock a user, yield their record and save it on clean exit.

        If the body raises, nothing is saved.
        """
        async with self.locked(user_id):
            record = await self.load(user_id)
            yield record
            await self.save(record)
