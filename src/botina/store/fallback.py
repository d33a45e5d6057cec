"""Remote store with a local fallback."""

import logging
from pathlib import Path

from ..config import BotConfig
from ..errors import PersistenceUnavailable
from ..logging import get_logger
from .base import UserStore
from .models import UserRecord
from .sqlite import SQLiteUserStore
from .supabase import SupabaseUserStore

logger = logging.getLogger(__name__)


def _newest(a: UserRecord | None, b: UserRecord | None) -> UserRecord | None:
    if a is None:
        return b
    if b is None:
        return a
    return a if a.updated_at >= b.updated_at else b


class FallbackUserStore:
    """Keeps working when the primary store is down.

    Every write also goes to the local store, so the local copy is always
    at least as fresh as anything written while the primary was failing.
    Reads merge both sides and keep the copy with the newest updated_at.
    """

    def __init__(self, primary: UserStore, local: UserStore) -> None:
        self.primary = primary
        self.local = local
        self.json_logger = get_logger()

    def _fallback(self, operation: str, error: Exception) -> None:
        logger.warning("Primary store %s failed, using local store: %s", operation, error)
        self.json_logger.log("store_fallback", error=str(error), operation=operation)

    async def get_all_users(self) -> list[UserRecord]:
        local_records = await self.local.get_all_users()
        try:
            primary_records = await self.primary.get_all_users()
        except PersistenceUnavailable as e:
            self._fallback("get_all_users", e)
            return local_records

        merged: dict[str, UserRecord] = {r.user_id: r for r in primary_records}
        for record in local_records:
            existing = merged.get(record.user_id)
            if existing is None or record.updated_at > existing.updated_at:
                merged[record.user_id] = record
        return list(merged.values())

    async def get_user(self, user_id: str) -> UserRecord | None:
        local_record = await self.local.get_user(user_id)
        try:
            primary_record = await self.primary.get_user(user_id)
        except PersistenceUnavailable as e:
            self._fallback("get_user", e)
            return local_record
        return _newest(primary_record, local_record)

    async def upsert_user(self, record: UserRecord) -> None:
        await self.local.upsert_user(record)
        try:
            await self.primary.upsert_user(record)
        except PersistenceUnavailable as e:
            self._fallback("upsert_user", e)

    async def close(self) -> None:
        await self.primary.close()
        await self.local.close()


def build_user_store(config: BotConfig) -> UserStore:
    """Create the store described by config.

    Supabase with a local SQLite fallback when Supabase is configured,
    otherwise SQLite alone.
    """
    if config.db_path is None:
        raise ValueError("db_path is not set")
    local = SQLiteUserStore(Path(config.db_path), history_cap=config.history_cap)
    local.init_db()

    if not (config.supabase_url and config.supabase_key):
        logger.info("Supabase not configured, storing users in %s", config.db_path)
        return local

    remote = SupabaseUserStore(
        config.supabase_url,
        config.supabase_key,
        table=config.supabase_table,
        history_cap=config.history_cap,
    )
    return FallbackUserStore(remote, local)
