"""User record persistence."""

from .base import UserStore
from .fallback import FallbackUserStore, build_user_store
from .models import DEFAULT_HISTORY_CAP, ChatEntry, UserRecord
from .sqlite import SQLiteUserStore
from .supabase import SupabaseUserStore

__all__ = [
    "ChatEntry",
    "DEFAULT_HISTORY_CAP",
    "FallbackUserStore",
    "SQLiteUserStore",
    "SupabaseUserStore",
    "UserRecord",
    "UserStore",
    "build_user_store",
]
