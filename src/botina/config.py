"""Runtime configuration."""

import os
from dataclasses import dataclass
from datetime import time
from pathlib import Path

from .conversation.states import EntryMode

DEFAULT_HOME = Path.home() / ".botina"


def _parse_time(value: str) -> time:
    hours, _, minutes = value.partition(":")
    return time(int(hours), int(minutes or 0))


@dataclass
class BotConfig:
    """Configuration for the bot, its stores and the reminder job."""

    telegram_token: str | None = None
    groq_api_key: str | None = None
    model: str = "llama-3.1-70b-versatile"
    supabase_url: str | None = None
    supabase_key: str | None = None
    supabase_table: str = "profiles"
    db_path: Path | None = None
    log_dir: Path | None = None
    entry_mode: EntryMode = EntryMode.FREE_FORM
    history_cap: int = 20
    history_window: int = 6
    birthdate_lookback_years: int = 5
    reminder_time: time = time(8, 0)
    reminder_timezone: str = "Africa/Johannesburg"
    connect_retries: int = 5
    connect_backoff: float = 5.0
    health_port: int = 3000

    def __post_init__(self) -> None:
        if self.db_path is None:
            self.db_path = DEFAULT_HOME / "users.db"
        if self.log_dir is None:
            self.log_dir = DEFAULT_HOME / "logs"
        if self.history_cap < 1:
            raise ValueError("history_cap must be at least 1")
        if self.history_window > self.history_cap:
            self.history_window = self.history_cap
        if self.connect_retries < 1:
            raise ValueError("connect_retries must be at least 1")


def config_from_env() -> BotConfig:
    """Load configuration from environment variables."""
    db_path = os.getenv("BOTINA_DB_PATH")
    log_dir = os.getenv("BOTINA_LOG_DIR")

    return BotConfig(
        telegram_token=os.getenv("TELEGRAM_TOKEN"),
        groq_api_key=os.getenv("GROQ_API_KEY"),
        model=os.getenv("GROQ_MODEL", "llama-3.1-70b-versatile"),
        supabase_url=os.getenv("SUPABASE_URL"),
        supabase_key=os.getenv("SUPABASE_ANON_KEY"),
        supabase_table=os.getenv("SUPABASE_TABLE", "profiles"),
        db_path=Path(db_path).expanduser() if db_path else None,
        log_dir=Path(log_dir).expanduser() if log_dir else None,
        entry_mode=EntryMode(os.getenv("BOTINA_ENTRY_MODE", EntryMode.FREE_FORM.value)),
        history_cap=int(os.getenv("BOTINA_HISTORY_CAP", "20")),
        history_window=int(os.getenv("BOTINA_HISTORY_WINDOW", "6")),
        birthdate_lookback_years=int(os.getenv("BOTINA_BIRTHDATE_LOOKBACK_YEARS", "5")),
        reminder_time=_parse_time(os.getenv("BOTINA_REMINDER_TIME", "08:00")),
        reminder_timezone=os.getenv("BOTINA_REMINDER_TZ", "Africa/Johannesburg"),
        connect_retries=int(os.getenv("BOTINA_CONNECT_RETRIES", "5")),
        connect_backoff=float(os.getenv("BOTINA_CONNECT_BACKOFF", "5.0")),
        health_port=int(os.getenv("PORT", "3000")),
    )
