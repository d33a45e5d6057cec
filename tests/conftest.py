"""Shared fixtures."""

from datetime import date
from pathlib import Path

import pytest

from botina.content import ContentTable
from botina.errors import ModelUnavailable
from botina.logging import configure_logger
from botina.session import SessionManager
from botina.store import SQLiteUserStore
from botina.vaccines import load_vaccines

TODAY = date(2024, 6, 1)


class FakeMessenger:
    """Records outbound messages instead of sending them."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[str, str]] = []

    async def send_text(self, user_id: str, text: str) -> bool:
        if self.fail:
            return False
        self.sent.append((user_id, text))
        return True

    def texts(self, user_id: str | None = None) -> list[str]:
        return [text for uid, text in self.sent if user_id is None or uid == user_id]


class FakeLLM:
    """Returns a canned answer and records every request."""

    def __init__(self, reply: str = "Vaccines are safe.", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, list[dict[str, str]]]] = []

    async def generate(self, system_prompt: str, history: list[dict[str, str]]) -> str:
        self.calls.append((system_prompt, list(history)))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture(autouse=True)
def json_logs(tmp_path: Path):
    """Send JSONL logs to a temporary directory."""
    return configure_logger(tmp_path / "logs")


@pytest.fixture
def store(tmp_path: Path):
    store = SQLiteUserStore(tmp_path / "users.db")
    store.init_db()
    yield store
    if store._conn is not None:
        store._conn.close()


@pytest.fixture
def sessions(store: SQLiteUserStore) -> SessionManager:
    return SessionManager(store)


@pytest.fixture
def content() -> ContentTable:
    return ContentTable.load()


@pytest.fixture
def vaccines():
    return load_vaccines()


@pytest.fixture
def messenger() -> FakeMessenger:
    return FakeMessenger()


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def failing_llm() -> FakeLLM:
    return FakeLLM(error=ModelUnavailable("Groq request failed: timeout"))
