"""User record schema shared by all stores."""

import time
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from ..content import DEFAULT_LANGUAGE
from ..conversation.states import ConversationState

DEFAULT_HISTORY_CAP = 20


def _date_to_str(value: date | None) -> str | None:
    return value.isoformat() if value else None


def _date_from_str(value: Any) -> date | None:
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


@dataclass
class ChatEntry:
    """One turn in a user's chat history."""

    role: str
    text: str
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "text": self.text, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatEntry":
        return cls(
            role=data["role"],
            text=data["text"],
            timestamp=float(data.get("timestamp") or time.time()),
        )


@dataclass
class UserRecord:
    """Everything the bot knows about one contact.

    Attributes:
        user_id: Stable transport handle (Telegram chat id).
        language: Content language code.
        state: Current conversation state. Never None.
        child_birth_date: Set once, then only changed through the explicit
            birth date menu entry.
        chat_history: Most recent turns, oldest first, at most history_cap.
        last_reminder_sent: Day the last reminder went out.
        created_at: Epoch seconds when the record was created.
        updated_at: Epoch seconds of the last save.
    """

    user_id: str
    language: str = DEFAULT_LANGUAGE
    state: ConversationState = ConversationState.UNINITIALIZED
    child_birth_date: date | None = None
    chat_history: list[ChatEntry] = field(default_factory=list)
    last_reminder_sent: date | None = None
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)
    history_cap: int = field(default=DEFAULT_HISTORY_CAP, repr=False, compare=False)

    def add_chat(self, role: str, text: str) -> None:
        """Append a turn, dropping the oldest ones beyond the cap."""
        self.chat_history.append(ChatEntry(role=role, text=text))
        self._truncate_history()

    def clear_history(self) -> None:
        self.chat_history = []

    def history_for_llm(self, limit: int) -> list[dict[str, str]]:
        """Most recent `limit` turns in chat-completion message format."""
        if limit <= 0:
            return []
        return [
            {"role": entry.role, "content": entry.text}
            for entry in self.chat_history[-limit:]
        ]

    def touch(self) -> None:
        self.updated_at = time.time()

    def _truncate_history(self) -> None:
        if len(self.chat_history) > self.history_cap:
            self.chat_history = self.chat_history[-self.history_cap:]

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted schema."""
        return {
            "user_id": self.user_id,
            "language": self.language,
            "conversation_state": self.state.value,
            "child_birth_date": _date_to_str(self.child_birth_date),
            "chat_history": [entry.to_dict() for entry in self.chat_history],
            "last_reminder_sent": _date_to_str(self.last_reminder_sent),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        history_cap: int = DEFAULT_HISTORY_CAP,
    ) -> "UserRecord":
        """Create from the persisted schema.

        Unknown states load as UNINITIALIZED and unreadable dates as None.
        """
        try:
            state = ConversationState(data.get("conversation_state"))
        except ValueError:
            state = ConversationState.UNINITIALIZED

        now = time.time()
        record = cls(
            user_id=str(data["user_id"]),
            language=data.get("language") or DEFAULT_LANGUAGE,
            state=state,
            child_birth_date=_date_from_str(data.get("child_birth_date")),
            chat_history=[ChatEntry.from_dict(e) for e in data.get("chat_history") or []],
            last_reminder_sent=_date_from_str(data.get("last_reminder_sent")),
            created_at=float(data.get("created_at") or now),
            updated_at=float(data.get("updated_at") or now),
            history_cap=history_cap,
        )
        record._truncate_history()
        return record
