"""Conversation states and the effects a transition can request."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Union


class ConversationState(Enum):
    """Where a user is in the conversation."""

    UNINITIALIZED = "uninitialized"
    MENU_ROOT = "menu_root"
    MENU_INFO = "menu_info"
    AWAITING_BIRTHDATE = "awaiting_birthdate"
    AWAITING_LANGUAGE_CHOICE = "awaiting_language_choice"
    FREE_FORM = "free_form"


class EntryMode(Enum):
    """Which state a user lands in after the welcome and after settings."""

    FREE_FORM = "free_form"
    MENU = "menu"

    @property
    def home_state(self) -> ConversationState:
        if self is EntryMode.MENU:
            return ConversationState.MENU_ROOT
        return ConversationState.FREE_FORM


@dataclass(frozen=True)
class Reply:
    """Send a content table string.

    `language` overrides the user's language, used when confirming a
    language change in the new language.
    """

    key: str
    params: dict[str, Any] = field(default_factory=dict)
    language: str | None = None


@dataclass(frozen=True)
class ReplySchedule:
    """Send the child's vaccine schedule, or ask for the birth date."""


@dataclass(frozen=True)
class SetBirthDate:
    value: date


@dataclass(frozen=True)
class SetLanguage:
    language: str


@dataclass(frozen=True)
class ClearHistory:
    pass


@dataclass(frozen=True)
class AskModel:
    """Forward text to the language model and send its answer."""

    text: str


Effect = Union[Reply, ReplySchedule, SetBirthDate, SetLanguage, ClearHistory, AskModel]


@dataclass
class Transition:
    """Result of routing one message."""

    state: ConversationState
    effects: list[Effect] = field(default_factory=list)
