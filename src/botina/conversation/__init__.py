"""Conversation state machine."""

from .router import route
from .states import (
    AskModel,
    ClearHistory,
    ConversationState,
    Effect,
    EntryMode,
    Reply,
    ReplySchedule,
    SetBirthDate,
    SetLanguage,
    Transition,
)

__all__ = [
    "AskModel",
    "ClearHistory",
    "ConversationState",
    "Effect",
    "EntryMode",
    "Reply",
    "ReplySchedule",
    "SetBirthDate",
    "SetLanguage",
    "Transition",
    "route",
]
