"""Executes routed transitions against the store, model and transport."""

import logging
import time
from collections.abc import Callable
from datetime import date

from ..content import ContentTable
from ..errors import ModelUnavailable
from ..llm import LLMClient
from ..logging import JSONLLogger, get_logger
from ..messaging import Messenger
from ..nlu import classify
from ..session import SessionManager
from ..store import UserRecord
from ..vaccines import VaccineDefinition, format_display_date, vaccine_schedule
from .prompt import build_system_prompt
from .router import route
from .states import (
    AskModel,
    ClearHistory,
    EntryMode,
    Reply,
    ReplySchedule,
    SetBirthDate,
    SetLanguage,
    Transition,
)

logger = logging.getLogger(__name__)


class ConversationHandler:
    """Handles one inbound message end to end.

    Classifies the text, asks `route` for the transition, runs its effects
    in order and persists the record once at the end.
    """

    def __init__(
        self,
        sessions: SessionManager,
        messenger: Messenger,
        llm: LLMClient,
        content: ContentTable,
        vaccines: list[VaccineDefinition],
        entry_mode: EntryMode = EntryMode.FREE_FORM,
        history_window: int = 6,
        birthdate_lookback_years: int = 5,
        today: Callable[[], date] = date.today,
        json_logger: JSONLLogger | None = None,
    ) -> None:
        self.sessions = sessions
        self.messenger = messenger
        self.llm = llm
        self.content = content
        self.vaccines = vaccines
        self.entry_mode = entry_mode
        self.history_window = history_window
        self.birthdate_lookback_years = birthdate_lookback_years
        self.today = today
        self.json_logger = json_logger or get_logger()

    async def handle(self, user_id: str, text: str) -> list[str]:
        """Process one message from a user.

        Returns:
            The texts sent back to the user, in order.
        """
        async with self.sessions.transaction(user_id) as record:
            today = self.today()
            classification = classify(text, today, self.birthdate_lookback_years)
            previous = record.state

            self.json_logger.log(
                "message_received",
                user_id=user_id,
                state=previous.value,
                language=record.language,
                intent=classification.intent.value,
                message_length=len(text),
            )

            transition = route(
                previous,
                classification,
                has_birth_date=record.child_birth_date is not None,
                entry_mode=self.entry_mode,
            )
            sent = await self._apply(record, transition, today)
            record.state = transition.state

            if transition.state is not previous:
                self.json_logger.log_transition(
                    user_id,
                    previous.value,
                    transition.state.value,
                    intent=classification.intent.value,
                )
        return sent

    async def _apply(self, record: UserRecord, transition: Transition, today: date) -> list[str]:
        sent: list[str] = []
        for effect in transition.effects:
            if isinstance(effect, SetLanguage):
                record.language = effect.language
            elif isinstance(effect, SetBirthDate):
                record.child_birth_date = effect.value
            elif isinstance(effect, ClearHistory):
                record.clear_history()
            elif isinstance(effect, Reply):
                language = effect.language or record.language
                await self._send(record, self.content.render(language, effect.key, **effect.params), sent)
            elif isinstance(effect, ReplySchedule):
                await self._send(record, self.format_schedule(record), sent)
            elif isinstance(effect, AskModel):
                answer = await self._ask_model(record, effect.text, today)
                await self._send(record, answer, sent)
        return sent

    async def _send(self, record: UserRecord, text: str, sent: list[str]) -> None:
        delivered = await self.messenger.send_text(record.user_id, text)
        if not delivered:
            logger.warning("Could not deliver message to %s", record.user_id)
            self.json_logger.log("send_failed", user_id=record.user_id, state=record.state.value)
        sent.append(text)

    async def _ask_model(self, record: UserRecord, text: str, today: date) -> str:
        record.add_chat("user", text)
        system_prompt = build_system_prompt(
            record.language, record.child_birth_date, today, self.vaccines
        )
        started = time.monotonic()
        try:
            answer = await self.llm.generate(
                system_prompt, record.history_for_llm(self.history_window)
            )
        except ModelUnavailable as e:
            logger.warning("Model unavailable for %s: %s", record.user_id, e)
            self.json_logger.log("model_error", user_id=record.user_id, error=str(e))
            return self.content.get(record.language, "model_error")

        self.json_logger.log(
            "model_reply",
            user_id=record.user_id,
            duration_ms=(time.monotonic() - started) * 1000,
        )
        record.add_chat("assistant", answer)
        return answer

    def format_schedule(self, record: UserRecord) -> str:
        """Render the child's full vaccine schedule in the user's language."""
        language = record.language
        if record.child_birth_date is None:
            return self.content.get(language, "schedule_unknown")

        lines = [
            self.content.render(
                language, "schedule_intro", birthdate=record.child_birth_date.isoformat()
            )
        ]
        for due, vaccine in vaccine_schedule(record.child_birth_date, self.vaccines):
            lines.append(
                self.content.render(
                    language,
                    "schedule_line",
                    vaccine_date=format_display_date(due),
                    vaccine_name=vaccine.name,
                )
            )
        return "\n".join(lines)
