"""Daily vaccination reminder sweep."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from ..content import SUPPORTED_LANGUAGES, ContentTable
from ..errors import SchedulerUserDataIncomplete
from ..logging import JSONLLogger, get_logger
from ..messaging import Messenger
from ..session import SessionManager
from ..store import UserRecord
from ..vaccines import VaccineDefinition, compute_due_date, format_display_date

logger = logging.getLogger(__name__)

REMINDER_LEAD_DAYS = 7


@dataclass
class SweepResult:
    """Counters from one sweep."""

    sent: int = 0
    skipped: int = 0
    failed: int = 0


def _as_day(now: datetime | date) -> date:
    return now.date() if isinstance(now, datetime) else now


def should_remind(due: date, today: date, last_sent: date | None) -> bool:
    """Decide whether a dose due on `due` warrants a reminder today.

    A reminder goes out a week ahead, unless one was already sent within
    the last week, and again on the day itself, unless one already went
    out today.
    """
    days_until = (due - today).days
    if days_until == REMINDER_LEAD_DAYS:
        return last_sent is None or last_sent < today - timedelta(days=REMINDER_LEAD_DAYS)
    if days_until == 0:
        return last_sent is None or last_sent < today
    return False


def check_user_data(record: UserRecord) -> None:
    """Raise SchedulerUserDataIncomplete if reminders cannot be computed."""
    if record.child_birth_date is None:
        raise SchedulerUserDataIncomplete(f"user {record.user_id} has no birth date")
    if record.language not in SUPPORTED_LANGUAGES:
        raise SchedulerUserDataIncomplete(
            f"user {record.user_id} has unsupported language {record.language!r}"
        )


class ReminderEngine:
    """Sends reminders for doses due in a week or today.

    Meant to run once per day. The per-user `last_reminder_sent` marker is
    compared at day granularity, so extra runs on the same day send nothing.
    """

    def __init__(
        self,
        sessions: SessionManager,
        messenger: Messenger,
        content: ContentTable,
        vaccines: list[VaccineDefinition],
        json_logger: JSONLLogger | None = None,
    ) -> None:
        self.sessions = sessions
        self.messenger = messenger
        self.content = content
        self.vaccines = vaccines
        self.json_logger = json_logger or get_logger()

    def due_reminders(self, record: UserRecord, today: date) -> dict[date, list[VaccineDefinition]]:
        """Doses that should be announced today, grouped by due date."""
        due: dict[date, list[VaccineDefinition]] = {}
        if record.child_birth_date is None:
            return due
        for vaccine in self.vaccines:
            due_date = compute_due_date(record.child_birth_date, vaccine)
            if due_date is None:
                logger.warning(
                    "Could not calculate %s date for user %s", vaccine.name, record.user_id
                )
                continue
            if should_remind(due_date, today, record.last_reminder_sent):
                due.setdefault(due_date, []).append(vaccine)
        return due

    def format_reminder(self, language: str, due_date: date, vaccines: list[VaccineDefinition]) -> str:
        names: list[str] = []
        for vaccine in vaccines:
            if vaccine.name not in names:
                names.append(vaccine.name)
        return self.content.render(
            language,
            "reminder_message",
            vaccine_name=", ".join(names),
            vaccine_date=format_display_date(due_date),
        )

    async def run_daily_sweep(self, now: datetime | date) -> SweepResult:
        """Check every user and send the reminders due today.

        Users without a birth date or a supported language are skipped.
        A failure for one user never stops the sweep.
        """
        today = _as_day(now)
        result = SweepResult()
        logger.info("Running reminder sweep for %s", today.isoformat())

        for snapshot in await self.sessions.store.get_all_users():
            try:
                check_user_data(snapshot)
            except SchedulerUserDataIncomplete as e:
                logger.info("Skipping reminders: %s", e)
                self.json_logger.log("reminder_skipped", user_id=snapshot.user_id, error=str(e))
                result.skipped += 1
                continue

            try:
                await self._sweep_user(snapshot.user_id, today, result)
            except Exception as e:
                logger.exception("Reminder sweep failed for user %s", snapshot.user_id)
                self.json_logger.log("reminder_failed", user_id=snapshot.user_id, error=str(e))
                result.failed += 1

        self.json_logger.log(
            "sweep_complete",
            day=today.isoformat(),
            sent=result.sent,
            skipped=result.skipped,
            failed=result.failed,
        )
        return result

    async def _sweep_user(self, user_id: str, today: date, result: SweepResult) -> None:
        async with self.sessions.locked(user_id):
            # Re-read under the lock; the snapshot may be stale
            record = await self.sessions.load(user_id)
            if record.child_birth_date is None:
                return

            # Eligibility is decided once, before the marker moves to today
            for due_date, vaccines in sorted(self.due_reminders(record, today).items()):
                message = self.format_reminder(record.language, due_date, vaccines)
                names = [v.name for v in vaccines]

                delivered = await self.messenger.send_text(user_id, message)
                self.json_logger.log_reminder(
                    user_id,
                    names,
                    due_date.isoformat(),
                    sent=delivered,
                    language=record.language,
                )
                if not delivered:
                    logger.error("Failed to send reminder to %s for %s", user_id, ", ".join(names))
                    result.failed += 1
                    continue

                record.last_reminder_sent = today
                await self.sessions.save(record)
                result.sent += 1
                logger.info(
                    "Reminder sent to %s for %s due on %s",
                    user_id,
                    ", ".join(names),
                    due_date.isoformat(),
                )
