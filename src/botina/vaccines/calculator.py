"""Due-date arithmetic for vaccine doses.

Month and year offsets are stored in weeks in the reference schedule, so
they are converted back with fixed average lengths and then applied as
whole calendar months. The conversion is an approximation by nature; it is
kept identical everywhere so reminders and the displayed schedule agree.
"""

import calendar
import math
from datetime import date, timedelta

from .models import OffsetType, VaccineDefinition

WEEKS_PER_MONTH = 365.25 / 12 / 7
WEEKS_PER_YEAR = 52.177
DATE_DISPLAY_FORMAT = "%d %B %Y"


def parse_date(value: date | str) -> date | None:
    """Parse an ISO calendar date, returning None when invalid."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        return None


def format_display_date(value: date) -> str:
    """Format a date for messages, e.g. "14 May 2023"."""
    return value.strftime(DATE_DISPLAY_FORMAT)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def compute_due_date(birth_date: date | str, vaccine: VaccineDefinition) -> date | None:
    """Compute the calendar date on which a dose is due.

    Args:
        birth_date: Child's birth date, as a date or 'YYYY-MM-DD' string.
        vaccine: The dose definition.

    Returns:
        The due date, or None if the birth date is invalid or the offset
        type is not recognized.
    """
    born = parse_date(birth_date)
    if born is None:
        return None

    offset_type = vaccine.offset_type
    weeks = vaccine.age_in_weeks

    if offset_type == OffsetType.BIRTH:
        return born
    if offset_type == OffsetType.WEEKS:
        return born + timedelta(weeks=weeks)
    if offset_type == OffsetType.MONTHS:
        return add_months(born, _round_half_up(weeks / WEEKS_PER_MONTH))
    if offset_type == OffsetType.YEARS:
        return add_months(born, _round_half_up(weeks / WEEKS_PER_YEAR * 12))
    return None


def vaccine_schedule(
    birth_date: date | str,
    vaccines: list[VaccineDefinition],
) -> list[tuple[date, VaccineDefinition]]:
    """Build a child's full schedule, sorted by due date.

    Definitions whose due date cannot be computed are left out.
    """
    schedule = []
    for vaccine in vaccines:
        due = compute_due_date(birth_date, vaccine)
        if due is not None:
            schedule.append((due, vaccine))
    schedule.sort(key=lambda item: item[0])
    return schedule
