"""Vaccination reminders."""

from .engine import ReminderEngine, SweepResult, check_user_data, should_remind

__all__ = ["ReminderEngine", "SweepResult", "check_user_data", "should_remind"]
