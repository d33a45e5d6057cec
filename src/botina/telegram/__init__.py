"""Telegram transport."""

from .bot import TelegramBot, TelegramMessenger, run_reminder_sweep, run_telegram_bot

__all__ = ["TelegramBot", "TelegramMessenger", "run_reminder_sweep", "run_telegram_bot"]
