"""Sister Botina entry point."""

import argparse
import asyncio
import logging
import sys

from dotenv import find_dotenv, load_dotenv

from .content import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES, ContentTable
from .errors import TransportConnectError
from .vaccines import format_display_date, load_vaccines, parse_date, vaccine_schedule


def cmd_bot(args: argparse.Namespace) -> int:
    """Run the Telegram bot."""
    from .telegram import run_telegram_bot

    try:
        asyncio.run(run_telegram_bot())
    except KeyboardInterrupt:
        pass
    except TransportConnectError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    return 0


def cmd_sweep(args: argparse.Namespace) -> int:
    """Run one reminder sweep immediately."""
    from .telegram import run_reminder_sweep

    day = None
    if args.date:
        day = parse_date(args.date)
        if day is None:
            print(f"Invalid date: {args.date}. Use YYYY-MM-DD.", file=sys.stderr)
            return 1

    try:
        result = asyncio.run(run_reminder_sweep(day=day))
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    print(f"Sent: {result.sent}  Skipped: {result.skipped}  Failed: {result.failed}")
    return 0


def cmd_schedule(args: argparse.Namespace) -> int:
    """Print a child's vaccine schedule."""
    birth_date = parse_date(args.birth_date)
    if birth_date is None:
        print(f"Invalid date: {args.birth_date}. Use YYYY-MM-DD.", file=sys.stderr)
        return 1

    content = ContentTable.load()
    print(content.render(args.lang, "schedule_intro", birthdate=birth_date.isoformat()))
    for due, vaccine in vaccine_schedule(birth_date, load_vaccines()):
        print(
            content.render(
                args.lang,
                "schedule_line",
                vaccine_date=format_display_date(due),
                vaccine_name=vaccine.name,
            )
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="botina",
        description="Sister Botina immunization assistant",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    bot_parser = subparsers.add_parser("bot", help="Run the Telegram bot")
    bot_parser.set_defaults(func=cmd_bot)

    sweep_parser = subparsers.add_parser("sweep", help="Send today's reminders now")
    sweep_parser.add_argument("--date", help="Day to sweep for (YYYY-MM-DD), default today")
    sweep_parser.set_defaults(func=cmd_sweep)

    schedule_parser = subparsers.add_parser("schedule", help="Show a child's vaccine schedule")
    schedule_parser.add_argument("birth_date", help="Birth date (YYYY-MM-DD)")
    schedule_parser.add_argument(
        "--lang",
        choices=SUPPORTED_LANGUAGES,
        default=DEFAULT_LANGUAGE,
        help="Output language",
    )
    schedule_parser.set_defaults(func=cmd_schedule)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    load_dotenv(find_dotenv(usecwd=True))
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
