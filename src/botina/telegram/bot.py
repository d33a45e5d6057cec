"""Telegram transport for Sister Botina."""

import asyncio
import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from groq import AsyncGroq
from telegram import Bot, Update
from telegram.constants import ChatType
from telegram.error import InvalidToken, NetworkError, TelegramError
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from ..config import BotConfig, config_from_env
from ..content import ContentTable
from ..conversation.handler import ConversationHandler
from ..errors import TransportConnectError
from ..health import HealthServer
from ..llm import GroqLLMClient, LLMClient
from ..logging import get_logger
from ..reminders import ReminderEngine, SweepResult
from ..session import SessionManager
from ..store import UserStore, build_user_store
from ..vaccines import VaccineDefinition, load_vaccines

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 4096


def truncate_message(text: str, max_length: int = MAX_MESSAGE_LENGTH) -> str:
    """Truncate message to fit Telegram limits."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 20] + "\n... [truncated]"


def should_process(
    chat_type: str | None,
    sender_id: int | None,
    bot_id: int | None,
    sender_is_bot: bool = False,
) -> bool:
    """Only direct messages from people reach the conversation core.

    Group chats, channels, other bots and the bot's own messages are ignored.
    """
    if chat_type != ChatType.PRIVATE:
        return False
    if sender_id is None or sender_is_bot:
        return False
    return sender_id != bot_id


class TelegramMessenger:
    """Messenger implementation on top of a telegram.Bot."""

    def __init__(self, bot: Bot) -> None:
        self.bot = bot
        self.json_logger = get_logger()

    async def send_text(self, user_id: str, text: str) -> bool:
        try:
            await self.bot.send_message(chat_id=user_id, text=truncate_message(text))
        except TelegramError as e:
            logger.warning("Failed to send message to %s: %s", user_id, e)
            self.json_logger.log("send_failed", user_id=user_id, error=str(e))
            return False
        return True


async def initialize_with_retry(
    app: Application,
    attempts: int = 5,
    backoff: float = 5.0,
) -> None:
    """Initialize the Telegram application, retrying network failures.

    Raises:
        TransportConnectError: The token is rejected, or every attempt failed.
    """
    for attempt in range(1, attempts + 1):
        try:
            await app.initialize()
            return
        except InvalidToken as e:
            raise TransportConnectError(f"Telegram rejected the bot token: {e}") from e
        except NetworkError as e:
            logger.warning("Telegram connect attempt %d/%d failed: %s", attempt, attempts, e)
            if attempt < attempts:
                await asyncio.sleep(backoff)

    raise TransportConnectError(f"Could not connect to Telegram after {attempts} attempts")


class TelegramBot:
    """Telegram bot for Sister Botina."""

    def __init__(
        self,
        config: BotConfig | None = None,
        token: str | None = None,
        store: UserStore | None = None,
        llm: LLMClient | None = None,
        content: ContentTable | None = None,
        vaccines: list[VaccineDefinition] | None = None,
    ) -> None:
        self.config = config or config_from_env()
        self.token = token or self.config.telegram_token
        if not self.token:
            raise ValueError("TELEGRAM_TOKEN not set")

        self.timezone = ZoneInfo(self.config.reminder_timezone)
        self.store = store or build_user_store(self.config)
        self.sessions = SessionManager(self.store, history_cap=self.config.history_cap)
        self.content = content or ContentTable.load()
        self.vaccines = vaccines if vaccines is not None else load_vaccines()
        self.llm = llm or GroqLLMClient(
            AsyncGroq(api_key=self.config.groq_api_key),
            model=self.config.model,
        )

        self.json_logger = get_logger()
        self.handler: ConversationHandler | None = None
        self.reminders: ReminderEngine | None = None
        self._app: Application | None = None
        self._health_server: HealthServer | None = None

    def today(self) -> date:
        """Current day in the configured timezone."""
        return datetime.now(self.timezone).date()

    def _get_user_id(self, update: Update) -> str:
        """Get the chat id as string from update."""
        assert update.effective_chat is not None
        return str(update.effective_chat.id)

    def _is_direct(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> bool:
        chat = update.effective_chat
        user = update.effective_user
        return should_process(
            chat.type if chat else None,
            user.id if user else None,
            context.bot.id,
            user.is_bot if user else False,
        )

    async def _dispatch(
        self,
        update: Update,
        context: ContextTypes.DEFAULT_TYPE,
        text: str,
    ) -> None:
        if not self._is_direct(update, context):
            return
        assert self.handler is not None

        user_id = self._get_user_id(update)
        try:
            await self.handler.handle(user_id, text)
        except Exception as e:
            logger.exception("Error processing message")
            self.json_logger.log("telegram_error", user_id=user_id, error=str(e))

    async def _handle_start(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Handle /start command."""
        # /start carries no text of its own; answer it like a greeting
        await self._dispatch(update, context, "hello")

    async def _handle_menu(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Handle /menu command."""
        await self._dispatch(update, context, "menu")

    async def _handle_message(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Handle incoming messages."""
        if update.message is None or update.message.text is None:
            return
        await self._dispatch(update, context, update.message.text)

    async def _run_reminders(self, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Daily job callback."""
        assert self.reminders is not None
        try:
            result = await self.reminders.run_daily_sweep(datetime.now(self.timezone))
        except Exception as e:
            logger.exception("Reminder sweep failed")
            self.json_logger.log("sweep_error", error=str(e))
            return
        logger.info(
            "Reminder sweep done: %d sent, %d skipped, %d failed",
            result.sent,
            result.skipped,
            result.failed,
        )

    async def _post_shutdown(self, application: Application) -> None:
        """Called after Application.shutdown()."""
        await self.store.close()

    def build_app(self) -> Application:
        """Build the Telegram application and wire the conversation core."""
        self._app = (
            Application.builder()
            .token(self.token)
            .concurrent_updates(True)
            .post_shutdown(self._post_shutdown)
            .build()
        )

        messenger = TelegramMessenger(self._app.bot)
        self.handler = ConversationHandler(
            self.sessions,
            messenger,
            self.llm,
            self.content,
            self.vaccines,
            entry_mode=self.config.entry_mode,
            history_window=self.config.history_window,
            birthdate_lookback_years=self.config.birthdate_lookback_years,
            today=self.today,
        )
        self.reminders = ReminderEngine(self.sessions, messenger, self.content, self.vaccines)

        # Add handlers
        self._app.add_handler(CommandHandler("start", self._handle_start))
        self._app.add_handler(CommandHandler("menu", self._handle_menu))
        self._app.add_handler(
            MessageHandler(filters.TEXT & ~filters.COMMAND, self._handle_message)
        )

        # Daily reminder trigger
        if self._app.job_queue is None:
            logger.warning("JobQueue unavailable, daily reminders disabled")
        else:
            self._app.job_queue.run_daily(
                self._run_reminders,
                time=self.config.reminder_time.replace(tzinfo=self.timezone),
                name="daily_reminders",
            )

        return self._app

    async def start(self) -> None:
        """Start the bot."""
        app = self.build_app()

        logger.info("Connecting to Telegram...")
        await initialize_with_retry(
            app,
            attempts=self.config.connect_retries,
            backoff=self.config.connect_backoff,
        )

        if self.config.health_port:
            self._health_server = HealthServer(port=self.config.health_port)
            await self._health_server.start()

        logger.info("Starting Telegram bot...")
        await app.start()
        await app.updater.start_polling()  # type: ignore

    async def stop(self) -> None:
        """Stop the bot."""
        if self._health_server is not None:
            await self._health_server.stop()
            self._health_server = None

        if self._app:
            if self._app.updater and self._app.updater.running:
                await self._app.updater.stop()
            if self._app.running:
                await self._app.stop()
            await self._app.shutdown()


async def run_telegram_bot(config: BotConfig | None = None) -> None:
    """Run the Telegram bot until cancelled."""
    from ..logging import configure_logger

    config = config or config_from_env()
    configure_logger(config.log_dir)

    if not config.telegram_token:
        print("❌ Error: TELEGRAM_TOKEN environment variable not set")
        return

    bot = TelegramBot(config)
    try:
        await bot.start()
        # Keep running
        await asyncio.Event().wait()
    finally:
        await bot.stop()


async def run_reminder_sweep(
    config: BotConfig | None = None,
    day: date | None = None,
) -> SweepResult:
    """Run one reminder sweep now, outside the daily schedule."""
    from ..logging import configure_logger

    config = config or config_from_env()
    configure_logger(config.log_dir)
    if not config.telegram_token:
        raise ValueError("TELEGRAM_TOKEN not set")

    store = build_user_store(config)
    sessions = SessionManager(store, history_cap=config.history_cap)
    try:
        async with Bot(config.telegram_token) as bot:
            engine = ReminderEngine(
                sessions, TelegramMessenger(bot), ContentTable.load(), load_vaccines()
            )
            when = day or datetime.now(ZoneInfo(config.reminder_timezone)).date()
            return await engine.run_daily_sweep(when)
    finally:
        await store.close()
