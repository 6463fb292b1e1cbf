"""tagdiary Telegram Bot."""

import logging

from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    MessageHandler,
    filters,
)
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .config import Config, load_config
from .telegram_handlers import (
    date_handler,
    help_handler,
    save_handler,
    show_handler,
    start_handler,
    status_handler,
    tag_handler,
    tags_handler,
    text_handler,
    today_handler,
)
from .workflows import get_store

logger = logging.getLogger(__name__)


class AuthFilter(filters.BaseFilter):
    """Filter to only allow authorized users."""

    def __init__(self, allowed_users: list[int]):
        super().__init__()
        self.allowed_users = allowed_users

    def check_update(self, update: Update) -> bool:
        if not self.allowed_users:
            return True  # No restriction if no users configured
        user = update.effective_user
        if user is None:
            return False
        return user.id in self.allowed_users


def create_application(config: Config | None = None) -> Application:
    """Create and configure the Telegram bot application."""
    if config is None:
        config = load_config()

    if not config.telegram_bot_token:
        raise ValueError(
            "TELEGRAM_BOT_TOKEN not configured. "
            "Get a token from @BotFather on Telegram and add it to tagdiary.conf"
        )

    app = Application.builder().token(config.telegram_bot_token).build()
    app.bot_data["config"] = config
    app.bot_data["store"] = get_store(config)
    app.bot_data["scheduler"] = AsyncIOScheduler(timezone=config.timezone or "America/Toronto")
    app.bot_data["sessions"] = {}

    auth_filter = AuthFilter(config.telegram_allowed_users)

    commands = {
        "start": start_handler,
        "help": help_handler,
        "today": today_handler,
        "date": date_handler,
        "show": show_handler,
        "save": save_handler,
        "status": status_handler,
        "tags": tags_handler,
        "tag": tag_handler,
    }
    for name, handler in commands.items():
        app.add_handler(CommandHandler(name, handler, filters=auth_filter))

    app.add_handler(MessageHandler(auth_filter & filters.TEXT & ~filters.COMMAND, text_handler))

    # Handle unauthorized access attempts
    async def unauthorized_handler(update: Update, context):
        user = update.effective_user
        logger.warning(f"Unauthorized access attempt from user {user.id} ({user.username})")
        await update.message.reply_text(
            "Unauthorized. This diary is private.\n"
            "If you're the owner, add your Telegram user ID to TELEGRAM_ALLOWED_USERS in tagdiary.conf"
        )

    if config.telegram_allowed_users:
        app.add_handler(MessageHandler(~auth_filter & filters.ALL, unauthorized_handler))

    return app


async def flush_all_sessions(application: Application) -> None:
    """Save every session's pending edits before shutdown."""
    for user_id, session in application.bot_data.get("sessions", {}).items():
        try:
            await session.flush()
        except Exception as e:
            logger.error(f"Failed to save pending edits for user {user_id}: {e}")
        session.close()


def run_bot():
    """Run the Telegram bot."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )

    config = load_config()
    app = create_application(config)
    scheduler: AsyncIOScheduler = app.bot_data["scheduler"]

    async def post_init(application: Application) -> None:
        """Start scheduler after event loop is running."""
        scheduler.start()
        logger.info("Autosave scheduler started")

    async def post_shutdown(application: Application) -> None:
        await flush_all_sessions(application)
        scheduler.shutdown(wait=False)
        logger.info("Autosave scheduler stopped")

    app.post_init = post_init
    app.post_shutdown = post_shutdown

    if config.telegram_allowed_users:
        logger.info(f"Bot authorized for users: {config.telegram_allowed_users}")
    else:
        logger.warning("No TELEGRAM_ALLOWED_USERS configured - bot is open to anyone!")

    logger.info("Starting tagdiary Telegram bot...")

    app.run_polling(allowed_updates=Update.ALL_TYPES)
