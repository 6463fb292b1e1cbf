"""Telegram command handlers."""

import logging
from datetime import date

from telegram import Update
from telegram.ext import ContextTypes

from .autosave import AutosaveScheduler
from .core.dates import offset_date, parse_date_key, resolve_date, today_in
from .errors import DiaryError
from .telegram_format import format_entry, send_markdown
from .workflows import build_manager, format_collection, open_session

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "*tagdiary Commands*\n\n"
    "Send any text to add a line to the current day.\n"
    "Start a line with #tag to file what follows under that tag.\n\n"
    "/today - Switch to today's entry\n"
    "/date YYYY-MM-DD|prev|next - Switch day\n"
    "/show - Show the current entry\n"
    "/save - Save now\n"
    "/status - Saved or unsaved?\n"
    "/tags - List your tags\n"
    "/tag NAME - Everything filed under a tag\n"
    "/help - Show all commands"
)


async def get_session(context: ContextTypes.DEFAULT_TYPE, user_id: int) -> AutosaveScheduler:
    """Get or create the editing session for a Telegram user.

    Each user is their own diary owner. The draft in user_data plays the
    role of the editor text.
    """
    sessions: dict[int, AutosaveScheduler] = context.bot_data.setdefault("sessions", {})
    session = sessions.get(user_id)
    if session is not None:
        return session

    config = context.bot_data["config"]
    manager = await build_manager(config, owner=str(user_id), store=context.bot_data["store"])
    session = await open_session(
        manager,
        context.bot_data["scheduler"],
        config,
        today_in(config.timezone),
        session_id=str(user_id),
    )
    context.user_data["draft"] = (await manager.fetch_entry(session.current_date)).content
    sessions[user_id] = session
    logger.info(f"Opened diary session for user {user_id}")
    return session


async def _reply_error(update: Update, e: DiaryError):
    logger.warning(f"Diary error for user {update.effective_user.id}: {e}")
    await update.message.reply_text(f"Error: {e}")


# ============== Simple Commands ==============


async def start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /start command."""
    await update.message.reply_text(
        "Hey! I'm your diary.\n\n"
        "Just send me text and I'll add it to today's entry. "
        "Lines starting with #tag group what follows under that tag.\n\n"
        "/help - Show all commands"
    )


async def help_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /help command."""
    await update.message.reply_text(HELP_TEXT, parse_mode="Markdown")


# ============== Editing ==============


async def text_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Append a message to the current day's draft and schedule an autosave."""
    try:
        session = await get_session(context, update.effective_user.id)
    except DiaryError as e:
        await _reply_error(update, e)
        return

    text = update.message.text
    draft = context.user_data.get("draft", "")
    draft = f"{draft}\n{text}" if draft else text
    context.user_data["draft"] = draft
    session.on_edit(draft)


async def save_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /save command - force a save of the current draft."""
    try:
        session = await get_session(context, update.effective_user.id)
        await session.flush()
    except DiaryError as e:
        await _reply_error(update, e)
        return
    await update.message.reply_text(f"Saved {session.current_date}.")


async def status_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /status command."""
    try:
        session = await get_session(context, update.effective_user.id)
    except DiaryError as e:
        await _reply_error(update, e)
        return
    status = "saved" if session.saved else f"unsaved ({session.state.value})"
    await update.message.reply_text(f"{session.current_date}: {status}")


async def show_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /show command - show the current draft."""
    try:
        session = await get_session(context, update.effective_user.id)
    except DiaryError as e:
        await _reply_error(update, e)
        return
    draft = context.user_data.get("draft", "")
    await send_markdown(update.message, format_entry(session.current_date, draft, session.saved))


# ============== Navigation ==============


async def _switch_date(update: Update, context: ContextTypes.DEFAULT_TYPE, target: date):
    try:
        session = await get_session(context, update.effective_user.id)
        entry = await session.change_date(target)
    except DiaryError as e:
        await _reply_error(update, e)
        return
    context.user_data["draft"] = entry.content
    await send_markdown(update.message, format_entry(entry.date, entry.content))


async def today_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /today command."""
    await _switch_date(update, context, today_in(context.bot_data["config"].timezone))


async def date_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /date command - /date 2025-01-15, /date prev, /date next."""
    arg = context.args[0].lower() if context.args else "today"
    try:
        session = await get_session(context, update.effective_user.id)
        current = parse_date_key(session.current_date)
        if arg in ("prev", "next"):
            target = offset_date(current, -1 if arg == "prev" else 1)
        else:
            target = resolve_date(arg, as_of=today_in(context.bot_data["config"].timezone))
    except DiaryError as e:
        await _reply_error(update, e)
        return
    await _switch_date(update, context, target)


# ============== Tags ==============


async def tags_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /tags command."""
    try:
        session = await get_session(context, update.effective_user.id)
    except DiaryError as e:
        await _reply_error(update, e)
        return

    counts = session.manager.tag_counts()
    if not counts:
        await update.message.reply_text("No tags yet.")
        return

    marker = context.bot_data["config"].tag_marker
    lines = [f"{marker}{tag} ({count})" for tag, count in counts.items()]
    await update.message.reply_text("\n".join(lines))


async def tag_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /tag NAME command - show a tag collection."""
    marker = context.bot_data["config"].tag_marker
    if not context.args:
        await update.message.reply_text("Usage: /tag NAME")
        return
    tag = context.args[0].removeprefix(marker)

    try:
        session = await get_session(context, update.effective_user.id)
        sections = await session.manager.resolve_tag_collection(tag)
    except DiaryError as e:
        await _reply_error(update, e)
        return

    await send_markdown(update.message, format_collection(tag, sections, marker))
