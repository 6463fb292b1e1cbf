"""Shared workflow layer between CLI and Telegram.

Builds stores, managers and editing sessions from configuration so both
front-ends wire the core the same way.
"""

import logging
from datetime import date
from pathlib import Path

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .adapters.file_store import FileEntryStore
from .adapters.http_store import HttpEntryStore
from .adapters.memory_store import InMemoryEntryStore
from .autosave import AutosaveScheduler
from .config import DATA_DIR, Config
from .errors import NotAuthenticated, StoreUnavailable
from .manager import DiaryManager, TagSection
from .ports.entry_store import EntryStore

logger = logging.getLogger(__name__)


def get_store(config: Config) -> EntryStore:
    """Resolve the entry store from config."""
    match config.store_backend:
        case "http":
            if not config.store_url:
                raise StoreUnavailable("STORE_URL not configured for the http store backend.")
            return HttpEntryStore(config.store_url, token=config.store_token, timeout=config.store_timeout)
        case "memory":
            return InMemoryEntryStore()
        case _:
            if config.entries_dir:
                return FileEntryStore(Path(config.entries_dir).expanduser())
            return FileEntryStore(DATA_DIR / "entries")


async def build_manager(config: Config, owner: str | None = None, store: EntryStore | None = None) -> DiaryManager:
    """Create a manager bound to ``owner`` (or the configured owner) with its catalog loaded."""
    owner = owner or config.owner
    if not owner:
        raise NotAuthenticated("No owner configured. Set OWNER in tagdiary.conf or pass --owner.")

    manager = DiaryManager(store or get_store(config), owner=owner, marker=config.tag_marker)
    await manager.load_catalog()
    return manager


async def open_session(
    manager: DiaryManager,
    scheduler: AsyncIOScheduler,
    config: Config,
    target: date | str,
    session_id: str | None = None,
) -> AutosaveScheduler:
    """Start an editing session on ``target`` with its entry already fetched."""
    session = AutosaveScheduler(
        manager,
        scheduler,
        current_date=target,
        cooldown=config.autosave_cooldown,
        session_id=session_id,
    )
    session.mark_loaded(await manager.fetch_entry(target))
    return session


def format_collection(tag: str, sections: list[TagSection], marker: str = "#") -> str:
    """Render a tag collection as markdown."""
    if not sections:
        return f"No entries tagged {marker}{tag}."

    lines = [f"# Collection for {marker}{tag}"]
    for section in sections:
        lines.append("")
        lines.append(f"## {section.date}")
        lines.append("")
        lines.append(section.content.strip() or "(empty)")
    return "\n".join(lines)
