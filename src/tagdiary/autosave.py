"""Debounced autosave for one editing session.

State machine: IDLE -> PENDING -> SAVING -> IDLE.

Every edit re-arms a single one-shot timer job on an APScheduler
AsyncIOScheduler, so only the latest content of a burst of edits is saved.
A forced flush cancels the timer and saves immediately, and is what gates
switching to another date.
"""

import asyncio
import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from enum import Enum

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from .core.dates import normalize_date_key
from .errors import DiaryError
from .manager import DiaryEntry, DiaryManager

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN = 1.0  # seconds


class SaveState(Enum):
    IDLE = "idle"
    PENDING = "pending"
    SAVING = "saving"


class AutosaveScheduler:
    """Coalesces edits for the current date into single debounced saves."""

    def __init__(
        self,
        manager: DiaryManager,
        scheduler: AsyncIOScheduler,
        current_date: date | str,
        cooldown: float = DEFAULT_COOLDOWN,
        session_id: str | None = None,
    ):
        self.manager = manager
        self.scheduler = scheduler
        self.cooldown = cooldown
        self.job_id = f"autosave-{session_id or uuid.uuid4().hex}"
        self._date = normalize_date_key(current_date)
        self._state = SaveState.IDLE
        self._saved = True
        self._pending: tuple[str, str] | None = None
        self._saving: asyncio.Task | None = None
        self._last_saved: dict[str, str] = {}

    @property
    def state(self) -> SaveState:
        return self._state

    @property
    def saved(self) -> bool:
        """False while there are edits that have not reached the store."""
        return self._saved

    @property
    def current_date(self) -> str:
        return self._date

    def mark_loaded(self, entry: DiaryEntry) -> None:
        """Record content known to match the store, so an unchanged flush is a no-op."""
        if entry.exists:
            self._last_saved[entry.date] = entry.content

    def on_edit(self, content: str) -> None:
        """Capture the full current text of the editor for the current date."""
        self._pending = (self._date, content)
        self._saved = False

        if self._state is SaveState.SAVING:
            # Picked up by a fresh PENDING cycle once the in-flight save finishes.
            return

        self._state = SaveState.PENDING
        self._arm_timer()

    def _arm_timer(self) -> None:
        run_date = datetime.now(timezone.utc) + timedelta(seconds=self.cooldown)
        self.scheduler.add_job(
            self._fire,
            DateTrigger(run_date=run_date),
            id=self.job_id,
            replace_existing=True,
            misfire_grace_time=None,
        )
        logger.debug(f"Autosave armed for {self._date} in {self.cooldown}s")

    def _cancel_timer(self) -> None:
        try:
            self.scheduler.remove_job(self.job_id)
        except JobLookupError:
            pass

    async def _fire(self) -> None:
        """Timer callback."""
        if self._saving is not None or self._pending is None:
            return
        try:
            await self._save_pending()
        except DiaryError as e:
            logger.error(f"Autosave for {self._date} failed: {e}")

    async def flush(self) -> None:
        """Save any unsaved edit now. No-op if nothing changed."""
        self._cancel_timer()
        while self._saving is not None:
            await asyncio.shield(self._saving)
            # A new timer may have been armed for edits made during that save.
            self._cancel_timer()
        if self._pending is not None:
            await self._save_pending()

    async def _save_pending(self) -> None:
        date_key, content = self._pending
        if self._last_saved.get(date_key) == content:
            self._pending = None
            self._finish()
            return

        self._pending = None
        self._state = SaveState.SAVING
        self._saving = asyncio.ensure_future(self._save(date_key, content))
        await asyncio.shield(self._saving)

    async def _save(self, date_key: str, content: str) -> None:
        try:
            await self.manager.save_entry(date_key, content)
        except Exception:
            # Keep the content so the next timer or flush retries it.
            if self._pending is None:
                self._pending = (date_key, content)
            else:
                # A newer edit arrived during the save and never armed a timer.
                self._arm_timer()
            self._state = SaveState.PENDING
            self._saved = False
            raise
        else:
            self._last_saved[date_key] = content
            self._finish()
        finally:
            # Cleared before any waiter resumes.
            if self._saving is asyncio.current_task():
                self._saving = None

    def _finish(self) -> None:
        if self._pending is not None:
            self._state = SaveState.PENDING
            self._arm_timer()
        else:
            self._state = SaveState.IDLE
            self._saved = True

    async def change_date(self, target: date | str) -> DiaryEntry:
        """Flush the current date, then fetch and switch to ``target``."""
        await self.flush()
        entry = await self.manager.fetch_entry(target)
        self._date = entry.date
        self.mark_loaded(entry)
        logger.debug(f"Editing session moved to {self._date}")
        return entry

    def close(self) -> None:
        """Cancel the pending timer. In-flight saves still complete."""
        self._cancel_timer()
