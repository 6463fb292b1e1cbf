"""Diary manager - cached entry access, saving and tag collections for one owner."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date

from .core.catalog import TagLocationCatalog
from .core.dates import normalize_date_key, parse_date_key
from .core.tags import DEFAULT_MARKER, END_OF_CONTENT, content_slice
from .errors import NotAuthenticated
from .ports.entry_store import EntryStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiaryEntry:
    """The entry for one date. ``exists`` is False when nothing was saved yet."""

    date: str
    content: str
    exists: bool = True

    @classmethod
    def placeholder(cls, date_key: str) -> "DiaryEntry":
        return cls(date=date_key, content="", exists=False)


@dataclass(frozen=True)
class TagSection:
    """Text under one tag marker on one date."""

    date: str
    content: str


class DiaryManager:
    """
    Owner-scoped access to diary entries.

    Keeps an in-memory cache of fetched entries (including "no entry yet")
    and a tag catalog that is updated locally on every fetch and save.
    Construct one per session and bind an owner with set_owner() before use.
    """

    def __init__(
        self,
        store: EntryStore,
        owner: str | None = None,
        marker: str = DEFAULT_MARKER,
    ):
        self.store = store
        self.catalog = TagLocationCatalog(marker)
        self._owner: str | None = None
        self._cache: dict[str, DiaryEntry] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        # Bumped on owner change so in-flight fetches don't repopulate the cache.
        self._generation = 0
        if owner:
            self.set_owner(owner)

    @property
    def owner(self) -> str | None:
        return self._owner

    def set_owner(self, owner: str | None) -> None:
        """Bind subsequent operations to an owner, discarding the previous owner's state."""
        if owner == self._owner:
            return
        self._owner = owner
        self._generation += 1
        self._cache.clear()
        self._locks.clear()
        self.catalog.clear()
        logger.info(f"Diary owner set to {owner!r}")

    def _require_owner(self) -> str:
        if not self._owner:
            raise NotAuthenticated("No owner bound. Call set_owner() first.")
        return self._owner

    def _lock_for(self, date_key: str) -> asyncio.Lock:
        lock = self._locks.get(date_key)
        if lock is None:
            lock = self._locks[date_key] = asyncio.Lock()
        return lock

    def cached(self, target: date | str) -> DiaryEntry | None:
        """Return the cached entry for a date without touching the store."""
        return self._cache.get(normalize_date_key(target))

    async def fetch_entry(self, target: date | str) -> DiaryEntry:
        """Get the entry for a date, from cache or the store."""
        date_key = normalize_date_key(target)
        owner = self._require_owner()

        async with self._lock_for(date_key):
            entry = self._cache.get(date_key)
            if entry is not None:
                logger.debug(f"Cache hit for {date_key}")
                return entry

            generation = self._generation
            logger.debug(f"Cache miss for {date_key}, fetching from store")
            content = await self.store.get(owner, date_key)

            if content is None:
                entry = DiaryEntry.placeholder(date_key)
            else:
                entry = DiaryEntry(date=date_key, content=content)

            if generation != self._generation:
                # Owner changed while the store call was in flight.
                return entry

            self._cache[date_key] = entry
            if entry.exists:
                self.catalog.rebuild_for_date(date_key, entry.content)
            return entry

    async def save_entry(self, target: date | str, content: str) -> DiaryEntry:
        """Overwrite the entry for a date. The catalog reflects it on return."""
        date_key = normalize_date_key(target)
        owner = self._require_owner()

        async with self._lock_for(date_key):
            generation = self._generation
            await self.store.put(owner, date_key, content)
            entry = DiaryEntry(date=date_key, content=content)
            if generation == self._generation:
                self._cache[date_key] = entry
                self.catalog.rebuild_for_date(date_key, content)
            logger.debug(f"Saved entry for {date_key} ({len(content)} chars)")
            return entry

    async def append_to_entry(self, target: date | str, text: str) -> str:
        """Return the date's content with ``text`` added as a new line. Does not save."""
        entry = await self.fetch_entry(target)
        if not entry.content:
            return text
        return f"{entry.content}\n{text}"

    @staticmethod
    def get_content_slice(content: str, start_line: int, end_line: int | None = END_OF_CONTENT) -> str:
        """Lines [start_line, end_line) of content; END_OF_CONTENT reads to the end."""
        return content_slice(content, start_line, end_line)

    async def load_catalog(self) -> int:
        """Fetch every entry the owner has so the catalog covers all dates.

        Returns the number of dates scanned.
        """
        owner = self._require_owner()
        date_keys = await self.store.list_dates(owner)
        await asyncio.gather(*(self.fetch_entry(key) for key in date_keys))
        logger.info(f"Catalog loaded from {len(date_keys)} entries, {len(self.catalog)} tags")
        return len(date_keys)

    def tag_names(self) -> list[str]:
        return self.catalog.tag_names()

    def tag_counts(self) -> dict[str, int]:
        return self.catalog.tag_counts()

    async def resolve_tag_collection(self, tag: str) -> list[TagSection]:
        """All sections tagged ``tag``, oldest date first."""
        self._require_owner()
        spans = self.catalog.spans_for_tag(tag)

        async def resolve(span):
            entry = await self.fetch_entry(span.date)
            return span, TagSection(
                date=span.date,
                content=self.get_content_slice(entry.content, span.body_start, span.next_tag_line),
            )

        resolved = await asyncio.gather(*(resolve(span) for span in spans))
        resolved.sort(key=lambda pair: (parse_date_key(pair[0].date), pair[0].tag_line))
        return [section for _, section in resolved]
