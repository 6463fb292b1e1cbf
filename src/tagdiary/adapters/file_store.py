"""File-based entry storage adapter."""

import asyncio
import logging
from pathlib import Path

from tagdiary.core.dates import is_valid_date_key, normalize_date_key, sort_date_keys
from tagdiary.errors import NotAuthenticated, StoreUnavailable

logger = logging.getLogger(__name__)


class FileEntryStore:
    """
    File-based entry storage.

    Implements EntryStore protocol. Each owner gets a directory and each day
    gets a markdown file named after its date key.
    """

    def __init__(self, entries_dir: Path | str):
        self.entries_dir = Path(entries_dir).expanduser()
        self.entries_dir.mkdir(parents=True, exist_ok=True)

    def _owner_dir(self, owner: str) -> Path:
        """Get the directory holding an owner's entries."""
        if not owner or not owner.strip():
            raise NotAuthenticated("No owner bound to the entry store.")
        if "/" in owner or "\\" in owner or owner in (".", ".."):
            raise NotAuthenticated(f"Invalid owner id: {owner!r}")
        return self.entries_dir / owner

    def _path_for_date(self, owner: str, date_key: str) -> Path:
        """Get the file path for a given owner and date."""
        return self._owner_dir(owner) / f"{normalize_date_key(date_key)}.md"

    async def get(self, owner: str, date_key: str) -> str | None:
        """Read entry content. Returns None if not found."""
        path = self._path_for_date(owner, date_key)
        return await asyncio.to_thread(self._read, path)

    async def put(self, owner: str, date_key: str, content: str) -> None:
        """Write/overwrite entry content."""
        path = self._path_for_date(owner, date_key)
        await asyncio.to_thread(self._write, path, content)

    async def list_dates(self, owner: str) -> list[str]:
        """List date keys with entries, oldest first."""
        owner_dir = self._owner_dir(owner)
        return await asyncio.to_thread(self._list, owner_dir)

    def _read(self, path: Path) -> str | None:
        try:
            if not path.exists():
                return None
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StoreUnavailable(f"Failed to read {path}: {e}") from e

    def _write(self, path: Path, content: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Write to a sibling then rename so readers never see a partial entry.
            tmp_path = path.with_suffix(".md.tmp")
            tmp_path.write_text(content, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            raise StoreUnavailable(f"Failed to write {path}: {e}") from e
        logger.debug(f"Wrote {len(content)} chars to {path}")

    def _list(self, owner_dir: Path) -> list[str]:
        if not owner_dir.exists():
            return []
        try:
            keys = [path.stem for path in owner_dir.glob("*.md") if is_valid_date_key(path.stem)]
        except OSError as e:
            raise StoreUnavailable(f"Failed to list {owner_dir}: {e}") from e
        return sort_date_keys(keys)
