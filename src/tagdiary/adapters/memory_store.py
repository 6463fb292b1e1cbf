"""In-memory entry storage adapter."""

from tagdiary.core.dates import normalize_date_key, sort_date_keys
from tagdiary.errors import NotAuthenticated


class InMemoryEntryStore:
    """
    Process-local entry storage.

    Implements EntryStore protocol. Nothing survives the process; useful for
    tests and throwaway sessions. Records every put in ``writes``.
    """

    def __init__(self, entries: dict[str, dict[str, str]] | None = None):
        self._entries: dict[str, dict[str, str]] = {
            owner: {normalize_date_key(k): v for k, v in by_date.items()}
            for owner, by_date in (entries or {}).items()
        }
        self.writes: list[tuple[str, str, str]] = []

    @staticmethod
    def _check_owner(owner: str) -> None:
        if not owner:
            raise NotAuthenticated("No owner bound to the entry store.")

    async def get(self, owner: str, date_key: str) -> str | None:
        self._check_owner(owner)
        return self._entries.get(owner, {}).get(normalize_date_key(date_key))

    async def put(self, owner: str, date_key: str, content: str) -> None:
        self._check_owner(owner)
        key = normalize_date_key(date_key)
        self._entries.setdefault(owner, {})[key] = content
        self.writes.append((owner, key, content))

    async def list_dates(self, owner: str) -> list[str]:
        self._check_owner(owner)
        return sort_date_keys(self._entries.get(owner, {}))
