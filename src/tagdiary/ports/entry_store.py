"""Entry storage interface."""

from typing import Protocol


class EntryStore(Protocol):
    """Interface for reading and writing one diary entry per owner and date key."""

    async def get(self, owner: str, date_key: str) -> str | None:
        """Read entry content. Returns None if there is no entry yet."""
        ...

    async def put(self, owner: str, date_key: str, content: str) -> None:
        """Write/overwrite entry content."""
        ...

    async def list_dates(self, owner: str) -> list[str]:
        """List date keys the owner has entries for."""
        ...
