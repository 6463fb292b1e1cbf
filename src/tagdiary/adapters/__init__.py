"""Adapters - I/O implementations of ports."""

from .file_store import FileEntryStore
from .http_store import HttpEntryStore
from .memory_store import InMemoryEntryStore

__all__ = [
    "FileEntryStore",
    "HttpEntryStore",
    "InMemoryEntryStore",
]
