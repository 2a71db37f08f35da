"""Storage layer for URL shortener."""

from .base import URLStorageBase, StorageState
from .memory import MemoryStorage
from .file import FileStorage
from .postgres import PostgresStorage
from .models import Record
from .factory import create_storage

__all__ = [
    "URLStorageBase",
    "StorageState",
    "MemoryStorage",
    "FileStorage",
    "PostgresStorage",
    "Record",
    "create_storage",
]
