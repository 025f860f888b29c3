"""Backing-store module."""

from .firebase_store import FirebaseStore
from .sqlite_store import SqliteStore
from .store import (
    IStore,
    OnChange,
    Snapshot,
    StoreError,
    Unsubscribe,
    is_related,
    join_path,
    normalize_path,
)

__all__ = [
    "IStore",
    "OnChange",
    "Snapshot",
    "StoreError",
    "Unsubscribe",
    "SqliteStore",
    "FirebaseStore",
    "is_related",
    "join_path",
    "normalize_path",
]
