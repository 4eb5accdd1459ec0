"""
SubTrack Backend: Storage Package
=================================

What:  Subscription persistence behind one abstract interface.
How:   build_storage() picks the backend from settings.env:
           dev  → SqliteStorage   (aiosqlite, file at storage_path)
           prod → PostgresStorage (asyncpg, retried first connection)
"""

from subtrack.config import DEV_ENV, PROD_ENV, Settings
from subtrack.storage.base import SubscriptionStorage
from subtrack.storage.postgres import PostgresStorage
from subtrack.storage.sqlite import SqliteStorage

__all__ = [
    "SubscriptionStorage",
    "SqliteStorage",
    "PostgresStorage",
    "build_storage",
]


async def build_storage(settings: Settings) -> SubscriptionStorage:
    """Create the storage backend selected by settings.env."""
    if settings.env == DEV_ENV:
        return SqliteStorage.connect(
            settings.storage_path, operation_timeout=settings.operation_timeout
        )
    if settings.env == PROD_ENV:
        return await PostgresStorage.connect(
            settings, operation_timeout=settings.operation_timeout
        )
    raise ValueError(f"unsupported configuration env: {settings.env!r}")
