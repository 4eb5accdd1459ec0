"""
SubTrack Backend: SQLite Storage (env=dev)
==========================================

What:  Embedded file database through the aiosqlite driver.
Why:   Zero-setup backend for local development and tests.
How:   Periods are stored as ISO 'YYYY-MM-01' text; the table CHECKs validate
       the format and the end-after-start ordering.
"""

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy.exc import IntegrityError

from subtrack.database import create_engine
from subtrack.storage.sql import SqlSubscriptionStorage

logger = logging.getLogger(__name__)

_UNIQUE_SIGNAL = "UNIQUE constraint failed"


class SqliteStorage(SqlSubscriptionStorage):
    name = "sqlite"

    @classmethod
    def connect(cls, storage_path: str, operation_timeout: Optional[float] = None) -> "SqliteStorage":
        """
        Open (or create) the database file at storage_path.

        The parent directory is created if missing; the file itself is created
        by SQLite on first connection. The schema comes from Alembic.
        """
        parent = Path(storage_path).parent
        parent.mkdir(parents=True, exist_ok=True)

        engine = create_engine(f"sqlite+aiosqlite:///{storage_path}")
        logger.info("SQLite storage opened at %s", storage_path)
        return cls(engine, operation_timeout=operation_timeout)

    def _is_unique_violation(self, exc: IntegrityError) -> bool:
        return _UNIQUE_SIGNAL in str(exc.orig)
