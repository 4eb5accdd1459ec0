"""
SubTrack Backend: PostgreSQL Storage (env=prod)
===============================================

What:  Client/server database through the asyncpg driver.
Why:   Production backend; periods are native DATE columns.
How:   settings.database_url combines the non-secret settings (host, port, db name,
       usually from YAML) and the PG_USER / PG_PASS environment credentials.
       The first connection is retried with tenacity, since the database
       container often starts after the API in compose deployments.

Connection Retry:
    pg_connection_attempts attempts, pg_connection_retry_delay seconds apart.
    Only connection-level failures (OSError, SQLAlchemyError) are retried.
    When every attempt fails: StorageError("connection attempts timed out").
"""

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from subtrack.config import Settings
from subtrack.database import create_engine
from subtrack.exceptions import StorageError
from subtrack.storage.sql import SqlSubscriptionStorage

logger = logging.getLogger(__name__)

PG_USER_ENV = "PG_USER"
PG_PASS_ENV = "PG_PASS"

# SQLSTATE for unique_violation
PG_UNIQUE_VIOLATION = "23505"


def check_credentials(settings: Settings) -> None:
    """
    Fail before any connection attempt when a credential is missing.

    Raises:
        StorageError: PG_USER or PG_PASS is not set.
    """
    op = "storage.postgres.connect"
    if not settings.pg_user:
        raise StorageError(message=f"{op}: no value for {PG_USER_ENV} env", operation=op)
    if not settings.pg_pass:
        raise StorageError(message=f"{op}: no value for {PG_PASS_ENV} env", operation=op)


class PostgresStorage(SqlSubscriptionStorage):
    name = "postgres"

    @classmethod
    async def connect(
        cls, settings: Settings, operation_timeout: Optional[float] = None
    ) -> "PostgresStorage":
        """
        Build the pooled engine and wait until the server accepts a connection.

        Pool:
            pool_size = pg_max_pool_size, no overflow, pre-ping on checkout.

        Raises:
            StorageError: Missing credentials, or every connection attempt failed.
        """
        op = "storage.postgres.connect"
        check_credentials(settings)
        engine = create_engine(
            settings.database_url,
            pool_size=settings.pg_max_pool_size,
            max_overflow=0,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        storage = cls(engine, operation_timeout=operation_timeout)

        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type((OSError, SQLAlchemyError)),
                stop=stop_after_attempt(settings.pg_connection_attempts),
                wait=wait_fixed(settings.pg_connection_retry_delay),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    await storage._probe()
        except (OSError, SQLAlchemyError) as e:
            logger.error("operation is %s: %s", op, e)
            await engine.dispose()
            raise StorageError(
                message="connection attempts timed out",
                operation=op,
                context={
                    "attempts": settings.pg_connection_attempts,
                    "error_type": type(e).__name__,
                },
            )

        logger.info(
            "PostgreSQL storage connected to %s:%d/%s (pool_size=%d)",
            settings.pg_host,
            settings.pg_port,
            settings.pg_db_name,
            settings.pg_max_pool_size,
        )
        return storage

    async def _probe(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    def _is_unique_violation(self, exc: IntegrityError) -> bool:
        # asyncpg reports the SQLSTATE on the driver exception; SQLAlchemy's
        # adapter exposes it as .sqlstate and keeps the original as __cause__
        for err in (exc.orig, getattr(exc.orig, "__cause__", None)):
            if err is None:
                continue
            code = getattr(err, "sqlstate", None) or getattr(err, "pgcode", None)
            if code == PG_UNIQUE_VIOLATION:
                return True
        return False
