"""
SubTrack Backend: Shared SQL Storage Implementation
===================================================

What:  SubscriptionStorage implemented once on SQLAlchemy's async ORM.
Why:   SQLite and PostgreSQL differ only in URL, pool options and how a unique
       violation is reported; the queries are identical.
How:   Each operation opens its own AsyncSession, runs mutations inside
       session.begin() and is bounded by asyncio.wait_for(operation_timeout).
       Driver errors are translated into the application exceptions here, so
       nothing SQLAlchemy-specific leaks to the service layer.

Transaction Semantics:
    session.begin() commits only when its block exits cleanly. Raising inside
    the block (NotFoundError on zero affected rows, IntegrityError, timeout
    cancellation) rolls the transaction back.

Operation Names:
    Failures are logged as "operation is storage.<backend>.<op>: <details>"
    and the same name is carried in StorageError.operation.
"""

import asyncio
import logging
from abc import abstractmethod
from typing import Any, Awaitable, Dict, List, Optional, TypeVar
from uuid import UUID

from sqlalchemy import delete, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from subtrack.config import settings
from subtrack.database import build_session_factory
from subtrack.domain import Period, Subscription, SubscriptionSpec, SubscriptionUpdate
from subtrack.exceptions import (
    AlreadyExistsError,
    NotFoundError,
    StorageError,
    SubTrackError,
    ValidationError,
    ValidationKind,
)
from subtrack.models.subscription import SubscriptionRecord
from subtrack.storage.base import SubscriptionStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")


def to_subscription(record: SubscriptionRecord) -> Subscription:
    """Convert an ORM row into the domain record handed to callers."""
    return Subscription(
        id=record.id,
        service_name=record.service_name,
        price=record.price,
        user_id=UUID(record.user_id),
        start=record.start_date,
        end=record.end_date,
    )


class SqlSubscriptionStorage(SubscriptionStorage):
    """
    SQLAlchemy-backed storage shared by every SQL backend.

    Subclasses provide:
        - name:                  backend label ("sqlite", "postgres")
        - _is_unique_violation:  recognises the backend's unique-constraint signal
    """

    name = "sql"

    def __init__(self, engine: AsyncEngine, operation_timeout: Optional[float] = None):
        self.engine = engine
        self.session_factory = build_session_factory(engine)
        self.operation_timeout = (
            operation_timeout if operation_timeout is not None else settings.operation_timeout
        )

    @abstractmethod
    def _is_unique_violation(self, exc: IntegrityError) -> bool:
        """True when the IntegrityError comes from the unique (service_name, user_id) constraint."""

    def _operation(self, op: str) -> str:
        return f"storage.{self.name}.{op}"

    async def _run(self, op: str, operation: Awaitable[T]) -> T:
        """
        Await one storage operation under the timeout and translate its errors.

        Application exceptions (NotFoundError, ValidationError) pass through.
        Unique violations become AlreadyExistsError; every other driver or
        connection failure, and the timeout itself, becomes StorageError.
        Integers the driver cannot bind (beyond 64 bits) raise OverflowError
        and are wrapped the same way.
        """
        name = self._operation(op)
        try:
            return await asyncio.wait_for(operation, timeout=self.operation_timeout)
        except SubTrackError as e:
            logger.error("operation is %s: %s", name, e.message)
            raise
        except asyncio.TimeoutError:
            logger.error("operation is %s: %s", name, "operation timed out")
            raise StorageError(
                message=f"{name}: operation timed out",
                operation=name,
                context={"timeout": self.operation_timeout},
            )
        except IntegrityError as e:
            if self._is_unique_violation(e):
                logger.error("operation is %s: %s", name, "subscription already exists")
                raise AlreadyExistsError(context={"operation": name})
            logger.error("operation is %s: %s", name, e.orig)
            raise StorageError(
                message=f"{name}: constraint violation",
                operation=name,
                context={"error_type": type(e).__name__, "details": str(e.orig)},
            )
        except (SQLAlchemyError, OSError, OverflowError, ValueError) as e:
            logger.error("operation is %s: %s", name, e)
            raise StorageError(
                message=f"{name}: {type(e).__name__}",
                operation=name,
                context={"error_type": type(e).__name__, "details": str(e)},
            )

    # ── Create ────────────────────────────────────────────────────────────

    async def create(self, spec: SubscriptionSpec) -> int:
        return await self._run("create", self._create(spec))

    async def _create(self, spec: SubscriptionSpec) -> int:
        record = SubscriptionRecord(
            service_name=spec.service_name,
            price=spec.price,
            user_id=str(spec.user_id),
            start_date=spec.start,
            end_date=spec.end,
        )
        async with self.session_factory() as session:
            async with session.begin():
                session.add(record)
                # Flush inside the transaction so the id is assigned before commit
                await session.flush()
            return record.id

    # ── Read ──────────────────────────────────────────────────────────────

    async def get_by_id(self, subscription_id: int) -> Subscription:
        return await self._run("get", self._get_by_id(subscription_id))

    async def _get_by_id(self, subscription_id: int) -> Subscription:
        async with self.session_factory() as session:
            record = await session.get(SubscriptionRecord, subscription_id)
            if record is None:
                raise NotFoundError(resource_id=subscription_id)
            return to_subscription(record)

    # ── Update ────────────────────────────────────────────────────────────

    async def update(self, subscription_id: int, update: SubscriptionUpdate) -> None:
        await self._run("update", self._update(subscription_id, update))

    async def _update(self, subscription_id: int, changes: SubscriptionUpdate) -> None:
        values: Dict[str, Any] = {
            "service_name": changes.service_name,
            "price": changes.price,
            "start_date": changes.start,
        }
        if changes.end is not None:
            values["end_date"] = changes.end

        stmt = (
            update(SubscriptionRecord)
            .where(SubscriptionRecord.id == subscription_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        async with self.session_factory() as session:
            async with session.begin():
                result = await session.execute(stmt)
                if result.rowcount == 0:
                    raise NotFoundError(resource_id=subscription_id)

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete(self, subscription_id: int) -> None:
        await self._run("delete", self._delete(subscription_id))

    async def _delete(self, subscription_id: int) -> None:
        stmt = (
            delete(SubscriptionRecord)
            .where(SubscriptionRecord.id == subscription_id)
            .execution_options(synchronize_session=False)
        )
        async with self.session_factory() as session:
            async with session.begin():
                result = await session.execute(stmt)
                if result.rowcount == 0:
                    raise NotFoundError(resource_id=subscription_id)

    # ── List ──────────────────────────────────────────────────────────────

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Subscription]:
        self._check_page(limit, offset)
        return await self._run("list", self._list(limit, offset))

    def _check_page(self, limit: Optional[int], offset: Optional[int]) -> None:
        """
        Pagination rules, checked before any query runs.

        limit and offset are all-or-nothing; both must be non-negative.
        """
        name = self._operation("list")
        problem: Optional[ValidationError] = None
        if limit is not None and offset is None:
            problem = ValidationError(
                "no offset value while limit is set", ValidationKind.MISSING_OFFSET
            )
        elif limit is None and offset is not None:
            problem = ValidationError(
                "no limit value while offset is set", ValidationKind.MISSING_LIMIT
            )
        elif limit is not None and limit < 0:
            problem = ValidationError(
                "invalid limit value (less than zero)", ValidationKind.INVALID_LIMIT
            )
        elif offset is not None and offset < 0:
            problem = ValidationError(
                "invalid offset value (less than zero)", ValidationKind.INVALID_OFFSET
            )
        if problem is not None:
            logger.error("operation is %s: %s", name, problem.message)
            raise problem

    async def _list(self, limit: Optional[int], offset: Optional[int]) -> List[Subscription]:
        stmt = select(SubscriptionRecord).order_by(SubscriptionRecord.id)
        if limit is not None:
            stmt = stmt.limit(limit).offset(offset)
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [to_subscription(record) for record in result.scalars().all()]

    # ── Filter ────────────────────────────────────────────────────────────

    async def filter(
        self,
        start: Period,
        end: Period,
        user_id: Optional[UUID] = None,
        service_name: Optional[str] = None,
    ) -> List[Subscription]:
        return await self._run("filter", self._filter(start, end, user_id, service_name))

    async def _filter(
        self,
        start: Period,
        end: Period,
        user_id: Optional[UUID],
        service_name: Optional[str],
    ) -> List[Subscription]:
        # Both bounds are exclusive: a row starting exactly at `start` or
        # ending exactly at `end` is not part of the window.
        stmt = select(SubscriptionRecord).where(
            SubscriptionRecord.start_date > start,
            SubscriptionRecord.end_date < end,
        )
        if user_id is not None:
            stmt = stmt.where(SubscriptionRecord.user_id == str(user_id))
        if service_name is not None:
            stmt = stmt.where(SubscriptionRecord.service_name == service_name)
        stmt = stmt.order_by(SubscriptionRecord.id)

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [to_subscription(record) for record in result.scalars().all()]

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await asyncio.wait_for(
                    conn.execute(text("SELECT 1")), timeout=self.operation_timeout
                )
            return True
        except Exception as e:
            logger.warning("Storage ping failed (%s): %s", self.name, e)
            return False

    async def close(self) -> None:
        logger.info("Closing %s storage", self.name)
        await self.engine.dispose()
