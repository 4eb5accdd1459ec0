"""
SubTrack Backend: Abstract Subscription Storage Interface
=========================================================

What:  Abstract base class defining the contract every storage backend fulfils.
Why:   The service layer and the routes must not know whether SQLite or
       PostgreSQL sits underneath; the backend is chosen once at startup.
How:   Concrete implementations inherit from SubscriptionStorage (usually via
       SqlSubscriptionStorage) and implement every coroutine below.
Who:   Held by SubscriptionService; built by storage.build_storage().

Error Contract (all backends):
    AlreadyExistsError  the (service_name, user_id) pair is taken
    NotFoundError       no row with that id, or UPDATE/DELETE touched zero rows
    ValidationError     list() pagination arguments are inconsistent
    StorageError        anything else, including constraint violations and timeouts
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from subtrack.domain import Period, Subscription, SubscriptionSpec, SubscriptionUpdate


class SubscriptionStorage(ABC):
    """
    Persistence contract for subscriptions.

    Implementations:
        - SqliteStorage:   embedded file database (env=dev)
        - PostgresStorage: client/server database (env=prod)
    """

    #: Short backend name reported by /health and used in operation names
    name: str = "abstract"

    @abstractmethod
    async def create(self, spec: SubscriptionSpec) -> int:
        """
        Insert a subscription in its own transaction.

        Returns:
            int: The storage-assigned id.

        Raises:
            AlreadyExistsError: The (service_name, user_id) pair already exists.
            StorageError: Any other failure, e.g. the end/start check constraint.
        """
        ...

    @abstractmethod
    async def get_by_id(self, subscription_id: int) -> Subscription:
        """Raises NotFoundError when no row has that id."""
        ...

    @abstractmethod
    async def update(self, subscription_id: int, update: SubscriptionUpdate) -> None:
        """
        Overwrite service name, price and start; overwrite end only when
        update.end is not None. Raises NotFoundError on zero affected rows.
        """
        ...

    @abstractmethod
    async def delete(self, subscription_id: int) -> None:
        """Raises NotFoundError on zero affected rows."""
        ...

    @abstractmethod
    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Subscription]:
        """
        All subscriptions ordered by id, optionally paged.

        limit and offset must be given together and be non-negative,
        otherwise ValidationError is raised before touching the database.
        """
        ...

    @abstractmethod
    async def filter(
        self,
        start: Period,
        end: Period,
        user_id: Optional[UUID] = None,
        service_name: Optional[str] = None,
    ) -> List[Subscription]:
        """
        Subscriptions whose stored start is strictly after `start` and whose
        stored end is strictly before `end`, optionally narrowed by exact
        user id and exact service name.
        """
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """
        Lightweight connectivity test.

        Who:     Called by the health check endpoint.
        Returns: True if the database answers, False otherwise. Never raises.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Dispose of the engine and release every pooled connection."""
        ...
