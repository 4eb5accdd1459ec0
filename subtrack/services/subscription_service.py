"""
SubTrack Backend: Subscription Service (Business Logic)
=======================================================

What:  Orchestrates validation, storage calls and cost aggregation.
Why:   Keeps HTTP concerns out of the business rules and storage concerns
       out of the routes.
How:   Holds a SubscriptionStorage; every public method maps to one endpoint.
Who:   Called by route handlers in routes/subscriptions.py.

Error Handling Strategy:
    ValidationError, NotFoundError and AlreadyExistsError propagate unchanged.
    StorageError is re-raised with a per-endpoint message ("failed to create
    subscription", ...), keeping the backend details in its context for logs.

Aggregation:
    total = Σ price × months_between(start, end)
    price is a monthly rate, billed for every month the subscription spans.
"""

import logging
from typing import Iterable, List, Optional

from subtrack.domain import Subscription, SubscriptionSpec, SubscriptionUpdate, months_between
from subtrack.exceptions import StorageError
from subtrack.services.validation import CostFilter
from subtrack.storage.base import SubscriptionStorage

logger = logging.getLogger(__name__)


def calculate_total_cost(subscriptions: Iterable[Subscription]) -> int:
    """Sum of monthly price times active months. 0 for an empty input."""
    return sum(sub.price * months_between(sub.start, sub.end) for sub in subscriptions)


def _wrap(e: StorageError, message: str) -> StorageError:
    context = dict(e.context)
    context["storage_message"] = e.message
    return StorageError(message=message, operation=e.operation, context=context)


class SubscriptionService:
    """
    Business logic layer for subscription operations.

    Stateless apart from the storage reference; one instance per application.
    """

    def __init__(self, storage: SubscriptionStorage):
        self.storage = storage

    async def create(self, spec: SubscriptionSpec) -> int:
        try:
            subscription_id = await self.storage.create(spec)
        except StorageError as e:
            raise _wrap(e, "failed to create subscription") from e
        logger.info(
            "Subscription %d created: service=%s user=%s",
            subscription_id,
            spec.service_name,
            spec.user_id,
        )
        return subscription_id

    async def get(self, subscription_id: int) -> Subscription:
        try:
            return await self.storage.get_by_id(subscription_id)
        except StorageError as e:
            raise _wrap(e, "failed to get subscription") from e

    async def update(self, subscription_id: int, changes: SubscriptionUpdate) -> None:
        try:
            await self.storage.update(subscription_id, changes)
        except StorageError as e:
            raise _wrap(e, "failed to update subscription") from e
        logger.info("Subscription %d updated", subscription_id)

    async def delete(self, subscription_id: int) -> None:
        try:
            await self.storage.delete(subscription_id)
        except StorageError as e:
            raise _wrap(e, "failed to delete subscription") from e
        logger.info("Subscription %d deleted", subscription_id)

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Subscription]:
        """Pagination rules are enforced by the storage (ValidationError)."""
        try:
            return await self.storage.list(limit=limit, offset=offset)
        except StorageError as e:
            raise _wrap(e, "failed to get subscription") from e

    async def total_cost(self, cost_filter: CostFilter) -> int:
        """
        Total cost of the subscriptions strictly inside the filter window.

        The filter must already be validated (validate_total_cost_filter).
        """
        try:
            subscriptions = await self.storage.filter(
                cost_filter.start,
                cost_filter.end,
                user_id=cost_filter.user_id,
                service_name=cost_filter.service_name,
            )
        except StorageError as e:
            raise _wrap(e, "failed to calculate total cost") from e

        total = calculate_total_cost(subscriptions)
        logger.debug(
            "Total cost %d over %d subscriptions (%s..%s)",
            total,
            len(subscriptions),
            cost_filter.start,
            cost_filter.end,
        )
        return total
