"""
SubTrack Backend: Subscription Records
======================================

What:  Plain value records passed between the service layer and storage.
Why:   Storage backends and route handlers must agree on one shape that does
       not leak SQLAlchemy rows or pydantic request models across layers.

Records:
    SubscriptionSpec    Fields needed to create a subscription (no id yet)
    Subscription        A persisted subscription (spec + storage-assigned id)
    SubscriptionUpdate  Replacement values for PATCH; `end=None` keeps the stored end
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from subtrack.domain.period import Period


@dataclass(frozen=True)
class SubscriptionSpec:
    service_name: str
    price: int
    user_id: UUID
    start: Period
    end: Period


@dataclass(frozen=True)
class Subscription(SubscriptionSpec):
    id: int = 0

    @property
    def spec(self) -> SubscriptionSpec:
        return SubscriptionSpec(
            service_name=self.service_name,
            price=self.price,
            user_id=self.user_id,
            start=self.start,
            end=self.end,
        )


@dataclass(frozen=True)
class SubscriptionUpdate:
    """
    New values for an existing subscription.

    Why Optional end (not a zero Period):
        A zero-valued Period(0, 0) cannot be told apart from "not supplied".
        None is the only "leave unchanged" marker.
    """

    service_name: str
    price: int
    start: Period
    end: Optional[Period] = None
