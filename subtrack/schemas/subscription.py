"""
SubTrack Backend: Pydantic Request/Response Schemas
===================================================

What:  Pydantic models defining the HTTP contract of the subscription API.
Why:   Request decoding, response serialization and OpenAPI docs from one place.
How:   Request models only check JSON types; the business rules (empty
       fields, UUID format, period format) live in services/validation.py so
       their messages stay exact. Every response carries the status envelope.

Envelope:
    success  {"status": "OK", ...payload}
    failure  {"status": "Error", "error": "<message>"}

Design Decision:
    Schemas are separate from the SQLAlchemy model and from the domain
    dataclasses; periods cross the API as compact "MM-YYYY" strings.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, StrictInt

from subtrack.domain import Subscription

STATUS_OK = "OK"
STATUS_ERROR = "Error"

# Storage integers are 64-bit; larger values are rejected while decoding
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CreateSubscriptionRequest(BaseModel):
    """
    Body of POST /subscription.

    Missing string fields decode as "" so the validation rules, not pydantic,
    report them ("empty service name", "empty user id", ...). price must be
    a JSON integer: "400" or 4e2 fail decoding like any other type mismatch.
    """
    service_name: str = Field(default="", description="Name of the subscribed service")
    price: StrictInt = Field(
        default=0,
        ge=INT64_MIN,
        le=INT64_MAX,
        description="Monthly price in whole currency units",
    )
    user_id: str = Field(default="", description="Owner's UUID")
    start_date: str = Field(default="", description="First month, MM-YYYY")
    end_date: Optional[str] = Field(
        default=None,
        description="Last month, MM-YYYY. Defaults to one month after start_date.",
    )


class UpdateSubscriptionRequest(BaseModel):
    """Body of PATCH /subscription/{id}. Omitting end_date keeps the stored end."""
    service_name: str = Field(default="")
    price: StrictInt = Field(default=0, ge=INT64_MIN, le=INT64_MAX)
    start_date: str = Field(default="")
    end_date: Optional[str] = Field(default=None)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class StatusResponse(BaseModel):
    """Bare envelope, also used for every error body."""
    status: str = Field(default=STATUS_OK, description="'OK' or 'Error'")
    error: Optional[str] = Field(default=None, description="Error message, absent on success")


class CreateSubscriptionResponse(StatusResponse):
    id: int = Field(description="Storage-assigned subscription id")


class SubscriptionItem(BaseModel):
    """One subscription with periods rendered as MM-YYYY."""
    id: int
    service_name: str
    price: int
    user_id: str
    start_date: str
    end_date: str

    @classmethod
    def from_domain(cls, sub: Subscription) -> "SubscriptionItem":
        return cls(
            id=sub.id,
            service_name=sub.service_name,
            price=sub.price,
            user_id=str(sub.user_id),
            start_date=sub.start.to_compact_string(),
            end_date=sub.end.to_compact_string(),
        )


class ReadSubscriptionResponse(SubscriptionItem, StatusResponse):
    @classmethod
    def from_domain(cls, sub: Subscription) -> "ReadSubscriptionResponse":
        return cls(**SubscriptionItem.from_domain(sub).model_dump())


class ListSubscriptionsResponse(StatusResponse):
    items: List[SubscriptionItem] = Field(default_factory=list)


class TotalCostResponse(StatusResponse):
    total_cost: int = Field(description="Sum of price x active months")


class HealthResponse(BaseModel):
    """
    What:  Service health for Docker health checks and monitoring.
    Who:   Returned by GET /health.
    """
    status: str = Field(description="healthy or unhealthy")
    version: str = Field(description="Application version")
    backend: str = Field(description="Active storage backend: sqlite or postgres")
    storage: str = Field(description="connected or disconnected")
    uptime_seconds: float = Field(description="Seconds since the process started")
