"""
SubTrack Backend: Subscription Route Handlers
=============================================

What:  CRUD endpoints for subscriptions plus the total-cost query.
Why:   The HTTP face of SubscriptionService.
How:   Decode the request, run the validation rules, delegate to the service,
       wrap the result in the status envelope. Errors are raised, never
       rendered here; the global handlers in main.py turn them into
       {"status": "Error", "error": ...} with the right status code.

Endpoints:
    POST   /subscription               create          201 {id, status}
    GET    /subscription/{id}          read            200 {fields..., status}
    PATCH  /subscription/{id}          update          200 {status}
    DELETE /subscription/{id}          delete          200 {status}
    GET    /subscriptions              list (paged)    200 {items, status}
    GET    /subscriptions/total-cost   aggregate       200 {total_cost, status}
"""

import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from subtrack.exceptions import ValidationError, ValidationKind
from subtrack.schemas.subscription import (
    INT64_MAX,
    INT64_MIN,
    CreateSubscriptionRequest,
    CreateSubscriptionResponse,
    ListSubscriptionsResponse,
    ReadSubscriptionResponse,
    StatusResponse,
    SubscriptionItem,
    TotalCostResponse,
    UpdateSubscriptionRequest,
)
from subtrack.services.subscription_service import SubscriptionService
from subtrack.services.validation import (
    validate_create,
    validate_total_cost_filter,
    validate_update,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Subscriptions"])

_ID_PATTERN = re.compile(r"[+-]?\d+")

ERROR_RESPONSES = {
    400: {"description": "Invalid request", "model": StatusResponse},
    500: {"description": "Storage failure", "model": StatusResponse},
}


def get_subscription_service(request: Request) -> SubscriptionService:
    """Service bound to the storage built in the lifespan hook."""
    return SubscriptionService(request.app.state.storage)


def parse_subscription_id(subscription_id: str) -> int:
    """Path ids must be plain (optionally signed) integers that fit in 64 bits."""
    if not _ID_PATTERN.fullmatch(subscription_id):
        raise ValidationError("invalid subscription id format", ValidationKind.INVALID_ID)
    value = int(subscription_id)
    if not INT64_MIN <= value <= INT64_MAX:
        raise ValidationError("invalid subscription id format", ValidationKind.INVALID_ID)
    return value


@router.post(
    "/subscription",
    status_code=201,
    response_model=CreateSubscriptionResponse,
    response_model_exclude_none=True,
    responses={
        **ERROR_RESPONSES,
        409: {"description": "Subscription already exists", "model": StatusResponse},
    },
    summary="Create a subscription",
)
async def create_subscription(
    payload: CreateSubscriptionRequest,
    service: SubscriptionService = Depends(get_subscription_service),
) -> CreateSubscriptionResponse:
    """
    Create a subscription for a user.

    end_date may be omitted; it then defaults to one month after start_date.
    The (service_name, user_id) pair must be unique.
    """
    spec = validate_create(
        service_name=payload.service_name,
        price=payload.price,
        user_id=payload.user_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    new_id = await service.create(spec)
    return CreateSubscriptionResponse(id=new_id)


@router.get(
    "/subscription/{subscription_id}",
    response_model=ReadSubscriptionResponse,
    response_model_exclude_none=True,
    responses={
        **ERROR_RESPONSES,
        404: {"description": "Subscription not found", "model": StatusResponse},
    },
    summary="Get a subscription by id",
)
async def read_subscription(
    subscription_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
) -> ReadSubscriptionResponse:
    sub = await service.get(parse_subscription_id(subscription_id))
    return ReadSubscriptionResponse.from_domain(sub)


@router.patch(
    "/subscription/{subscription_id}",
    response_model=StatusResponse,
    response_model_exclude_none=True,
    responses={
        **ERROR_RESPONSES,
        404: {"description": "Subscription not found", "model": StatusResponse},
    },
    summary="Update a subscription",
)
async def update_subscription(
    subscription_id: str,
    payload: UpdateSubscriptionRequest,
    service: SubscriptionService = Depends(get_subscription_service),
) -> StatusResponse:
    """
    Replace service name, price and start. The end is replaced only when
    end_date is present in the body.
    """
    sid = parse_subscription_id(subscription_id)
    changes = validate_update(
        service_name=payload.service_name,
        price=payload.price,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    await service.update(sid, changes)
    return StatusResponse()


@router.delete(
    "/subscription/{subscription_id}",
    response_model=StatusResponse,
    response_model_exclude_none=True,
    responses={
        **ERROR_RESPONSES,
        404: {"description": "Subscription not found", "model": StatusResponse},
    },
    summary="Delete a subscription",
)
async def delete_subscription(
    subscription_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
) -> StatusResponse:
    await service.delete(parse_subscription_id(subscription_id))
    return StatusResponse()


@router.get(
    "/subscriptions",
    response_model=ListSubscriptionsResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="List subscriptions",
)
async def list_subscriptions(
    limit: Optional[int] = Query(
        default=None, ge=INT64_MIN, le=INT64_MAX, description="Page size; requires offset"
    ),
    offset: Optional[int] = Query(
        default=None, ge=INT64_MIN, le=INT64_MAX, description="Rows to skip; requires limit"
    ),
    service: SubscriptionService = Depends(get_subscription_service),
) -> ListSubscriptionsResponse:
    """
    All subscriptions ordered by id.

    Paging is all-or-nothing: limit and offset are given together or not at all.
    """
    subscriptions = await service.list(limit=limit, offset=offset)
    return ListSubscriptionsResponse(
        items=[SubscriptionItem.from_domain(sub) for sub in subscriptions]
    )


@router.get(
    "/subscriptions/total-cost",
    response_model=TotalCostResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="Total cost of subscriptions in a period window",
)
async def total_cost(
    start_date: str = Query(default="", description="Window start, MM-YYYY (exclusive)"),
    end_date: str = Query(default="", description="Window end, MM-YYYY (exclusive)"),
    user_id: Optional[str] = Query(default=None, description="Only this user's subscriptions"),
    service_name: Optional[str] = Query(default=None, description="Only this service"),
    service: SubscriptionService = Depends(get_subscription_service),
) -> TotalCostResponse:
    """
    Sum of price x active months for subscriptions that start strictly after
    start_date and end strictly before end_date.
    """
    cost_filter = validate_total_cost_filter(
        start_date=start_date,
        end_date=end_date,
        user_id=user_id,
        service_name=service_name,
    )
    total = await service.total_cost(cost_filter)
    return TotalCostResponse(total_cost=total)
