"""
SubTrack Backend: Request Validation Rules
==========================================

What:  Pure functions turning raw request fields into domain records.
Why:   Routes stay thin and the rules (and their exact wording) can be tested
       without HTTP. Clients compare the messages verbatim.
How:   Rules run in a fixed order; the first failing rule raises
       ValidationError with its ValidationKind. Nothing is collected.

Create rules (in order):
    1. service name empty          → "empty service name"
    2. price negative              → "request price is invalid"
    3. user id empty               → "empty user id"
    4. user id not a UUID          → "request user id is invalid"
    5. start date empty            → "empty start date"
    6. start date not "MM-YYYY"    → "request start date is invalid"
    7. end date given but invalid  → "request end date is invalid"
    8. start after end             → "request start date greater than end date"

    A missing end date defaults to one month after the start.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from subtrack.domain import Period, PeriodParseError, SubscriptionSpec, SubscriptionUpdate
from subtrack.exceptions import ValidationError, ValidationKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CostFilter:
    """Validated arguments for the total-cost query."""

    start: Period
    end: Period
    user_id: Optional[UUID] = None
    service_name: Optional[str] = None


def _fail(message: str, kind: ValidationKind, details: Optional[str] = None) -> ValidationError:
    if details:
        logger.debug("%s: %s", message, details)
    return ValidationError(message, kind)


def _parse_period(value: str, message: str, kind: ValidationKind) -> Period:
    try:
        return Period.parse_compact(value)
    except PeriodParseError as e:
        raise _fail(message, kind, str(e))


def _parse_uuid(value: str, message: str, kind: ValidationKind) -> UUID:
    try:
        return UUID(value)
    except ValueError as e:
        raise _fail(message, kind, str(e))


def _check_order(start: Period, end: Period) -> None:
    if start.greater_than(end):
        raise _fail(
            "request start date greater than end date", ValidationKind.START_AFTER_END
        )


def _check_price(price: int) -> None:
    if price < 0:
        raise _fail("request price is invalid", ValidationKind.INVALID_PRICE)


def validate_create(
    service_name: str,
    price: int,
    user_id: str,
    start_date: str,
    end_date: Optional[str] = None,
) -> SubscriptionSpec:
    """
    Validate a create request.

    Returns:
        SubscriptionSpec ready for storage.

    Raises:
        ValidationError: First rule that fails (see module docstring).
    """
    if service_name == "":
        raise _fail("empty service name", ValidationKind.EMPTY_SERVICE_NAME)
    _check_price(price)

    if user_id == "":
        raise _fail("empty user id", ValidationKind.EMPTY_USER_ID)
    uid = _parse_uuid(user_id, "request user id is invalid", ValidationKind.INVALID_USER_ID)

    if start_date == "":
        raise _fail("empty start date", ValidationKind.EMPTY_START_DATE)
    start = _parse_period(
        start_date, "request start date is invalid", ValidationKind.INVALID_START_DATE
    )

    if end_date:
        end = _parse_period(
            end_date, "request end date is invalid", ValidationKind.INVALID_END_DATE
        )
        _check_order(start, end)
    else:
        end = start.add_months(0, 1)

    return SubscriptionSpec(
        service_name=service_name,
        price=price,
        user_id=uid,
        start=start,
        end=end,
    )


def validate_update(
    service_name: str,
    price: int,
    start_date: str,
    end_date: Optional[str] = None,
) -> SubscriptionUpdate:
    """
    Validate an update request. Same rules as create minus the user id;
    a missing end date leaves the stored end untouched.
    """
    if service_name == "":
        raise _fail("request service name is empty", ValidationKind.EMPTY_SERVICE_NAME)
    _check_price(price)

    if start_date == "":
        raise _fail("request start date is empty", ValidationKind.EMPTY_START_DATE)
    start = _parse_period(
        start_date, "request start date is invalid", ValidationKind.INVALID_START_DATE
    )

    end: Optional[Period] = None
    if end_date:
        end = _parse_period(
            end_date, "request end date is invalid", ValidationKind.INVALID_END_DATE
        )
        _check_order(start, end)

    return SubscriptionUpdate(service_name=service_name, price=price, start=start, end=end)


def validate_total_cost_filter(
    start_date: str,
    end_date: str,
    user_id: Optional[str] = None,
    service_name: Optional[str] = None,
) -> CostFilter:
    """Validate the total-cost query. Both bounds are required."""
    if start_date == "":
        raise _fail("empty start date", ValidationKind.EMPTY_START_DATE)
    start = _parse_period(
        start_date, "request start date is invalid", ValidationKind.INVALID_START_DATE
    )

    if end_date == "":
        raise _fail("empty end date", ValidationKind.EMPTY_END_DATE)
    end = _parse_period(
        end_date, "request end date is invalid", ValidationKind.INVALID_END_DATE
    )
    _check_order(start, end)

    uid: Optional[UUID] = None
    if user_id:
        uid = _parse_uuid(
            user_id, "user id filter is invalid", ValidationKind.INVALID_USER_ID_FILTER
        )

    return CostFilter(
        start=start,
        end=end,
        user_id=uid,
        service_name=service_name or None,
    )
