"""
SubTrack Backend: Request Validation Tests
==========================================

What:  Tests for validate_create, validate_update and validate_total_cost_filter.
Why:   The rule order and the exact messages are part of the API contract.

What we test:
    ✅ Each rule raises its own kind and message
    ✅ The first failing rule wins
    ✅ Missing end date defaults to start + 1 month (create) or None (update)
    ✅ Filter validation including the optional user id
"""

from uuid import UUID, uuid4

import pytest

from subtrack.domain import Period
from subtrack.exceptions import ValidationError, ValidationKind
from subtrack.services.validation import (
    validate_create,
    validate_total_cost_filter,
    validate_update,
)

USER = "60601fee-2bf1-4721-ae6f-7636e79a0cba"


def create_args(**overrides):
    args = {
        "service_name": "Yandex Plus",
        "price": 400,
        "user_id": USER,
        "start_date": "07-2025",
        "end_date": None,
    }
    args.update(overrides)
    return args


class TestValidateCreate:

    def test_valid_request(self):
        spec = validate_create(**create_args(end_date="10-2025"))
        assert spec.service_name == "Yandex Plus"
        assert spec.price == 400
        assert spec.user_id == UUID(USER)
        assert spec.start == Period(7, 2025)
        assert spec.end == Period(10, 2025)

    @pytest.mark.parametrize("end_date", [None, ""])
    def test_missing_end_defaults_to_next_month(self, end_date):
        spec = validate_create(**create_args(start_date="12-2025", end_date=end_date))
        assert spec.end == Period(1, 2026)

    def test_zero_price_is_allowed(self):
        assert validate_create(**create_args(price=0)).price == 0

    def test_equal_start_and_end_pass_validation(self):
        """Only a strictly later start is rejected here; storage rejects equality."""
        spec = validate_create(**create_args(start_date="07-2025", end_date="07-2025"))
        assert spec.start == spec.end

    @pytest.mark.parametrize(
        "overrides, kind, message",
        [
            ({"service_name": ""}, ValidationKind.EMPTY_SERVICE_NAME, "empty service name"),
            ({"price": -1}, ValidationKind.INVALID_PRICE, "request price is invalid"),
            ({"user_id": ""}, ValidationKind.EMPTY_USER_ID, "empty user id"),
            ({"user_id": "not-a-uuid"}, ValidationKind.INVALID_USER_ID, "request user id is invalid"),
            ({"start_date": ""}, ValidationKind.EMPTY_START_DATE, "empty start date"),
            ({"start_date": "2025/07"}, ValidationKind.INVALID_START_DATE, "request start date is invalid"),
            ({"start_date": "July-2025"}, ValidationKind.INVALID_START_DATE, "request start date is invalid"),
            ({"end_date": "07/2025"}, ValidationKind.INVALID_END_DATE, "request end date is invalid"),
            (
                {"start_date": "08-2025", "end_date": "07-2025"},
                ValidationKind.START_AFTER_END,
                "request start date greater than end date",
            ),
        ],
    )
    def test_rule_failures(self, overrides, kind, message):
        with pytest.raises(ValidationError) as exc_info:
            validate_create(**create_args(**overrides))
        assert exc_info.value.kind == kind
        assert exc_info.value.message == message

    def test_first_failing_rule_wins(self):
        """Empty service name is reported even when everything else is wrong too."""
        with pytest.raises(ValidationError) as exc_info:
            validate_create(
                service_name="", price=-5, user_id="", start_date="", end_date="x"
            )
        assert exc_info.value.kind == ValidationKind.EMPTY_SERVICE_NAME

    def test_price_checked_before_user_id(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_create(**create_args(price=-1, user_id="bad"))
        assert exc_info.value.kind == ValidationKind.INVALID_PRICE


class TestValidateUpdate:

    def test_valid_update_without_end(self):
        changes = validate_update("Netflix", 999, "01-2026")
        assert changes.service_name == "Netflix"
        assert changes.start == Period(1, 2026)
        assert changes.end is None

    def test_valid_update_with_end(self):
        changes = validate_update("Netflix", 999, "01-2026", "06-2026")
        assert changes.end == Period(6, 2026)

    @pytest.mark.parametrize(
        "args, kind, message",
        [
            (("", 1, "01-2026"), ValidationKind.EMPTY_SERVICE_NAME, "request service name is empty"),
            (("x", -1, "01-2026"), ValidationKind.INVALID_PRICE, "request price is invalid"),
            (("x", 1, ""), ValidationKind.EMPTY_START_DATE, "request start date is empty"),
            (("x", 1, "13"), ValidationKind.INVALID_START_DATE, "request start date is invalid"),
            (("x", 1, "01-2026", "bad"), ValidationKind.INVALID_END_DATE, "request end date is invalid"),
            (
                ("x", 1, "05-2026", "01-2026"),
                ValidationKind.START_AFTER_END,
                "request start date greater than end date",
            ),
        ],
    )
    def test_rule_failures(self, args, kind, message):
        with pytest.raises(ValidationError) as exc_info:
            validate_update(*args)
        assert exc_info.value.kind == kind
        assert exc_info.value.message == message


class TestValidateTotalCostFilter:

    def test_valid_filter(self):
        user = uuid4()
        cost_filter = validate_total_cost_filter("01-2025", "12-2025", str(user), "Netflix")
        assert cost_filter.start == Period(1, 2025)
        assert cost_filter.end == Period(12, 2025)
        assert cost_filter.user_id == user
        assert cost_filter.service_name == "Netflix"

    def test_optional_narrowing_is_none_when_blank(self):
        cost_filter = validate_total_cost_filter("01-2025", "12-2025", "", "")
        assert cost_filter.user_id is None
        assert cost_filter.service_name is None

    @pytest.mark.parametrize(
        "args, kind, message",
        [
            (("", "12-2025"), ValidationKind.EMPTY_START_DATE, "empty start date"),
            (("x", "12-2025"), ValidationKind.INVALID_START_DATE, "request start date is invalid"),
            (("01-2025", ""), ValidationKind.EMPTY_END_DATE, "empty end date"),
            (("01-2025", "x"), ValidationKind.INVALID_END_DATE, "request end date is invalid"),
            (
                ("12-2025", "01-2025"),
                ValidationKind.START_AFTER_END,
                "request start date greater than end date",
            ),
            (
                ("01-2025", "12-2025", "nope"),
                ValidationKind.INVALID_USER_ID_FILTER,
                "user id filter is invalid",
            ),
        ],
    )
    def test_rule_failures(self, args, kind, message):
        with pytest.raises(ValidationError) as exc_info:
            validate_total_cost_filter(*args)
        assert exc_info.value.kind == kind
        assert exc_info.value.message == message
