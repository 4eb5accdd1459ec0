"""Domain value types: the month-granularity Period and the Subscription records."""

from subtrack.domain.period import Period, PeriodErrorKind, PeriodParseError, months_between
from subtrack.domain.subscription import Subscription, SubscriptionSpec, SubscriptionUpdate

__all__ = [
    "Period",
    "PeriodErrorKind",
    "PeriodParseError",
    "months_between",
    "Subscription",
    "SubscriptionSpec",
    "SubscriptionUpdate",
]
