"""
Subscription lifecycle evaluation.

Derives a subscription's status and remaining days from its stored dates.
Status is never persisted: it is recomputed on every read so that expiry
happens without any row transition.
"""
import enum
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Iterable, Any

from app.core.config import GRACE_PERIOD_DAYS

SECONDS_PER_DAY = 86400


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    GRACE_PERIOD = "grace_period"
    EXPIRED = "expired"


class InvalidSubscriptionDates(ValueError):
    """Raised when a subscription's dates are not well ordered."""


@dataclass(frozen=True)
class SubscriptionState:
    status: SubscriptionStatus
    days_remaining: int

    @property
    def allows_access(self) -> bool:
        return self.status in (SubscriptionStatus.ACTIVE, SubscriptionStatus.GRACE_PERIOD)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to aware UTC. Naive values are read as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _days_until(target: datetime, now: datetime) -> int:
    return math.ceil((target - now).total_seconds() / SECONDS_PER_DAY)


def compute_status(
    end_date: datetime,
    grace_period_end: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> SubscriptionState:
    """
    Evaluate status and days remaining for raw dates.

    The end date itself is excluded from the active window, so a
    subscription ending exactly at `now` is no longer active.
    """
    now = as_utc(now) or utcnow()
    end_date = as_utc(end_date)
    grace_period_end = as_utc(grace_period_end)

    if now < end_date:
        return SubscriptionState(SubscriptionStatus.ACTIVE, _days_until(end_date, now))
    if grace_period_end is not None and now < grace_period_end:
        # Grace days are reported separately by grace_days_remaining()
        return SubscriptionState(SubscriptionStatus.GRACE_PERIOD, 0)
    return SubscriptionState(SubscriptionStatus.EXPIRED, 0)


def evaluate_subscription(subscription: Any, now: Optional[datetime] = None) -> SubscriptionState:
    """
    Evaluate a subscription record.

    Args:
        subscription: Any object exposing `subscription_end_date` and
            `grace_period_end` (ORM row or plain object)
        now: Current instant; defaults to the wall clock

    Returns:
        SubscriptionState with status and days_remaining
    """
    return compute_status(
        subscription.subscription_end_date,
        getattr(subscription, "grace_period_end", None),
        now,
    )


def grace_days_remaining(subscription: Any, now: Optional[datetime] = None) -> int:
    """
    Days left in the grace window.

    Returns 0 while the subscription is still active, -1 once the grace
    window has lapsed (or when there is none), otherwise the number of
    started days until the grace window ends.
    """
    now = as_utc(now) or utcnow()
    end_date = as_utc(subscription.subscription_end_date)
    grace_period_end = as_utc(getattr(subscription, "grace_period_end", None))

    if now < end_date:
        return 0
    if grace_period_end is None or now >= grace_period_end:
        return -1
    return _days_until(grace_period_end, now)


def default_grace_period_end(end_date: datetime, grace_days: Optional[int] = None) -> datetime:
    if grace_days is None:
        grace_days = GRACE_PERIOD_DAYS
    return end_date + timedelta(days=grace_days)


def validate_subscription_dates(
    start_date: datetime,
    end_date: datetime,
    grace_period_end: Optional[datetime] = None,
) -> None:
    """Reject inverted subscription windows before they are written."""
    start_date = as_utc(start_date)
    end_date = as_utc(end_date)
    grace_period_end = as_utc(grace_period_end)

    if end_date <= start_date:
        raise InvalidSubscriptionDates(
            f"subscription_end_date ({end_date.isoformat()}) must be after "
            f"subscription_start_date ({start_date.isoformat()})"
        )
    if grace_period_end is not None and grace_period_end < end_date:
        raise InvalidSubscriptionDates(
            f"grace_period_end ({grace_period_end.isoformat()}) must not be before "
            f"subscription_end_date ({end_date.isoformat()})"
        )


def subscribed_module_names(selected_modules: Optional[Iterable[Any]]) -> list:
    """Module names from a stored `selected_modules` list (dicts or plain names)."""
    names = []
    for module in selected_modules or []:
        if isinstance(module, dict):
            name = module.get("module_name")
        else:
            name = module
        if name:
            names.append(name)
    return names


def has_feature_access(
    subscription: Any,
    module_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> bool:
    """
    Check whether a subscription grants access to a module.

    Access is granted while the subscription is active or in its grace
    period. When `module_name` is given it must also be one of the
    subscription's selected modules.
    """
    if subscription is None:
        return False
    if not evaluate_subscription(subscription, now).allows_access:
        return False
    if module_name is None:
        return True
    return module_name in subscribed_module_names(subscription.selected_modules)
