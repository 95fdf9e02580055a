"""
Unit tests for subscription lifecycle evaluation.
"""
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from app.core.subscription_lifecycle import (
    InvalidSubscriptionDates,
    SubscriptionStatus,
    compute_status,
    default_grace_period_end,
    evaluate_subscription,
    grace_days_remaining,
    has_feature_access,
    subscribed_module_names,
    validate_subscription_dates,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_subscription(end_offset, grace_offset=None, modules=("inspection",)):
    return SimpleNamespace(
        subscription_start_date=NOW - timedelta(days=30),
        subscription_end_date=NOW + end_offset,
        grace_period_end=NOW + grace_offset if grace_offset is not None else None,
        selected_modules=[{"module_name": m, "cost": 1.0} for m in modules],
    )


def test_active_before_end_date():
    state = evaluate_subscription(make_subscription(timedelta(days=10)), NOW)
    assert state.status == SubscriptionStatus.ACTIVE
    assert state.days_remaining == 10


def test_days_remaining_rounds_partial_days_up():
    state = evaluate_subscription(make_subscription(timedelta(days=2, hours=1)), NOW)
    assert state.days_remaining == 3


def test_one_second_before_end_is_active():
    state = evaluate_subscription(make_subscription(timedelta(seconds=1)), NOW)
    assert state.status == SubscriptionStatus.ACTIVE
    assert state.days_remaining == 1


def test_exactly_at_end_is_not_active():
    state = evaluate_subscription(make_subscription(timedelta(0)), NOW)
    assert state.status == SubscriptionStatus.EXPIRED
    assert state.days_remaining == 0


def test_exactly_at_end_with_grace_is_grace_period():
    state = evaluate_subscription(make_subscription(timedelta(0), timedelta(days=2)), NOW)
    assert state.status == SubscriptionStatus.GRACE_PERIOD


def test_grace_period_after_end():
    """End a day ago, grace ends in two days -> grace_period."""
    state = evaluate_subscription(make_subscription(-timedelta(days=1), timedelta(days=2)), NOW)
    assert state.status == SubscriptionStatus.GRACE_PERIOD
    assert state.days_remaining == 0


def test_expired_without_grace():
    """End ten days ago, no grace -> expired with 0 days."""
    state = evaluate_subscription(make_subscription(-timedelta(days=10)), NOW)
    assert state.status == SubscriptionStatus.EXPIRED
    assert state.days_remaining == 0


def test_expired_after_grace_lapses():
    state = evaluate_subscription(make_subscription(-timedelta(days=5), -timedelta(days=3)), NOW)
    assert state.status == SubscriptionStatus.EXPIRED


def test_naive_datetimes_are_read_as_utc():
    end = (NOW + timedelta(hours=5)).replace(tzinfo=None)
    state = compute_status(end, None, NOW.replace(tzinfo=None))
    assert state.status == SubscriptionStatus.ACTIVE
    assert state.days_remaining == 1


def test_status_values_are_wire_strings():
    assert SubscriptionStatus.GRACE_PERIOD.value == "grace_period"
    assert {s.value for s in SubscriptionStatus} == {"active", "grace_period", "expired"}


def test_grace_days_remaining_while_active_is_zero():
    assert grace_days_remaining(make_subscription(timedelta(days=3), timedelta(days=5)), NOW) == 0


def test_grace_days_remaining_inside_window():
    sub = make_subscription(-timedelta(hours=12), timedelta(days=1, hours=12))
    assert grace_days_remaining(sub, NOW) == 2


def test_grace_days_remaining_after_window():
    assert grace_days_remaining(make_subscription(-timedelta(days=4), -timedelta(days=2)), NOW) == -1
    assert grace_days_remaining(make_subscription(-timedelta(days=4)), NOW) == -1


def test_default_grace_period_end_adds_configured_days():
    end = NOW + timedelta(days=30)
    assert default_grace_period_end(end) == end + timedelta(days=2)
    assert default_grace_period_end(end, grace_days=7) == end + timedelta(days=7)


def test_validate_rejects_end_before_start():
    with pytest.raises(InvalidSubscriptionDates):
        validate_subscription_dates(NOW, NOW - timedelta(days=1))


def test_validate_rejects_zero_length_window():
    with pytest.raises(InvalidSubscriptionDates):
        validate_subscription_dates(NOW, NOW)


def test_validate_rejects_grace_before_end():
    with pytest.raises(InvalidSubscriptionDates):
        validate_subscription_dates(NOW, NOW + timedelta(days=30), NOW + timedelta(days=29))


def test_validate_accepts_well_ordered_dates():
    validate_subscription_dates(NOW, NOW + timedelta(days=30), NOW + timedelta(days=30))


def test_feature_access_requires_live_subscription_and_module():
    live = make_subscription(timedelta(days=3), modules=("inspection", "tradein"))
    assert has_feature_access(live, "tradein", NOW)
    assert not has_feature_access(live, "workshop", NOW)
    assert has_feature_access(live, None, NOW)


def test_feature_access_during_grace_period():
    in_grace = make_subscription(-timedelta(days=1), timedelta(days=1))
    assert has_feature_access(in_grace, "inspection", NOW)


def test_feature_access_denied_when_expired_or_missing():
    assert not has_feature_access(make_subscription(-timedelta(days=10)), "inspection", NOW)
    assert not has_feature_access(None, "inspection", NOW)


def test_subscribed_module_names_accepts_dicts_and_names():
    assert subscribed_module_names([{"module_name": "a", "cost": 1}, "b", {"cost": 2}]) == ["a", "b"]
    assert subscribed_module_names(None) == []
