"""
Subscription service.

Handles the subscription lifecycle for a company: creation on checkout,
payment completion (activation or renewal), failure, refund, status
reporting and the periodic sweep that deactivates lapsed subscriptions.
"""
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Any

from sqlalchemy.orm import Session

from app.db.models.company import Company
from app.db.models.subscription import Subscription
from app.core.subscription_lifecycle import (
    SubscriptionStatus,
    as_utc,
    default_grace_period_end,
    evaluate_subscription,
    grace_days_remaining,
    utcnow,
    validate_subscription_dates,
)
from app.core.logging_config import format_log_fields
from app.services.pricing_service import require_active_plan, calculate_subscription_cost

logger = logging.getLogger(__name__)


class SubscriptionNotFound(LookupError):
    """Raised when a subscription does not exist for the requesting company."""


class SubscriptionStateError(ValueError):
    """Raised when a payment transition is not allowed from the current state."""


def get_subscription(db: Session, subscription_id: int, company_id: Optional[int] = None) -> Subscription:
    query = db.query(Subscription).filter(Subscription.id == subscription_id)
    if company_id is not None:
        query = query.filter(Subscription.company_id == company_id)
    subscription = query.first()
    if not subscription:
        raise SubscriptionNotFound(f"Subscription {subscription_id} not found")
    return subscription


def get_current_subscription(db: Session, company_id: int) -> Optional[Subscription]:
    """Latest paid, active subscription of a company (whatever its derived status)."""
    return (
        db.query(Subscription)
        .filter(
            Subscription.company_id == company_id,
            Subscription.payment_status == "completed",
            Subscription.is_active.is_(True),
        )
        .order_by(Subscription.subscription_end_date.desc(), Subscription.id.desc())
        .first()
    )


def get_subscription_history(db: Session, company_id: int) -> List[Subscription]:
    return (
        db.query(Subscription)
        .filter(Subscription.company_id == company_id)
        .order_by(Subscription.created_at.desc(), Subscription.id.desc())
        .all()
    )


def create_subscription(
    db: Session,
    company: Company,
    number_of_days: int,
    number_of_users: int,
    module_names: List[str],
    payment_method: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Subscription:
    """
    Create a pending subscription priced from the active plan.

    Dates are provisional until payment completes; completion may move them
    forward when the subscription renews a live one.
    """
    now = as_utc(now) or utcnow()
    plan = require_active_plan(db)
    cost = calculate_subscription_cost(plan, number_of_days, number_of_users, module_names)

    start_date = now
    end_date = start_date + timedelta(days=number_of_days)
    validate_subscription_dates(start_date, end_date)

    current = get_current_subscription(db, company.id)
    is_renewal = current is not None and evaluate_subscription(current, now).allows_access

    subscription = Subscription(
        company_id=company.id,
        number_of_days=number_of_days,
        number_of_users=number_of_users,
        selected_modules=cost["breakdown"]["modules"],
        total_amount=cost["total_cost"],
        subscription_start_date=start_date,
        subscription_end_date=end_date,
        payment_status="pending",
        payment_method=payment_method,
        is_renewal=is_renewal,
        is_active=False,
    )
    db.add(subscription)
    db.commit()
    db.refresh(subscription)

    logger.info(
        f"Subscription created: subscription_id={subscription.id}, company_id={company.id}, "
        f"amount={subscription.total_amount}, days={number_of_days}, users={number_of_users}, "
        f"modules={module_names}, renewal={is_renewal}"
    )
    return subscription


def complete_subscription(
    db: Session,
    subscription: Subscription,
    payment_transaction_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Subscription:
    """
    Mark a pending subscription as paid and activate it.

    When the company still has a subscription running, the new one starts
    at its end date (extension); otherwise it starts now. The grace period
    is stamped from the new end date and any previous subscription is
    deactivated.
    """
    if subscription.payment_status != "pending":
        raise SubscriptionStateError(
            f"Subscription {subscription.id} is {subscription.payment_status}, expected pending"
        )

    now = as_utc(now) or utcnow()
    current = get_current_subscription(db, subscription.company_id)

    start_date = now
    if current is not None and current.id != subscription.id:
        if evaluate_subscription(current, now).status == SubscriptionStatus.ACTIVE:
            start_date = as_utc(current.subscription_end_date)

    end_date = start_date + timedelta(days=subscription.number_of_days)
    grace_period_end = default_grace_period_end(end_date)
    validate_subscription_dates(start_date, end_date, grace_period_end)

    previous = (
        db.query(Subscription)
        .filter(
            Subscription.company_id == subscription.company_id,
            Subscription.id != subscription.id,
            Subscription.is_active.is_(True),
        )
        .all()
    )
    for old in previous:
        old.is_active = False

    subscription.subscription_start_date = start_date
    subscription.subscription_end_date = end_date
    subscription.grace_period_end = grace_period_end
    subscription.payment_status = "completed"
    subscription.payment_transaction_id = payment_transaction_id
    subscription.is_active = True
    db.commit()
    db.refresh(subscription)

    fields = format_log_fields(
        subscription_id=subscription.id,
        company_id=subscription.company_id,
        payment_transaction_id=payment_transaction_id,
        start=start_date.isoformat(),
        end=end_date.isoformat(),
        superseded=len(previous),
    )
    logger.info(f"Payment completed: {fields}")
    return subscription


def fail_subscription(db: Session, subscription: Subscription, reason: Optional[str] = None) -> Subscription:
    if subscription.payment_status != "pending":
        raise SubscriptionStateError(
            f"Subscription {subscription.id} is {subscription.payment_status}, expected pending"
        )
    subscription.payment_status = "failed"
    subscription.is_active = False
    db.commit()
    db.refresh(subscription)
    logger.warning(f"Payment failed: subscription_id={subscription.id}, reason={reason}")
    return subscription


def refund_subscription(db: Session, subscription: Subscription) -> Subscription:
    if subscription.payment_status != "completed":
        raise SubscriptionStateError(
            f"Subscription {subscription.id} is {subscription.payment_status}, expected completed"
        )
    subscription.payment_status = "refunded"
    subscription.is_active = False
    db.commit()
    db.refresh(subscription)
    logger.info(f"Subscription refunded: subscription_id={subscription.id}")
    return subscription


def serialize_subscription(subscription: Subscription, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Stored fields plus the fields derived at `now`."""
    state = evaluate_subscription(subscription, now)
    return {
        "id": subscription.id,
        "company_id": subscription.company_id,
        "number_of_days": subscription.number_of_days,
        "number_of_users": subscription.number_of_users,
        "selected_modules": subscription.selected_modules or [],
        "total_amount": subscription.total_amount,
        "subscription_start_date": as_utc(subscription.subscription_start_date),
        "subscription_end_date": as_utc(subscription.subscription_end_date),
        "grace_period_end": as_utc(subscription.grace_period_end),
        "payment_status": subscription.payment_status,
        "payment_method": subscription.payment_method,
        "is_renewal": subscription.is_renewal,
        "is_active": subscription.is_active,
        "subscription_status": state.status.value,
        "days_remaining": state.days_remaining,
        "created_at": as_utc(subscription.created_at),
    }


def get_subscription_status(db: Session, company_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Current subscription summary for a company.

    A company without a paid subscription reports as expired.
    """
    now = as_utc(now) or utcnow()
    subscription = get_current_subscription(db, company_id)
    if subscription is None:
        return {
            "has_subscription": False,
            "subscription_status": SubscriptionStatus.EXPIRED.value,
            "days_remaining": 0,
            "in_grace_period": False,
            "grace_period_days": -1,
            "is_expired": True,
            "subscription": None,
        }

    state = evaluate_subscription(subscription, now)
    return {
        "has_subscription": True,
        "subscription_status": state.status.value,
        "days_remaining": state.days_remaining,
        "in_grace_period": state.status == SubscriptionStatus.GRACE_PERIOD,
        "grace_period_days": grace_days_remaining(subscription, now),
        "is_expired": state.status == SubscriptionStatus.EXPIRED,
        "subscription": serialize_subscription(subscription, now),
    }


def expire_lapsed_subscriptions(db: Session, now: Optional[datetime] = None) -> int:
    """
    Deactivate paid subscriptions whose grace window has lapsed.

    Returns:
        Number of subscriptions deactivated
    """
    now = as_utc(now) or utcnow()
    candidates = (
        db.query(Subscription)
        .filter(
            Subscription.payment_status == "completed",
            Subscription.is_active.is_(True),
        )
        .all()
    )

    expired = 0
    for subscription in candidates:
        if evaluate_subscription(subscription, now).status == SubscriptionStatus.EXPIRED:
            subscription.is_active = False
            expired += 1
            logger.info(
                f"Subscription expired: subscription_id={subscription.id}, company_id={subscription.company_id}"
            )

    if expired:
        db.commit()
    return expired
