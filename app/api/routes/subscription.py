"""
Subscription endpoints for company users.

Pricing, checkout, payment completion and status reporting.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models.user import User, COMPANY_SUPER_ADMIN, MASTER_ADMIN
from app.core.auth_dependency import get_company_user, require_roles
from app.core.subscription_lifecycle import InvalidSubscriptionDates
from app.schemas.subscription import (
    CalculateCostRequest,
    CreateSubscriptionRequest,
    CompleteSubscriptionRequest,
    FailSubscriptionRequest,
    PlanConfigResponse,
    SubscriptionResponse,
    SubscriptionStatusResponse,
)
from app.services.pricing_service import (
    PlanNotConfigured,
    UnknownModule,
    calculate_subscription_cost,
    require_active_plan,
)
from app.services import subscription_service
from app.services.subscription_service import SubscriptionNotFound, SubscriptionStateError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscription", tags=["Subscription"])


def _plan_or_404(db: Session):
    try:
        return require_active_plan(db)
    except PlanNotConfigured as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _subscription_or_404(db: Session, subscription_id: int, user: User):
    company_id = None if user.role == MASTER_ADMIN else user.company_id
    try:
        return subscription_service.get_subscription(db, subscription_id, company_id)
    except SubscriptionNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/plan-config", response_model=PlanConfigResponse)
def get_plan_config(
    user: User = Depends(get_company_user),
    db: Session = Depends(get_db)
):
    """Active plan configuration used for pricing."""
    return _plan_or_404(db)


@router.post("/calculate-cost")
def calculate_cost(
    payload: CalculateCostRequest,
    user: User = Depends(get_company_user),
    db: Session = Depends(get_db)
):
    """
    Price a subscription without creating it.
    
    Returns total_cost plus a breakdown with period totals (user_cost,
    module_cost), the daily rates (user_cost_per_day, module_cost_per_day)
    and the inputs (per_user_cost, days, users, modules).
    """
    plan = _plan_or_404(db)
    try:
        return calculate_subscription_cost(
            plan, payload.number_of_days, payload.number_of_users, payload.selected_modules
        )
    except UnknownModule as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.post("/create", status_code=status.HTTP_201_CREATED, response_model=SubscriptionResponse)
def create_subscription(
    payload: CreateSubscriptionRequest,
    user: User = Depends(require_roles(COMPANY_SUPER_ADMIN)),
    db: Session = Depends(get_db)
):
    """Create a pending subscription for the caller's company."""
    if user.company is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")

    _plan_or_404(db)
    try:
        subscription = subscription_service.create_subscription(
            db,
            user.company,
            payload.number_of_days,
            payload.number_of_users,
            payload.selected_modules,
            payload.payment_method,
        )
    except (UnknownModule, InvalidSubscriptionDates) as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    return subscription_service.serialize_subscription(subscription)


@router.post("/{subscription_id}/complete", response_model=SubscriptionResponse)
def complete_subscription(
    subscription_id: int,
    payload: CompleteSubscriptionRequest,
    user: User = Depends(require_roles(COMPANY_SUPER_ADMIN)),
    db: Session = Depends(get_db)
):
    """Record a successful payment and activate (or extend) the subscription."""
    subscription = _subscription_or_404(db, subscription_id, user)
    try:
        subscription = subscription_service.complete_subscription(
            db, subscription, payload.payment_transaction_id
        )
    except (SubscriptionStateError, InvalidSubscriptionDates) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return subscription_service.serialize_subscription(subscription)


@router.post("/{subscription_id}/fail", response_model=SubscriptionResponse)
def fail_subscription(
    subscription_id: int,
    payload: FailSubscriptionRequest,
    user: User = Depends(require_roles(COMPANY_SUPER_ADMIN)),
    db: Session = Depends(get_db)
):
    subscription = _subscription_or_404(db, subscription_id, user)
    try:
        subscription = subscription_service.fail_subscription(db, subscription, payload.reason)
    except SubscriptionStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return subscription_service.serialize_subscription(subscription)


@router.post("/{subscription_id}/refund", response_model=SubscriptionResponse)
def refund_subscription(
    subscription_id: int,
    user: User = Depends(require_roles(MASTER_ADMIN)),
    db: Session = Depends(get_db)
):
    subscription = _subscription_or_404(db, subscription_id, user)
    try:
        subscription = subscription_service.refund_subscription(db, subscription)
    except SubscriptionStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return subscription_service.serialize_subscription(subscription)


@router.get("/history", response_model=List[SubscriptionResponse])
def get_subscription_history(
    user: User = Depends(get_company_user),
    db: Session = Depends(get_db)
):
    """All subscriptions of the caller's company, newest first."""
    return [
        subscription_service.serialize_subscription(s)
        for s in subscription_service.get_subscription_history(db, user.company_id)
    ]


@router.get("/status", response_model=SubscriptionStatusResponse)
def get_subscription_status(
    user: User = Depends(get_company_user),
    db: Session = Depends(get_db)
):
    """Current subscription state of the caller's company."""
    result = subscription_service.get_subscription_status(db, user.company_id)
    logger.debug(
        f"Subscription status requested: user_id={user.id}, status={result['subscription_status']}"
    )
    return result
