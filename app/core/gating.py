"""
Module access gating.

Combines the three checks that guard every module route:
1. Maintenance: the site or module is under maintenance (503)
2. Role access: company admins need the module in their module_access (403)
3. Subscription: the company's subscription must be active or in its
   grace period and include the module (402)

Master admins bypass all three. Company super admins bypass the role check.
"""
import logging
from datetime import datetime
from typing import Optional, Dict, Any

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_current_user_obj
from app.core.config import FRONTEND_URL
from app.core.maintenance import MaintenanceSettings, check_maintenance
from app.core.subscription_lifecycle import (
    SubscriptionStatus,
    evaluate_subscription,
    has_feature_access,
    utcnow,
)
from app.db.models.user import User, MASTER_ADMIN, COMPANY_SUPER_ADMIN, COMPANY_ADMIN
from app.db.session import get_db
from app.services.maintenance_service import get_current_settings
from app.services.subscription_service import get_current_subscription

logger = logging.getLogger(__name__)


def has_module_role_access(user: User, module_name: Optional[str]) -> bool:
    """Role-based module access, independent of subscription state."""
    if user.role in (MASTER_ADMIN, COMPANY_SUPER_ADMIN):
        return True
    if user.role == COMPANY_ADMIN:
        granted = user.module_access or []
        if not granted:
            return False
        return module_name is None or module_name in granted
    return False


def enforce_maintenance(
    user: User,
    settings: Optional[MaintenanceSettings],
    module_name: Optional[str],
    now: Optional[datetime] = None,
) -> None:
    """Raise 503 while the site or module is under maintenance."""
    if user.role == MASTER_ADMIN:
        return

    maintenance = check_maintenance(settings, module_name, now)
    if not maintenance.blocked:
        return

    logger.warning(f"Maintenance block: user_id={user.id}, module={module_name}")
    raise HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={
            "detail": maintenance.message,
            "code": "MAINTENANCE",
            "module": module_name,
            "end_time": maintenance.end_time.isoformat() if maintenance.end_time else None,
        }
    )


def enforce_module_role(user: User, module_name: Optional[str]) -> None:
    """Raise 403 when a company admin has not been granted the module."""
    if has_module_role_access(user, module_name):
        return

    if not user.module_access:
        logger.warning(f"No module access: user_id={user.id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "detail": "No module access granted. Please contact your administrator.",
                "code": "NO_MODULE_ACCESS",
            }
        )

    logger.warning(f"Module access denied: user_id={user.id}, module={module_name}")
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "detail": f"Access denied. Required module: {module_name}",
            "code": "INSUFFICIENT_MODULE_ACCESS",
            "module": module_name,
        }
    )


def enforce_subscription(
    db: Session,
    user: User,
    module_name: Optional[str],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Raise 402 unless the user's company subscription covers the module.

    Returns:
        The subscription state for the caller to report (status, days_remaining)
    """
    if user.role == MASTER_ADMIN:
        return {"subscription_status": None, "days_remaining": None}

    now = now or utcnow()
    subscription = get_current_subscription(db, user.company_id) if user.company_id else None

    if not has_feature_access(subscription, None, now):
        logger.warning(f"Subscription expired: user_id={user.id}, company_id={user.company_id}")
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={
                "detail": "Your subscription has expired. Renew to regain access.",
                "code": "SUBSCRIPTION_EXPIRED",
                "module": module_name,
                "upgrade_url": f"{FRONTEND_URL}/company/subscription",
            }
        )

    if module_name and not has_feature_access(subscription, module_name, now):
        logger.warning(
            f"Module not subscribed: user_id={user.id}, company_id={user.company_id}, module={module_name}"
        )
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={
                "detail": f"Your subscription does not include the {module_name} module.",
                "code": "MODULE_NOT_SUBSCRIBED",
                "module": module_name,
                "upgrade_url": f"{FRONTEND_URL}/company/subscription",
            }
        )

    state = evaluate_subscription(subscription, now)
    return {
        "subscription_status": state.status.value,
        "days_remaining": state.days_remaining,
        "in_grace_period": state.status == SubscriptionStatus.GRACE_PERIOD,
    }


def check_module_access(
    db: Session,
    user: User,
    module_name: Optional[str],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Run every gate in order and return the subscription state on success."""
    now = now or utcnow()
    enforce_maintenance(user, get_current_settings(db), module_name, now)
    enforce_module_role(user, module_name)
    return enforce_subscription(db, user, module_name, now)


def require_module(module_name: Optional[str] = None):
    """
    Dependency that guards a route behind the module gates.

    Args:
        module_name: Module the route belongs to; None checks the site and
            subscription only
    """
    def module_checker(
        user: User = Depends(get_current_user_obj),
        db: Session = Depends(get_db)
    ) -> User:
        check_module_access(db, user, module_name)
        return user

    return module_checker
