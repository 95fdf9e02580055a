"""
Plan pricing service.

Handles the active plan configuration and subscription cost calculation.
All costs are per day: users are charged `per_user_cost` each, and every
selected module adds its `cost_per_module`.
"""
import logging
from typing import Dict, List, Optional, Any

from sqlalchemy.orm import Session

from app.db.models.plan import Plan

logger = logging.getLogger(__name__)


class PlanNotConfigured(LookupError):
    """Raised when no active plan configuration exists."""


class UnknownModule(ValueError):
    """Raised when a requested module is not offered by the active plan."""


def get_active_plan(db: Session) -> Optional[Plan]:
    return (
        db.query(Plan)
        .filter(Plan.is_active.is_(True))
        .order_by(Plan.id.desc())
        .first()
    )


def require_active_plan(db: Session) -> Plan:
    plan = get_active_plan(db)
    if plan is None:
        raise PlanNotConfigured("No active plan configuration found")
    return plan


def save_plan_config(
    db: Session,
    per_user_cost: float,
    module_costs: List[Dict[str, Any]],
    currency: str = "USD",
    user_id: Optional[int] = None,
) -> Plan:
    """
    Create or update the active plan configuration.

    There is only ever one active plan; saving updates it in place.
    """
    plan = get_active_plan(db)
    if plan:
        plan.per_user_cost = per_user_cost
        plan.module_costs = module_costs
        plan.currency = currency
        action = "updated"
    else:
        plan = Plan(
            per_user_cost=per_user_cost,
            module_costs=module_costs,
            currency=currency,
            created_by=user_id,
            is_active=True,
        )
        db.add(plan)
        action = "created"

    db.commit()
    db.refresh(plan)
    logger.info(
        f"Plan configuration {action}: plan_id={plan.id}, per_user_cost={per_user_cost}, "
        f"modules={len(module_costs)}, by user_id={user_id}"
    )
    return plan


def price_modules(plan: Plan, module_names: List[str]) -> List[Dict[str, Any]]:
    """Resolve module names to `{module_name, cost}` entries using the plan's per-day costs."""
    priced = []
    for name in module_names:
        cost = plan.module_cost(name)
        if cost is None:
            raise UnknownModule(f"Module '{name}' is not offered by the active plan")
        priced.append({"module_name": name, "cost": cost})
    return priced


def calculate_subscription_cost(
    plan: Plan,
    number_of_days: int,
    number_of_users: int,
    module_names: List[str],
) -> Dict[str, Any]:
    """
    Calculate the total cost of a subscription.

    Args:
        plan: Active plan configuration
        number_of_days: Subscription length in days
        number_of_users: Number of users
        module_names: Selected module names

    Returns:
        Dictionary with total_cost and a breakdown: user_cost and module_cost
        cover the whole period, the *_per_day fields give the daily rate
    """
    if number_of_days < 1 or number_of_users < 1:
        raise ValueError("number_of_days and number_of_users must be at least 1")

    modules = price_modules(plan, module_names)
    per_user_cost = float(plan.per_user_cost or 0)
    user_cost_per_day = per_user_cost * number_of_users
    module_cost_per_day = sum(m["cost"] for m in modules)
    user_cost = round(user_cost_per_day * number_of_days, 2)
    module_cost = round(module_cost_per_day * number_of_days, 2)
    total_cost = round(user_cost + module_cost, 2)

    return {
        "total_cost": total_cost,
        "currency": plan.currency,
        "breakdown": {
            "user_cost": user_cost,
            "module_cost": module_cost,
            "user_cost_per_day": user_cost_per_day,
            "module_cost_per_day": module_cost_per_day,
            "per_user_cost": per_user_cost,
            "days": number_of_days,
            "users": number_of_users,
            "modules": modules,
        },
    }
