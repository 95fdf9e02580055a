"""
Master admin endpoints.

Plan pricing configuration and maintenance settings.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models.user import User, MASTER_ADMIN
from app.core.auth_dependency import require_roles
from app.core.maintenance import MaintenanceSettings
from app.schemas.maintenance import MaintenanceSettingsSchema
from app.schemas.subscription import PlanConfigRequest, PlanConfigResponse
from app.services.maintenance_service import get_current_settings, save_settings
from app.services.pricing_service import get_active_plan, save_plan_config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/master", tags=["Master Admin"])

require_master = require_roles(MASTER_ADMIN)


@router.get("/plans", response_model=PlanConfigResponse)
def get_plans(
    user: User = Depends(require_master),
    db: Session = Depends(get_db)
):
    plan = get_active_plan(db)
    if plan is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active plan configuration found")
    return plan


@router.post("/plans", response_model=PlanConfigResponse)
def save_plans(
    payload: PlanConfigRequest,
    user: User = Depends(require_master),
    db: Session = Depends(get_db)
):
    """Create or update the active plan configuration."""
    return save_plan_config(
        db,
        per_user_cost=payload.per_user_cost,
        module_costs=[m.model_dump() for m in payload.module_costs],
        currency=payload.currency.upper(),
        user_id=user.id,
    )


@router.get("/maintenance", response_model=MaintenanceSettingsSchema)
def get_maintenance(
    user: User = Depends(require_master),
    db: Session = Depends(get_db)
):
    settings = get_current_settings(db, force=True)
    if settings is None:
        return MaintenanceSettingsSchema()
    return settings.to_dict()


@router.put("/maintenance", response_model=MaintenanceSettingsSchema)
def update_maintenance(
    payload: MaintenanceSettingsSchema,
    user: User = Depends(require_master),
    db: Session = Depends(get_db)
):
    """Replace the maintenance settings. Takes effect immediately."""
    settings = MaintenanceSettings.from_dict(payload.model_dump())
    save_settings(db, settings, user_id=user.id)
    return settings.to_dict()
