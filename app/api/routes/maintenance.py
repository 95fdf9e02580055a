"""
Public maintenance endpoints.

Clients poll these to decide whether to show the maintenance page.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.core.maintenance import check_maintenance
from app.schemas.maintenance import MaintenanceSettingsSchema, MaintenanceStatusResponse
from app.services.maintenance_service import get_current_settings

router = APIRouter(prefix="/maintenance", tags=["Maintenance"])


def _status_response(db: Session, module_name: Optional[str]) -> dict:
    result = check_maintenance(get_current_settings(db), module_name)
    return {
        "module_name": module_name,
        "under_maintenance": result.blocked,
        "message": result.message,
        "end_time": result.end_time,
    }


@router.get("/public", response_model=MaintenanceSettingsSchema)
def get_public_settings(db: Session = Depends(get_db)):
    """Current maintenance settings; defaults when none are configured."""
    settings = get_current_settings(db)
    if settings is None:
        return MaintenanceSettingsSchema()
    return settings.to_dict()


@router.get("/status", response_model=MaintenanceStatusResponse)
def get_site_status(db: Session = Depends(get_db)):
    return _status_response(db, None)


@router.get("/modules/{module_name}", response_model=MaintenanceStatusResponse)
def get_module_status(module_name: str, db: Session = Depends(get_db)):
    return _status_response(db, module_name)
