"""
Maintenance settings persistence.

Loads and saves the single maintenance configuration row and keeps the
in-process snapshot store in step with it.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.db.models.maintenance import MaintenanceSetting
from app.core.maintenance import (
    MaintenanceSettings,
    MaintenanceStore,
    ModuleMaintenance,
    maintenance_store,
    parse_end_time,
)

logger = logging.getLogger(__name__)


def _to_settings(row: MaintenanceSetting) -> MaintenanceSettings:
    return MaintenanceSettings(
        is_enabled=bool(row.is_enabled),
        message=row.message or "",
        end_time=parse_end_time(row.end_time),
        modules=tuple(ModuleMaintenance.from_dict(m) for m in row.modules or []),
    )


def load_settings(db: Session) -> Optional[MaintenanceSettings]:
    """Read the stored configuration, or None when none has been saved."""
    row = db.query(MaintenanceSetting).order_by(MaintenanceSetting.id.asc()).first()
    if row is None:
        return None
    return _to_settings(row)


def save_settings(
    db: Session,
    settings: MaintenanceSettings,
    user_id: Optional[int] = None,
    store: MaintenanceStore = maintenance_store,
) -> MaintenanceSettings:
    """Persist new settings and swap them into the snapshot store."""
    row = db.query(MaintenanceSetting).order_by(MaintenanceSetting.id.asc()).first()
    if row is None:
        row = MaintenanceSetting()
        db.add(row)

    row.is_enabled = settings.is_enabled
    row.message = settings.message
    row.end_time = settings.end_time
    row.modules = [m.to_dict() for m in settings.modules]
    row.updated_by = user_id
    db.commit()

    store.set(settings)
    enabled_modules = [m.module_name for m in settings.modules if m.is_enabled]
    logger.info(
        f"Maintenance settings updated by user_id={user_id}: global={settings.is_enabled}, "
        f"modules={enabled_modules}"
    )
    return settings


def get_current_settings(
    db: Session,
    store: MaintenanceStore = maintenance_store,
    force: bool = False,
) -> Optional[MaintenanceSettings]:
    """Current snapshot, reloaded from the database when the store is stale."""
    return store.refresh(lambda: load_settings(db), force=force)
