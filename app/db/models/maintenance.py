from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON
from sqlalchemy.sql import func
from app.db.base import Base


class MaintenanceSetting(Base):
    """Single-row maintenance configuration (site-wide flag plus per-module entries)."""
    __tablename__ = "maintenance_settings"

    id = Column(Integer, primary_key=True, index=True)
    is_enabled = Column(Boolean, nullable=False, default=False)
    message = Column(String, nullable=False, default="")
    end_time = Column(DateTime(timezone=True), nullable=True)
    modules = Column(JSON, nullable=False, default=list)  # [{"module_name", "is_enabled", "message", "end_time"}]
    updated_by = Column(Integer, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
