"""
Pydantic schemas for maintenance endpoints.
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field


class ModuleMaintenanceSchema(BaseModel):
    module_name: str = Field(..., min_length=1)
    is_enabled: bool = False
    message: Optional[str] = None
    end_time: Optional[datetime] = Field(None, description="Maintenance ends at this instant; empty means until disabled")


class MaintenanceSettingsSchema(BaseModel):
    """Site-wide maintenance flag plus per-module entries."""
    is_enabled: bool = False
    message: str = ""
    end_time: Optional[datetime] = None
    modules: List[ModuleMaintenanceSchema] = Field(default_factory=list)
    
    class Config:
        json_schema_extra = {
            "example": {
                "is_enabled": False,
                "message": "",
                "end_time": None,
                "modules": [
                    {
                        "module_name": "workshop",
                        "is_enabled": True,
                        "message": "Workshop quoting is being upgraded.",
                        "end_time": "2026-01-20T06:00:00Z"
                    }
                ]
            }
        }


class MaintenanceStatusResponse(BaseModel):
    """Block decision for a module (or the whole site)."""
    module_name: Optional[str] = None
    under_maintenance: bool
    message: str = ""
    end_time: Optional[datetime] = None
