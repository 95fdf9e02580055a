"""
Module access endpoint.

Lets the frontend ask whether the caller may open a module before routing
to it.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models.user import User
from app.core.auth_dependency import get_current_user_obj
from app.core.gating import check_module_access

router = APIRouter(prefix="/modules", tags=["Modules"])


@router.get("/{module_name}/access")
def get_module_access(
    module_name: str,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    """
    Run the maintenance, role and subscription gates for a module.
    
    Returns 200 with the subscription state when access is allowed; the
    gates raise 503, 403 or 402 otherwise.
    """
    state = check_module_access(db, user, module_name)
    return {"module_name": module_name, "allowed": True, **state}
