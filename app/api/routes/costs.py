"""
Cost entry endpoints.

Stateless tax calculation for cost form lines.
"""
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status

from app.db.models.user import User
from app.core.auth_dependency import get_current_user_obj
from app.core.tax import CostEntry, InvalidTaxRate, apply_cost_entry_change, calculate_tax
from app.schemas.costs import (
    CostEntryChangeRequest,
    CostEntrySchema,
    TaxCalculationRequest,
    TaxCalculationResponse,
)

router = APIRouter(prefix="/costs", tags=["Costs"])


@router.post("/calculate-tax", response_model=TaxCalculationResponse)
def calculate_tax_endpoint(
    payload: TaxCalculationRequest,
    user: User = Depends(get_current_user_obj)
):
    """Tax and total for one cost line."""
    try:
        breakdown = calculate_tax(payload.net_amount, payload.tax_rate, payload.tax_type)
    except InvalidTaxRate as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return asdict(breakdown)


@router.post("/apply-change", response_model=CostEntrySchema)
def apply_change(
    payload: CostEntryChangeRequest,
    user: User = Depends(get_current_user_obj)
):
    """Apply one field edit to a cost line and return it with recomputed totals."""
    entry = CostEntry(**payload.entry.model_dump())
    try:
        updated = apply_cost_entry_change(entry, payload.field, payload.value)
    except ValueError as e:
        # InvalidTaxRate and unknown tax types both land here
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return asdict(updated)
