"""
Pydantic schemas for subscription and plan endpoints.
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from app.db.models.subscription import PAYMENT_METHODS


class ModuleCost(BaseModel):
    """Per-day price of a module in the plan configuration."""
    module_name: str = Field(..., min_length=1, description="Module identifier")
    cost_per_module: float = Field(..., ge=0, description="Cost per day")


class PlanConfigRequest(BaseModel):
    """Request schema for saving the plan configuration."""
    per_user_cost: float = Field(..., ge=0, description="Cost per user per day")
    module_costs: List[ModuleCost] = Field(default_factory=list, description="Per-day module prices")
    currency: str = Field("USD", min_length=3, max_length=3, description="ISO 4217 currency code")
    
    class Config:
        json_schema_extra = {
            "example": {
                "per_user_cost": 1.5,
                "module_costs": [
                    {"module_name": "inspection", "cost_per_module": 2.0},
                    {"module_name": "tradein", "cost_per_module": 1.0}
                ],
                "currency": "USD"
            }
        }


class PlanConfigResponse(BaseModel):
    id: int
    per_user_cost: float
    module_costs: List[ModuleCost]
    currency: str
    is_active: bool
    
    class Config:
        from_attributes = True


class CalculateCostRequest(BaseModel):
    """Request schema for pricing a subscription."""
    number_of_days: int = Field(..., ge=1, description="Subscription length in days")
    number_of_users: int = Field(..., ge=1, description="Number of users")
    selected_modules: List[str] = Field(..., description="Module names to subscribe to")
    
    class Config:
        json_schema_extra = {
            "example": {
                "number_of_days": 30,
                "number_of_users": 5,
                "selected_modules": ["inspection", "tradein"]
            }
        }


class CreateSubscriptionRequest(CalculateCostRequest):
    """Request schema for creating a pending subscription."""
    payment_method: Optional[str] = Field(None, pattern=f"^({'|'.join(PAYMENT_METHODS)})$", description="Payment gateway")


class CompleteSubscriptionRequest(BaseModel):
    payment_transaction_id: Optional[str] = Field(None, description="Gateway transaction reference")


class FailSubscriptionRequest(BaseModel):
    reason: Optional[str] = Field(None, description="Gateway failure reason")


class SelectedModule(BaseModel):
    module_name: str
    cost: float


class SubscriptionResponse(BaseModel):
    """A subscription with its derived status fields."""
    id: int
    company_id: int
    number_of_days: int
    number_of_users: int
    selected_modules: List[SelectedModule]
    total_amount: float
    subscription_start_date: datetime
    subscription_end_date: datetime
    grace_period_end: Optional[datetime] = None
    payment_status: str
    payment_method: Optional[str] = None
    is_renewal: bool
    is_active: bool
    subscription_status: str = Field(..., description="active, grace_period or expired")
    days_remaining: int
    created_at: Optional[datetime] = None


class SubscriptionStatusResponse(BaseModel):
    """Response schema for GET /subscription/status."""
    has_subscription: bool
    subscription_status: str
    days_remaining: int
    in_grace_period: bool
    grace_period_days: int = Field(..., description="0 before expiry, -1 once the grace window has lapsed")
    is_expired: bool
    subscription: Optional[SubscriptionResponse] = None
