"""
Pydantic schemas for cost entry endpoints.
"""
from typing import Optional, Union, Any
from pydantic import BaseModel, Field

from app.core.tax import TaxType

# Inputs arrive as typed text from the cost form, but plain numbers are accepted too
NumericInput = Union[str, float, int, None]


class TaxCalculationRequest(BaseModel):
    """Request schema for calculating tax on a single cost line."""
    net_amount: NumericInput = Field(None, description="Net amount; non-numeric input counts as 0")
    tax_rate: NumericInput = Field(None, description="Tax rate in percent; non-numeric input counts as 0")
    tax_type: TaxType = Field(TaxType.EXCLUSIVE, description="exclusive, inclusive or zero_gst")
    
    class Config:
        json_schema_extra = {
            "example": {
                "net_amount": "100",
                "tax_rate": "10",
                "tax_type": "exclusive"
            }
        }


class TaxCalculationResponse(BaseModel):
    total_tax: str = Field(..., description="Tax amount, 2 decimals")
    total_amount: str = Field(..., description="Total amount, 2 decimals")


class CostEntrySchema(BaseModel):
    """A cost line as held by the cost form."""
    net_amount: NumericInput = "0"
    tax_rate: NumericInput = "0"
    tax_type: TaxType = TaxType.EXCLUSIVE
    currency: Optional[str] = None
    exchange_rate: float = 1
    total_tax: str = "0.00"
    total_amount: str = "0.00"


class CostEntryChangeRequest(BaseModel):
    """Request schema for applying one edit to a cost line."""
    entry: CostEntrySchema
    field: str = Field(..., pattern="^(net_amount|tax_rate|tax_type|currency|exchange_rate)$")
    value: Any = None
    
    class Config:
        json_schema_extra = {
            "example": {
                "entry": {"net_amount": "100", "tax_rate": "10", "tax_type": "exclusive"},
                "field": "tax_type",
                "value": "inclusive"
            }
        }
