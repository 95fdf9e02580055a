"""
Cost entry tax calculation.

Computes tax and totals for a single cost line from its net amount, tax
rate and tax treatment. Derived values are always recomputed from the
full input tuple; they are never edited on their own.
"""
import enum
import math
import re
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Optional

TWO_PLACES = Decimal("0.01")
HUNDRED = Decimal("100")

# Enough digits to quantize the product of any two finite doubles to cents
PRECISION = 700

# Leading decimal number, the same prefix a float parser would accept
_NUMBER_PREFIX = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


class TaxType(str, enum.Enum):
    EXCLUSIVE = "exclusive"
    INCLUSIVE = "inclusive"
    ZERO_GST = "zero_gst"


class InvalidTaxRate(ValueError):
    """Raised for tax rates outside the supported domain (negative rates)."""


@dataclass(frozen=True)
class TaxBreakdown:
    total_tax: str
    total_amount: str


@dataclass(frozen=True)
class CostEntry:
    net_amount: str = "0"
    tax_rate: str = "0"
    tax_type: TaxType = TaxType.EXCLUSIVE
    currency: Optional[str] = None
    exchange_rate: float = 1
    total_tax: str = "0.00"
    total_amount: str = "0.00"


def parse_number(value: Any) -> Decimal:
    """
    Parse user input into a Decimal.

    Empty, missing, non-numeric and non-finite input all become 0. Text with
    trailing garbage keeps its numeric prefix ("12.5kg" -> 12.5).
    """
    if value is None or isinstance(value, bool):
        return Decimal(0)
    if isinstance(value, (int, Decimal)):
        return _finite_or_zero(Decimal(value))
    if isinstance(value, float):
        return Decimal(str(value)) if math.isfinite(value) else Decimal(0)

    match = _NUMBER_PREFIX.match(str(value))
    if not match:
        return Decimal(0)
    try:
        parsed = Decimal(match.group(0).strip())
    except InvalidOperation:
        return Decimal(0)
    return _finite_or_zero(parsed)


def _finite_or_zero(value: Decimal) -> Decimal:
    # Values beyond double range ("1e400") read as 0, like any non-finite input
    if not value.is_finite() or not math.isfinite(float(value)):
        return Decimal(0)
    return value


def format_amount(value: Decimal) -> str:
    return str(value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def calculate_tax(net_amount: Any, tax_rate: Any, tax_type: Any) -> TaxBreakdown:
    """
    Calculate tax and total for a cost line.

    Args:
        net_amount: Net amount as entered (text or number)
        tax_rate: Tax rate in percent as entered (text or number)
        tax_type: exclusive, inclusive or zero_gst

    Returns:
        TaxBreakdown with both values as 2-decimal strings

    Raises:
        InvalidTaxRate: If the parsed tax rate is negative
        ValueError: If the tax type is unknown
    """
    tax_type = TaxType(tax_type)
    net = parse_number(net_amount)
    rate = parse_number(tax_rate)

    if rate < 0:
        raise InvalidTaxRate(f"Tax rate must not be negative, got {rate}")

    with localcontext() as ctx:
        ctx.prec = PRECISION
        if tax_type == TaxType.EXCLUSIVE:
            tax = net * rate / HUNDRED
            total = net + tax
        elif tax_type == TaxType.INCLUSIVE:
            total = net
            tax = net * rate / (HUNDRED + rate)
        else:
            tax = Decimal(0)
            total = net

        return TaxBreakdown(total_tax=format_amount(tax), total_amount=format_amount(total))


def recompute_cost_entry(entry: CostEntry) -> CostEntry:
    breakdown = calculate_tax(entry.net_amount, entry.tax_rate, entry.tax_type)
    return replace(entry, total_tax=breakdown.total_tax, total_amount=breakdown.total_amount)


EDITABLE_FIELDS = ("net_amount", "tax_rate", "tax_type", "currency", "exchange_rate")


def _currency_change(entry: CostEntry, value: Any) -> CostEntry:
    """
    Apply a currency edit.

    Accepts a currency code, None, or a currency record (`code` or
    `currency_code`, plus `exchange_rate`). A record also sets the entry's
    exchange rate; a missing rate reads as 0.
    """
    if value is None or isinstance(value, str):
        return replace(entry, currency=value or None)
    if isinstance(value, dict):
        code = value.get("code") or value.get("currency_code")
        if not isinstance(code, str) or not code:
            raise ValueError("Currency record needs a 'code' or 'currency_code' string")
        return replace(entry, currency=code, exchange_rate=float(parse_number(value.get("exchange_rate"))))
    raise ValueError(f"Currency must be a code or a currency record, got {type(value).__name__}")


def apply_cost_entry_change(entry: CostEntry, field: str, value: Any) -> CostEntry:
    """
    Apply a single edit to a cost entry and recompute its derived fields.

    The recompute uses the current values of the other inputs, so each edit
    is handled on its own.
    """
    if field not in EDITABLE_FIELDS:
        raise ValueError(f"Field '{field}' cannot be edited; derived fields are recomputed")

    if field == "currency":
        return recompute_cost_entry(_currency_change(entry, value))

    if field == "tax_type":
        value = TaxType(value)
    elif field == "exchange_rate":
        value = float(parse_number(value))
    elif field in ("net_amount", "tax_rate"):
        value = "" if value is None else str(value)

    return recompute_cost_entry(replace(entry, **{field: value}))
