"""
Unit tests for cost entry tax calculation.
Tests the three tax treatments, input parsing and the edit reducer.
"""
from decimal import Decimal

import pytest

from app.core.tax import (
    CostEntry,
    InvalidTaxRate,
    TaxBreakdown,
    TaxType,
    apply_cost_entry_change,
    calculate_tax,
    parse_number,
)


def test_exclusive_adds_tax_on_top():
    """100 at 10% exclusive -> 10.00 tax, 110.00 total."""
    result = calculate_tax("100", "10", "exclusive")
    assert result == TaxBreakdown(total_tax="10.00", total_amount="110.00")


def test_inclusive_extracts_tax_from_net():
    """110 at 10% inclusive -> 10.00 tax, total stays 110.00."""
    result = calculate_tax("110", "10", "inclusive")
    assert result == TaxBreakdown(total_tax="10.00", total_amount="110.00")


@pytest.mark.parametrize("rate", ["0", "5", "15", "99.9"])
def test_zero_gst_ignores_rate(rate):
    result = calculate_tax("250.5", rate, TaxType.ZERO_GST)
    assert result.total_tax == "0.00"
    assert result.total_amount == "250.50"


@pytest.mark.parametrize("net,rate", [("100", "15"), ("19.99", "7.5"), ("0.01", "200"), ("1234.56", "0")])
def test_exclusive_total_is_net_times_rate_factor(net, rate):
    result = calculate_tax(net, rate, "exclusive")
    expected = (Decimal(net) * (1 + Decimal(rate) / 100)).quantize(Decimal("0.01"))
    assert Decimal(result.total_amount) == expected


@pytest.mark.parametrize("net,rate", [("115", "15"), ("49.99", "7.5"), ("1000", "12.5")])
def test_inclusive_tax_formula(net, rate):
    result = calculate_tax(net, rate, "inclusive")
    net_d, rate_d = Decimal(net), Decimal(rate)
    expected = (net_d * rate_d / (100 + rate_d)).quantize(Decimal("0.01"))
    assert Decimal(result.total_tax) == expected
    assert result.total_amount == str(net_d.quantize(Decimal("0.01")))


def test_inclusive_tax_rounds_half_up():
    # 1 * 5 / 105 = 0.047619... -> 0.05
    assert calculate_tax("1", "5", "inclusive").total_tax == "0.05"


def test_exclusive_rounds_half_up_on_cent_boundary():
    # 0.05 * 10 / 100 = 0.005 -> 0.01
    assert calculate_tax("0.05", "10", "exclusive").total_tax == "0.01"


def test_recompute_is_idempotent():
    first = calculate_tax("87.35", "12", "inclusive")
    second = calculate_tax("87.35", "12", "inclusive")
    assert first == second


@pytest.mark.parametrize("raw", ["", None, "abc", "   ", "--5", "NaN", "Infinity", float("nan"), float("inf")])
def test_malformed_numbers_parse_as_zero(raw):
    assert parse_number(raw) == Decimal(0)


@pytest.mark.parametrize("raw,expected", [
    ("12.5kg", Decimal("12.5")),
    ("  42", Decimal("42")),
    (".5", Decimal("0.5")),
    ("1e2", Decimal("100")),
    (7, Decimal(7)),
    (2.25, Decimal("2.25")),
    ("-3", Decimal("-3")),
])
def test_numeric_prefix_is_kept(raw, expected):
    assert parse_number(raw) == expected


def test_overflowing_number_parses_as_zero():
    assert parse_number("1e400") == Decimal(0)


def test_empty_inputs_give_zero_totals():
    assert calculate_tax("", "", "exclusive") == TaxBreakdown(total_tax="0.00", total_amount="0.00")


def test_negative_rate_is_rejected():
    with pytest.raises(InvalidTaxRate):
        calculate_tax("100", "-100", "inclusive")


def test_unknown_tax_type_is_rejected():
    with pytest.raises(ValueError):
        calculate_tax("100", "10", "vat_reverse_charge")


def test_apply_change_recomputes_with_current_values():
    entry = CostEntry(net_amount="100", tax_rate="10", tax_type=TaxType.EXCLUSIVE)

    entry = apply_cost_entry_change(entry, "net_amount", "200")
    assert entry.total_tax == "20.00"
    assert entry.total_amount == "220.00"

    entry = apply_cost_entry_change(entry, "tax_type", "inclusive")
    assert entry.net_amount == "200"
    assert entry.total_tax == "18.18"
    assert entry.total_amount == "200.00"

    entry = apply_cost_entry_change(entry, "tax_rate", "0")
    assert entry.total_tax == "0.00"
    assert entry.total_amount == "200.00"


def test_apply_change_passes_currency_through():
    entry = CostEntry(net_amount="50", tax_rate="10")
    entry = apply_cost_entry_change(entry, "currency", "NZD")
    entry = apply_cost_entry_change(entry, "exchange_rate", "0.61")

    assert entry.currency == "NZD"
    assert entry.exchange_rate == pytest.approx(0.61)
    assert entry.total_amount == "55.00"


def test_apply_change_does_not_mutate_original():
    original = CostEntry(net_amount="10", tax_rate="10")
    apply_cost_entry_change(original, "net_amount", "99")
    assert original.net_amount == "10"


def test_apply_change_rejects_derived_fields():
    with pytest.raises(ValueError):
        apply_cost_entry_change(CostEntry(), "total_amount", "5.00")


def test_apply_change_accepts_currency_record():
    entry = CostEntry(net_amount="100", tax_rate="10", exchange_rate=1)
    entry = apply_cost_entry_change(entry, "currency", {"code": "NZD", "exchange_rate": 0.61})

    assert entry.currency == "NZD"
    assert entry.exchange_rate == pytest.approx(0.61)
    assert entry.total_amount == "110.00"


def test_apply_change_accepts_stored_currency_shape():
    entry = apply_cost_entry_change(CostEntry(), "currency", {"currency_code": "AUD", "exchange_rate": "0.92"})
    assert entry.currency == "AUD"
    assert entry.exchange_rate == pytest.approx(0.92)


@pytest.mark.parametrize("value", [5, 1.5, ["NZD"], {"exchange_rate": 0.61}, {"code": 7}])
def test_apply_change_rejects_malformed_currency(value):
    with pytest.raises(ValueError):
        apply_cost_entry_change(CostEntry(), "currency", value)


def test_apply_change_clears_currency():
    entry = apply_cost_entry_change(CostEntry(currency="NZD"), "currency", None)
    assert entry.currency is None
