"""Tests for amount and quantity parsing."""

from decimal import Decimal

import pytest

from tabsplit.domain.errors import DivisionGuardError, ParseError
from tabsplit.receipt.numbers import (
    format_amount,
    normalize_amount,
    parse_quantity,
    quantize_cents,
    unit_price_from_line_total,
)


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("3,50", Decimal("3.50")),
        ("11,", Decimal("11")),
        ("9,-", Decimal("9.00")),
        ("9.-", Decimal("9.00")),
        ("12-", Decimal("12.00")),
        ("5.00", Decimal("5.00")),
        ("€ 5,00", Decimal("5.00")),
        ("€5,00", Decimal("5.00")),
        ("EUR5,00", Decimal("5.00")),
        ("5,00 EUR", Decimal("5.00")),
        ("$ 12.5", Decimal("12.5")),
        ("  7  ", Decimal("7")),
    ],
)
def test_normalize_amount_accepts_receipt_notations(token: str, expected: Decimal) -> None:
    assert normalize_amount(token) == expected


@pytest.mark.parametrize("token", ["", "   ", "-", "abc", "NaN", "Infinity", "-3,50", "+2", "1,2,3", "€"])
def test_normalize_amount_rejects_non_amounts(token: str) -> None:
    with pytest.raises(ParseError):
        normalize_amount(token)


def test_normalize_amount_rejects_non_text() -> None:
    with pytest.raises(ParseError):
        normalize_amount(3.5)  # type: ignore[arg-type]


def test_parse_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        normalize_amount("abc")


@pytest.mark.parametrize(("token", "expected"), [("2", 2), ("2x", 2), ("3 X", 3), ("4×", 4), ("0", 0)])
def test_parse_quantity(token: str, expected: int) -> None:
    assert parse_quantity(token) == expected


@pytest.mark.parametrize("token", ["x", "two", "2.5", ""])
def test_parse_quantity_rejects_non_quantities(token: str) -> None:
    with pytest.raises(ParseError):
        parse_quantity(token)


def test_unit_price_from_line_total_rounds_to_cents() -> None:
    assert unit_price_from_line_total(Decimal("5.00"), 2) == Decimal("2.50")
    assert unit_price_from_line_total(Decimal("10.00"), 3) == Decimal("3.33")


def test_unit_price_from_line_total_guards_zero_quantity() -> None:
    with pytest.raises(DivisionGuardError):
        unit_price_from_line_total(Decimal("5.00"), 0)


def test_quantize_cents_rounds_half_up() -> None:
    assert quantize_cents(Decimal("2.005")) == Decimal("2.01")
    assert quantize_cents(Decimal("2.004")) == Decimal("2.00")


def test_format_amount_always_has_two_decimals() -> None:
    assert format_amount(Decimal("3.5")) == "3.50"
    assert format_amount(Decimal("11")) == "11.00"
    assert format_amount(None) == "-"
