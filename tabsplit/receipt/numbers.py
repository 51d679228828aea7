"""Locale-tolerant amount and quantity parsing for receipt and order text."""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from tabsplit.domain.errors import DivisionGuardError, ParseError

CENT = Decimal("0.01")

CURRENCY_PATTERN = re.compile(r"€|\$|EUR", re.IGNORECASE)
_PLAIN_DECIMAL = re.compile(r"^\d+(?:\.\d+)?$")
_QUANTITY = re.compile(r"^(\d+)\s*[xX×]?$")


def normalize_amount(token: str) -> Decimal:
    """
    Parse a currency token such as ``"3,50"``, ``"11,"``, ``"9,-"`` or ``"€ 5.00"``.

    Rules, in order:
    1. A trailing ``-`` (or ``,-``) means "no cents" and becomes ``.00``.
    2. A trailing bare ``.`` or ``,`` is dropped.
    3. Currency symbols and whitespace are stripped.
    4. The first ``,`` becomes ``.`` and the rest must be a plain decimal.

    Raises:
        ParseError: if the remaining text is not a non-negative decimal number.
    """
    if not isinstance(token, str):
        raise ParseError(f"Not a text token: {token!r}")

    value = token.strip()
    if value.endswith(",-") or value.endswith(".-"):
        value = value[:-2] + ".00"
    elif value.endswith("-"):
        value = value[:-1] + ".00"
    elif value.endswith((",", ".")):
        value = value[:-1]

    value = CURRENCY_PATTERN.sub("", value)
    value = re.sub(r"\s+", "", value)
    value = value.replace(",", ".", 1)

    if not _PLAIN_DECIMAL.match(value):
        raise ParseError(f"Not an amount: {token!r}")
    try:
        return Decimal(value)
    except InvalidOperation as exc:
        raise ParseError(f"Not an amount: {token!r}") from exc


def parse_quantity(token: str) -> int:
    """Parse a quantity token like ``"2"``, ``"2x"`` or ``"3 X"``."""
    if not isinstance(token, str):
        raise ParseError(f"Not a text token: {token!r}")
    match = _QUANTITY.match(token.strip())
    if not match:
        raise ParseError(f"Not a quantity: {token!r}")
    return int(match.group(1))


def quantize_cents(value: Decimal) -> Decimal:
    """Round a money value to cents (half up)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def unit_price_from_line_total(line_total: Decimal, quantity: int) -> Decimal:
    """
    Derive the per-unit price from a receipt line total.

    Raises:
        DivisionGuardError: if quantity is not positive.
    """
    if quantity <= 0:
        raise DivisionGuardError(f"Cannot derive unit price for quantity {quantity}")
    return quantize_cents(line_total / quantity)


def format_amount(value: Decimal | None) -> str:
    """Render a money value with exactly two decimals (``None`` -> ``"-"``)."""
    if value is None:
        return "-"
    return f"{quantize_cents(value):.2f}"
