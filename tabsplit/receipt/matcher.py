"""Back-fill order line prices from parsed receipt items.

Matching is by label only:
1. exact match on the normalized label (case-insensitive, whitespace-collapsed)
2. otherwise the first prefix hit in either direction, in receipt order
3. otherwise the line stays unpriced

A line that already has a price is never touched.
"""

from collections.abc import Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from tabsplit.domain.order import OrderLine
from tabsplit.domain.receipt import ReceiptItem


@dataclass
class PriceMatchResult:
    """Lines after matching plus how many of them were newly priced."""

    updated_lines: list[OrderLine]
    updated_count: int


def normalize_label(label: str) -> str:
    """Lowercase and collapse whitespace for label comparison."""
    return " ".join(label.lower().split())


def build_price_map(items: Sequence[ReceiptItem]) -> dict[str, Decimal]:
    """
    Map normalized receipt labels to unit prices.

    Items without a (non-zero) price are left out; for repeated labels the
    first receipt line wins. Insertion order is receipt order.
    """
    prices: dict[str, Decimal] = {}
    for item in items:
        if item.unit_price is None or item.unit_price == 0:
            continue
        key = normalize_label(item.label)
        if key:
            prices.setdefault(key, item.unit_price)
    return prices


def find_receipt_price(label: str, price_map: dict[str, Decimal]) -> Decimal | None:
    """Look up a unit price for an order label: exact first, then first prefix hit."""
    key = normalize_label(label)
    if not key:
        return None

    exact = price_map.get(key)
    if exact is not None:
        return exact

    for receipt_label, price in price_map.items():
        if receipt_label.startswith(key) or key.startswith(receipt_label):
            return price
    return None


def apply_receipt_prices(items: Sequence[ReceiptItem], lines: Sequence[OrderLine]) -> PriceMatchResult:
    """
    Price every unpriced order line that a receipt item matches.

    The input lines are not modified; priced copies are returned in the
    original order next to the untouched ones.

    Args:
        items: Parsed receipt items
        lines: Current order lines

    Returns:
        PriceMatchResult with all lines and the count of newly priced ones
    """
    price_map = build_price_map(items)

    updated_lines: list[OrderLine] = []
    updated_count = 0
    for line in lines:
        if line.has_price:
            updated_lines.append(line)
            continue

        price = find_receipt_price(line.item_label, price_map)
        if price is None:
            updated_lines.append(line)
            continue

        updated_lines.append(replace(line, unit_price=price))
        updated_count += 1

    return PriceMatchResult(updated_lines=updated_lines, updated_count=updated_count)
