"""Tip policies for the cost splitter.

A policy only decides the total tip for the whole table; the splitter then
divides it equally over the people who ordered something.
"""

from dataclasses import dataclass
from decimal import Decimal

from tabsplit.domain.receipt import ReceiptTotals
from tabsplit.receipt.numbers import quantize_cents


@dataclass(frozen=True)
class NoTip:
    def total_tip(self, grand_subtotal: Decimal) -> Decimal:
        return Decimal("0.00")


@dataclass(frozen=True)
class PercentOfSubtotal:
    """Tip as a percentage of the grand subtotal (``10`` means 10 %)."""

    percent: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "percent", Decimal(str(self.percent)))
        if self.percent < 0:
            raise ValueError(f"Tip percentage cannot be negative: {self.percent}")

    def total_tip(self, grand_subtotal: Decimal) -> Decimal:
        return quantize_cents(grand_subtotal * self.percent / Decimal(100))


@dataclass(frozen=True)
class FixedCashAmount:
    """A fixed tip (or tip plus tax) amount for the whole table."""

    amount: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError(f"Tip amount cannot be negative: {self.amount}")

    def total_tip(self, grand_subtotal: Decimal) -> Decimal:
        return quantize_cents(self.amount)


TipPolicy = NoTip | PercentOfSubtotal | FixedCashAmount


def tip_policy_from_receipt(totals: ReceiptTotals) -> TipPolicy:
    """
    Pick a tip policy from the summary amounts printed on a receipt.

    1. An explicit tip line wins.
    2. Otherwise ``total - subtotal`` (tax, service) when it is positive.
    3. Otherwise no tip.
    """
    if totals.tip is not None and totals.tip > 0:
        return FixedCashAmount(totals.tip)
    if totals.total is not None and totals.subtotal is not None:
        difference = totals.total - totals.subtotal
        if difference > 0:
            return FixedCashAmount(difference)
    return NoTip()
