"""Data models for per-person bill splits."""

from dataclasses import dataclass, field
from decimal import Decimal

from tabsplit.domain.order import OrderLine


@dataclass
class LineAmount:
    """One priced entry on a person's bill, e.g. ``2x bier`` / 7.00."""

    description: str
    amount: Decimal


@dataclass
class SplitResult:
    """Final per-person bill breakdown including the tip share."""

    person_id: str
    person_name: str
    line_items: list[LineAmount] = field(default_factory=list)
    subtotal: Decimal = Decimal("0.00")
    tip_and_tax: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")
    initial: str = ""
    color_tag: str = "blue"


@dataclass
class BillSplit:
    """Split results plus the lines that could not be charged to anyone."""

    results: list[SplitResult] = field(default_factory=list)
    unassigned: list[OrderLine] = field(default_factory=list)
    unpriced: list[OrderLine] = field(default_factory=list)
    total_tip: Decimal = Decimal("0.00")
    grand_subtotal: Decimal = Decimal("0.00")

    @property
    def grand_total(self) -> Decimal:
        return sum((result.total for result in self.results), Decimal("0.00"))
