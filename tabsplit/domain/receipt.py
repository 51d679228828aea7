"""Data models for parsed receipt text."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from tabsplit.domain.split import SplitResult


@dataclass
class ReceiptItem:
    """A single parsed line item on a receipt."""

    label: str
    quantity: int = 1
    unit_price: Decimal | None = None

    @property
    def total(self) -> Decimal | None:
        if self.unit_price is None:
            return None
        return self.unit_price * self.quantity


@dataclass
class ReceiptTotals:
    """Summary amounts detected on a receipt, each one independently."""

    tip: Decimal | None = None
    subtotal: Decimal | None = None
    total: Decimal | None = None
    tax: Decimal | None = None


@dataclass
class ParsedReceipt:
    """Parsed receipt data."""

    items: list[ReceiptItem] = field(default_factory=list)
    totals: ReceiptTotals = field(default_factory=ReceiptTotals)
    raw_text: str = ""  # Original OCR text for reference

    @property
    def tip(self) -> Decimal | None:
        return self.totals.tip

    @property
    def subtotal(self) -> Decimal | None:
        return self.totals.subtotal

    @property
    def total(self) -> Decimal | None:
        return self.totals.total


@dataclass
class ReceiptRecord:
    """A processed receipt kept in the session history."""

    file_name: str
    ocr_text: str
    items: list[ReceiptItem] = field(default_factory=list)
    totals: ReceiptTotals = field(default_factory=ReceiptTotals)
    split_results: list[SplitResult] = field(default_factory=list)
    total_tip: Decimal = Decimal("0.00")
    id: str | None = None
    processed_at: datetime | None = None  # set by the store; display only
