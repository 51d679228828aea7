"""Receipt processing workflow: OCR text -> prices -> split -> history."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from tabsplit.domain.receipt import ParsedReceipt, ReceiptRecord
from tabsplit.domain.split import BillSplit
from tabsplit.receipt.matcher import apply_receipt_prices
from tabsplit.receipt.text_parser import parse_receipt_text
from tabsplit.runtime import get_logger
from tabsplit.runtime.ocr_client import OCRServiceUnavailable, extract_receipt_text
from tabsplit.runtime.session_store import SessionStore
from tabsplit.split.splitter import split_bill
from tabsplit.split.tip import TipPolicy, tip_policy_from_receipt

logger = get_logger(__name__)

ReceiptStatus = Literal["processed", "no_text", "no_orders", "ocr_unavailable"]


@dataclass(frozen=True)
class ReceiptTextRequest:
    """
    Inputs for processing receipt text.

    ``tip_policy=None`` takes the tip from the receipt itself (tip line, else
    total minus subtotal).
    """

    ocr_text: str
    file_name: str = "receipt.txt"
    tip_policy: TipPolicy | None = None
    use_estimates: bool = False


@dataclass(frozen=True)
class ReceiptImageRequest:
    """Inputs for processing a receipt image through the OCR service."""

    image_bytes: bytes
    file_name: str
    ocr_url: str
    tip_policy: TipPolicy | None = None
    use_estimates: bool = False


@dataclass(frozen=True)
class ReceiptProcessResult:
    """Outcome from receipt processing."""

    status: ReceiptStatus
    receipt: ParsedReceipt | None = None
    bill: BillSplit | None = None
    record: ReceiptRecord | None = None
    updated_count: int = 0
    error: str | None = None


def run_receipt_text(store: SessionStore, request: ReceiptTextRequest) -> ReceiptProcessResult:
    """Parse OCR text, price stored lines from it, split the bill and record the receipt."""
    if not isinstance(request.ocr_text, str) or not request.ocr_text.strip():
        return ReceiptProcessResult(status="no_text", error="No text could be extracted from the receipt")

    lines = store.list_orders()
    if not lines:
        return ReceiptProcessResult(status="no_orders", error="No orders found. Add some orders first.")

    receipt = parse_receipt_text(request.ocr_text)
    matched = apply_receipt_prices(receipt.items, lines)
    for before, after in zip(lines, matched.updated_lines):
        if after.unit_price != before.unit_price and after.id is not None:
            store.update_order(after.id, unit_price=after.unit_price)

    tip_policy = request.tip_policy if request.tip_policy is not None else tip_policy_from_receipt(receipt.totals)
    bill = split_bill(matched.updated_lines, store.list_people(), tip_policy, use_estimates=request.use_estimates)

    record = store.add_receipt(
        ReceiptRecord(
            file_name=request.file_name,
            ocr_text=request.ocr_text,
            items=list(receipt.items),
            totals=receipt.totals,
            split_results=list(bill.results),
            total_tip=bill.total_tip,
        )
    )
    logger.info(
        "Processed %s: %d item(s), %d line(s) priced, tip %s",
        request.file_name,
        len(receipt.items),
        matched.updated_count,
        bill.total_tip,
    )
    return ReceiptProcessResult(
        status="processed",
        receipt=receipt,
        bill=bill,
        record=record,
        updated_count=matched.updated_count,
    )


def run_receipt_image(store: SessionStore, request: ReceiptImageRequest) -> ReceiptProcessResult:
    """Run the OCR service on an image, then the text workflow."""
    try:
        ocr_text = extract_receipt_text(request.image_bytes, request.file_name, request.ocr_url)
    except OCRServiceUnavailable as exc:
        return ReceiptProcessResult(status="ocr_unavailable", error=str(exc))

    return run_receipt_text(
        store,
        ReceiptTextRequest(
            ocr_text=ocr_text,
            file_name=request.file_name,
            tip_policy=request.tip_policy,
            use_estimates=request.use_estimates,
        ),
    )
