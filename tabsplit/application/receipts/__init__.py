"""Receipt workflows."""

from tabsplit.application.receipts.listing import ReceiptHistory, run_list_receipts
from tabsplit.application.receipts.process import (
    ReceiptImageRequest,
    ReceiptProcessResult,
    ReceiptTextRequest,
    run_receipt_image,
    run_receipt_text,
)

__all__ = [
    "ReceiptTextRequest",
    "ReceiptImageRequest",
    "ReceiptProcessResult",
    "run_receipt_text",
    "run_receipt_image",
    "ReceiptHistory",
    "run_list_receipts",
]
