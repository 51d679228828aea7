"""Receipt history listing."""

from __future__ import annotations

from dataclasses import dataclass

from tabsplit.domain.receipt import ReceiptRecord
from tabsplit.runtime.session_store import SessionStore


@dataclass(frozen=True)
class ReceiptHistory:
    """Processed receipts, newest first."""

    receipts: list[ReceiptRecord]


def run_list_receipts(store: SessionStore) -> ReceiptHistory:
    return ReceiptHistory(receipts=store.list_receipts())
