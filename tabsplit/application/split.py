"""Split workflow over the stored order lines, without a receipt."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from tabsplit.domain.split import BillSplit
from tabsplit.runtime import get_logger
from tabsplit.runtime.session_store import SessionStore
from tabsplit.split.splitter import split_bill
from tabsplit.split.tip import NoTip, TipPolicy

logger = get_logger(__name__)

SplitStatus = Literal["split", "no_orders"]


@dataclass(frozen=True)
class SplitRequest:
    tip_policy: TipPolicy = field(default_factory=NoTip)
    use_estimates: bool = False


@dataclass(frozen=True)
class SplitRunResult:
    status: SplitStatus
    bill: BillSplit | None = None
    error: str | None = None


def run_split(store: SessionStore, request: SplitRequest) -> SplitRunResult:
    """Split the session's current order lines with the requested tip policy."""
    lines = store.list_orders()
    if not lines:
        return SplitRunResult(status="no_orders", error="No orders found. Add some orders first.")

    bill = split_bill(lines, store.list_people(), request.tip_policy, use_estimates=request.use_estimates)
    logger.info("Split %d line(s) over %d people", len(lines), len(bill.results))
    return SplitRunResult(status="split", bill=bill)
