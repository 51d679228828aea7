"""Cost splitting: tip policies and the per-person splitter.

Usage:
    from tabsplit.split import PercentOfSubtotal, split_bill

    bill = split_bill(lines, people, PercentOfSubtotal(10))
"""

from tabsplit.split.splitter import equal_shares, split_bill, split_costs
from tabsplit.split.tip import (
    FixedCashAmount,
    NoTip,
    PercentOfSubtotal,
    TipPolicy,
    tip_policy_from_receipt,
)

__all__ = [
    "split_bill",
    "split_costs",
    "equal_shares",
    "TipPolicy",
    "NoTip",
    "PercentOfSubtotal",
    "FixedCashAmount",
    "tip_policy_from_receipt",
]
