"""Core domain models for tabsplit.

This module provides the data models used throughout the project:
- Person, OrderLine: who ordered what
- ReceiptItem, ReceiptTotals, ParsedReceipt: parsed receipt text
- ReceiptRecord: a processed receipt in the session history
- LineAmount, SplitResult, BillSplit: per-person bill breakdown
- ParseError, NoMatchError, DivisionGuardError: line-scoped parse failures

Usage:
    from tabsplit.domain import OrderLine, Person, ReceiptItem
"""

from tabsplit.domain.errors import DivisionGuardError, NoMatchError, ParseError
from tabsplit.domain.order import OrderLine, Person
from tabsplit.domain.receipt import ParsedReceipt, ReceiptItem, ReceiptRecord, ReceiptTotals
from tabsplit.domain.split import BillSplit, LineAmount, SplitResult

__all__ = [
    "Person",
    "OrderLine",
    "ReceiptItem",
    "ReceiptTotals",
    "ParsedReceipt",
    "ReceiptRecord",
    "LineAmount",
    "SplitResult",
    "BillSplit",
    "ParseError",
    "NoMatchError",
    "DivisionGuardError",
]
