"""Receipt text parsing, price matching and output formatting.

Usage:
    from tabsplit.receipt import apply_receipt_prices, parse_receipt_text

    receipt = parse_receipt_text(ocr_text)
    result = apply_receipt_prices(receipt.items, lines)
"""

from tabsplit.receipt.matcher import PriceMatchResult, apply_receipt_prices
from tabsplit.receipt.numbers import format_amount, normalize_amount
from tabsplit.receipt.text_parser import parse_receipt_text

__all__ = [
    "normalize_amount",
    "format_amount",
    "parse_receipt_text",
    "apply_receipt_prices",
    "PriceMatchResult",
]
