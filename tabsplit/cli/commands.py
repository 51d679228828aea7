"""Command handlers used by the unified CLI."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from tabsplit.runtime import get_logger

if TYPE_CHECKING:
    from tabsplit.split.tip import TipPolicy

logger = get_logger(__name__)

TEXT_SUFFIXES = {".txt", ".text", ".ocr"}


def _parse_people(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [name.strip() for name in raw.split(",") if name.strip()]


def _read_receipt_text(path: Path, ocr_url: str) -> str:
    """Read a receipt transcript: text files as-is, images through the OCR service."""
    from tabsplit.runtime.ocr_client import OCRServiceUnavailable, extract_receipt_text

    if not path.exists():
        print(f"Error: Receipt file not found: {path}")
        sys.exit(1)

    if path.suffix.lower() in TEXT_SUFFIXES:
        return path.read_text(encoding="utf-8")

    try:
        return extract_receipt_text(path.read_bytes(), path.name, ocr_url)
    except OCRServiceUnavailable as exc:
        logger.error("%s", exc)
        print(f"OCR service unavailable: {exc}")
        print("Make sure the OCR service is running, or pass a .txt transcript instead.")
        sys.exit(1)


def _tip_policy_from_args(args: argparse.Namespace) -> TipPolicy | None:
    from tabsplit.split.tip import FixedCashAmount, NoTip, PercentOfSubtotal

    if args.tip_from_receipt:
        return None
    if args.tip_percent is not None:
        return PercentOfSubtotal(args.tip_percent)
    if args.tip_amount is not None:
        return FixedCashAmount(args.tip_amount)
    return NoTip()


def cmd_order(args: argparse.Namespace) -> None:
    """Parse one order utterance and print the resulting lines."""
    from tabsplit.application.orders import OrderTextRequest, run_order_text
    from tabsplit.application.roster import register_people
    from tabsplit.receipt.formatter import format_order_lines
    from tabsplit.runtime.session_store import SessionStore

    store = SessionStore()
    register_people(store, _parse_people(args.people))

    result = run_order_text(store, OrderTextRequest(text=args.text))
    if result.status != "created":
        print(f"Error: {result.error}")
        sys.exit(1)

    print(format_order_lines(result.lines))


def cmd_receipt(args: argparse.Namespace) -> None:
    """Parse a receipt transcript (or image) and print items and totals."""
    from tabsplit.receipt.formatter import format_receipt
    from tabsplit.receipt.text_parser import parse_receipt_text

    text = _read_receipt_text(Path(args.file), args.ocr_url)
    receipt = parse_receipt_text(text)
    print(format_receipt(receipt))


def cmd_split(args: argparse.Namespace) -> None:
    """Enter orders, price them from a receipt and print the per-person split."""
    from tabsplit.application.orders import OrderTextRequest, run_order_text
    from tabsplit.application.receipts import ReceiptTextRequest, run_receipt_text
    from tabsplit.receipt.formatter import format_split_table
    from tabsplit.runtime.session_store import SessionStore

    tip_policy = _tip_policy_from_args(args)

    store = SessionStore()
    for text in args.order:
        order_result = run_order_text(store, OrderTextRequest(text=text))
        if order_result.status != "created":
            print(f"Warning: {order_result.error}")

    receipt_path = Path(args.file)
    text = _read_receipt_text(receipt_path, args.ocr_url)
    result = run_receipt_text(
        store,
        ReceiptTextRequest(
            ocr_text=text,
            file_name=receipt_path.name,
            tip_policy=tip_policy,
            use_estimates=args.use_estimates,
        ),
    )
    if result.bill is None:
        print(f"Error: {result.error}")
        sys.exit(1)

    print(f"Priced {result.updated_count} order line(s) from {receipt_path.name}\n")
    print(format_split_table(result.bill))


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the FastAPI server for the table session."""
    import uvicorn

    from tabsplit.runtime.server import create_app

    print(f"Starting tabsplit server on {args.host}:{args.port}")
    print(f"API: http://{args.host}:{args.port}/api/orders | /api/chat | /api/receipt | /api/split")
    print("Press Ctrl+C to stop")

    uvicorn.run(create_app(ocr_url=args.ocr_url), host=args.host, port=args.port)
