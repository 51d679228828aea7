#!/usr/bin/env python3

import argparse
import os
from collections.abc import Callable, Sequence
from decimal import Decimal, InvalidOperation

DEFAULT_OCR_URL = os.environ.get("OCR_SERVICE_URL", "http://localhost:8001")


def _coerce_exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


def _run_command(command: Callable[[argparse.Namespace], None], args: argparse.Namespace) -> int:
    """
    Run a command handler that may call sys.exit().

    This keeps process termination centralized in this module's entrypoint.
    """
    try:
        command(args)
    except SystemExit as exc:
        return _coerce_exit_code(exc.code)
    return 0


def _non_negative_decimal(value: str) -> Decimal:
    try:
        amount = Decimal(value.replace(",", "."))
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from exc
    if not amount.is_finite() or amount < 0:
        raise argparse.ArgumentTypeError(f"must be a non-negative number: {value!r}")
    return amount


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Split a group bill from spoken orders and a receipt",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  order TEXT [--people NAMES]   Parse an order utterance ("Timo en Bart een biertje")
  receipt FILE                  Parse a receipt transcript (.txt) or image (via OCR)
  split FILE --order TEXT ...   Price orders from a receipt and split the bill
  serve [--host] [--port]       Start the HTTP API server

Environment:
  TABSPLIT_LOG_LEVEL   DEBUG, INFO, WARNING or ERROR (default: INFO)
  TABSPLIT_HOME        Project root holding config/item_catalog.toml
  OCR_SERVICE_URL      OCR service base URL (default: http://localhost:8001)
""",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # order command
    order_parser = subparsers.add_parser("order", help="Parse an order utterance")
    order_parser.add_argument("text", help='Order text, e.g. "Timo 2 bier"')
    order_parser.add_argument("--people", default=None, help="Comma-separated names already at the table")

    # receipt command
    receipt_parser = subparsers.add_parser("receipt", help="Parse a receipt")
    receipt_parser.add_argument("file", help="Receipt transcript (.txt) or image")
    receipt_parser.add_argument("--ocr-url", default=DEFAULT_OCR_URL, help="OCR service URL for images")

    # split command
    split_parser = subparsers.add_parser("split", help="Split a bill from orders and a receipt")
    split_parser.add_argument("file", help="Receipt transcript (.txt) or image")
    split_parser.add_argument(
        "--order",
        action="append",
        required=True,
        help="Order utterance; repeat for more (e.g. --order 'Timo 2 bier' --order 'Bart cola')",
    )
    tip_group = split_parser.add_mutually_exclusive_group()
    tip_group.add_argument("--tip-percent", type=_non_negative_decimal, help="Tip as percent of the subtotal")
    tip_group.add_argument("--tip-amount", type=_non_negative_decimal, help="Fixed tip amount for the table")
    tip_group.add_argument(
        "--tip-from-receipt",
        action="store_true",
        help="Use the receipt's tip line, else total minus subtotal",
    )
    split_parser.add_argument(
        "--use-estimates",
        action="store_true",
        help="Charge catalog estimates for lines the receipt did not price",
    )
    split_parser.add_argument("--ocr-url", default=DEFAULT_OCR_URL, help="OCR service URL for images")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, default=8080, help="Port to bind to (default: 8080)")
    serve_parser.add_argument("--ocr-url", default=DEFAULT_OCR_URL, help="OCR service URL")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "order":
        from tabsplit.cli.commands import cmd_order

        return _run_command(cmd_order, args)
    elif args.command == "receipt":
        from tabsplit.cli.commands import cmd_receipt

        return _run_command(cmd_receipt, args)
    elif args.command == "split":
        from tabsplit.cli.commands import cmd_split

        return _run_command(cmd_split, args)
    elif args.command == "serve":
        from tabsplit.cli.commands import cmd_serve

        return _run_command(cmd_serve, args)

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
