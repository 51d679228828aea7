"""Render orders, receipts and splits as text tables and JSON-ready dicts.

Every money value is rendered with exactly two decimals.
"""

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from tabsplit.domain.order import OrderLine, Person
from tabsplit.domain.receipt import ParsedReceipt, ReceiptItem, ReceiptTotals
from tabsplit.domain.split import BillSplit, SplitResult
from tabsplit.receipt.numbers import format_amount


def _money(value: Decimal | None) -> str | None:
    """Two-decimal string for JSON payloads; None stays None."""
    if value is None:
        return None
    return format_amount(value)


def _format_rows_aligned(
    rows: list[tuple[str, str, str | None]],
    indent: str = "  ",
) -> list[str]:
    """
    Format rows with aligned labels, amounts and comments.

    Args:
        rows: List of (label, amount, comment_or_none) tuples
        indent: Indentation prefix for each line

    Returns:
        List of formatted lines with left-aligned labels and right-aligned amounts
    """
    if not rows:
        return []

    max_label_len = max(len(label) for label, _, _ in rows)
    max_amount_len = max(len(amount) for _, amount, _ in rows)

    lines = []
    for label, amount, comment in rows:
        base = f"{indent}{label.ljust(max_label_len)}  {amount.rjust(max_amount_len)}"
        if comment:
            lines.append(f"{base}  ; {comment}")
        else:
            lines.append(base)
    return lines


def format_order_lines(lines: Sequence[OrderLine]) -> str:
    """Render order lines grouped under their person (unassigned last)."""
    if not lines:
        return "No order lines."

    groups: dict[str, list[OrderLine]] = {}
    for line in lines:
        name = line.person_name.strip() if line.is_assigned and line.person_name else "(unassigned)"
        groups.setdefault(name, []).append(line)
    if "(unassigned)" in groups:
        groups["(unassigned)"] = groups.pop("(unassigned)")

    output: list[str] = []
    for name, group in groups.items():
        output.append(name)
        rows = []
        for line in group:
            if line.has_price:
                rows.append((f"{line.quantity}x {line.item_label}", format_amount(line.unit_price), None))
            else:
                rows.append((f"{line.quantity}x {line.item_label}", "-", f"est. {format_amount(line.estimated_price)}"))
        output.extend(_format_rows_aligned(rows))
    return "\n".join(output)


def format_receipt(receipt: ParsedReceipt) -> str:
    """Render parsed receipt items and summary amounts."""
    rows: list[tuple[str, str, str | None]] = []
    for item in receipt.items:
        comment = f"{format_amount(item.unit_price)} each" if item.quantity > 1 and item.unit_price else None
        rows.append((f"{item.quantity}x {item.label}", format_amount(item.total), comment))

    for field_name in ("subtotal", "tax", "tip", "total"):
        value = getattr(receipt.totals, field_name)
        if value is not None:
            rows.append((field_name.upper(), format_amount(value), None))

    if not rows:
        return "No receipt items found."
    return "\n".join(_format_rows_aligned(rows, indent=""))


def format_split_table(bill: BillSplit) -> str:
    """Render the per-person split as a text table with a closing summary."""
    output: list[str] = []
    for result in bill.results:
        output.append(f"{result.person_name} ({result.initial})")
        rows: list[tuple[str, str, str | None]] = [
            (entry.description, format_amount(entry.amount), None) for entry in result.line_items
        ]
        rows.append(("subtotal", format_amount(result.subtotal), None))
        rows.append(("tip/tax", format_amount(result.tip_and_tax), None))
        rows.append(("total", format_amount(result.total), None))
        output.extend(_format_rows_aligned(rows))
        output.append("")

    summary = [
        ("Subtotal", format_amount(bill.grand_subtotal), None),
        ("Tip/tax", format_amount(bill.total_tip), None),
        ("Total", format_amount(bill.grand_total), None),
    ]
    output.extend(_format_rows_aligned(summary, indent=""))

    if bill.unassigned:
        output.append("")
        output.append("Unassigned: " + ", ".join(f"{line.quantity}x {line.item_label}" for line in bill.unassigned))
    if bill.unpriced:
        output.append("")
        output.append(
            "Unpriced: "
            + ", ".join(f"{line.person_name}: {line.quantity}x {line.item_label}" for line in bill.unpriced)
        )
    return "\n".join(output)


def person_to_dict(person: Person) -> dict[str, Any]:
    return {
        "id": person.id,
        "name": person.name,
        "initial": person.initial,
        "color": person.color_tag,
    }


def order_line_to_dict(line: OrderLine) -> dict[str, Any]:
    return {
        "id": line.id,
        "item": line.item_label,
        "quantity": line.quantity,
        "person_name": line.person_name,
        "price": _money(line.unit_price),
        "estimated_price": _money(line.estimated_price),
    }


def receipt_item_to_dict(item: ReceiptItem) -> dict[str, Any]:
    return {
        "label": item.label,
        "quantity": item.quantity,
        "unit_price": _money(item.unit_price),
        "total": _money(item.total),
    }


def totals_to_dict(totals: ReceiptTotals) -> dict[str, Any]:
    return {
        "tip": _money(totals.tip),
        "subtotal": _money(totals.subtotal),
        "total": _money(totals.total),
        "tax": _money(totals.tax),
    }


def split_result_to_dict(result: SplitResult) -> dict[str, Any]:
    return {
        "person_id": result.person_id,
        "person_name": result.person_name,
        "initial": result.initial,
        "color": result.color_tag,
        "items": [{"description": entry.description, "amount": _money(entry.amount)} for entry in result.line_items],
        "subtotal": _money(result.subtotal),
        "tip_and_tax": _money(result.tip_and_tax),
        "total": _money(result.total),
    }


def bill_split_to_dict(bill: BillSplit) -> dict[str, Any]:
    return {
        "results": [split_result_to_dict(result) for result in bill.results],
        "unassigned": [order_line_to_dict(line) for line in bill.unassigned],
        "unpriced": [order_line_to_dict(line) for line in bill.unpriced],
        "total_tip": _money(bill.total_tip),
        "grand_subtotal": _money(bill.grand_subtotal),
        "grand_total": _money(bill.grand_total),
    }
