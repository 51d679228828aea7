"""Per-person cost split with an equal tip share.

Only lines that are assigned to someone and carry a price are charged.
The tip is computed once for the whole table and divided equally over the
people who have at least one charged line; leftover cents go one each to
the first people in output order, so the shares always add up to the tip.
When nobody is charged the tip is 0.00.
"""

import logging
from collections.abc import Sequence
from decimal import ROUND_DOWN, Decimal

from tabsplit.domain.order import OrderLine, Person
from tabsplit.domain.split import BillSplit, LineAmount, SplitResult
from tabsplit.receipt.numbers import CENT, quantize_cents
from tabsplit.split.tip import TipPolicy

logger = logging.getLogger(__name__)

DEFAULT_COLOR_TAG = "blue"


def _person_key(name: str) -> str:
    return name.strip().lower()


def _charge_price(line: OrderLine, use_estimates: bool) -> Decimal | None:
    """Unit price the splitter charges for a line, if any."""
    if line.has_price:
        return line.unit_price
    if use_estimates and line.estimated_price is not None and line.estimated_price != 0:
        return line.estimated_price
    return None


def _result_for(name: str, person: Person | None) -> SplitResult:
    if person is not None:
        return SplitResult(
            person_id=person.id,
            person_name=person.name,
            initial=person.initial,
            color_tag=person.color_tag,
        )
    display = name.strip()
    return SplitResult(
        person_id=display.lower(),
        person_name=display,
        initial=display[:1],
        color_tag=DEFAULT_COLOR_TAG,
    )


def equal_shares(total: Decimal, count: int) -> list[Decimal]:
    """
    Divide an amount into ``count`` cent-exact shares.

    Every share is the amount divided by count, rounded down to cents; the
    leftover cents are added one each to the first shares.
    """
    if count <= 0:
        return []
    total = quantize_cents(total)
    base = (total / count).quantize(CENT, rounding=ROUND_DOWN)
    leftover_cents = int((total - base * count) / CENT)
    return [base + (CENT if index < leftover_cents else Decimal("0.00")) for index in range(count)]


def split_bill(
    lines: Sequence[OrderLine],
    people: Sequence[Person],
    tip_policy: TipPolicy,
    use_estimates: bool = False,
) -> BillSplit:
    """
    Split order lines into per-person totals.

    Args:
        lines: Order lines for the table
        people: Known people (id, display name, initial, color)
        tip_policy: How the table tip is computed
        use_estimates: Charge catalog estimates for lines without a receipt price

    Returns:
        BillSplit with one SplitResult per person in first-appearance order,
        plus the unassigned and unpriced lines that were left out
    """
    known = {_person_key(person.name): person for person in people}

    bill = BillSplit()
    results: dict[str, SplitResult] = {}

    for line in lines:
        if line.person_name is None or not line.is_assigned:
            bill.unassigned.append(line)
            continue

        price = _charge_price(line, use_estimates)
        if price is None:
            bill.unpriced.append(line)
            continue

        key = _person_key(line.person_name)
        result = results.get(key)
        if result is None:
            result = _result_for(line.person_name, known.get(key))
            results[key] = result

        amount = quantize_cents(price * line.quantity)
        result.line_items.append(LineAmount(description=f"{line.quantity}x {line.item_label}", amount=amount))
        result.subtotal += amount

    bill.results = list(results.values())
    bill.grand_subtotal = sum((result.subtotal for result in bill.results), Decimal("0.00"))
    if bill.results:
        bill.total_tip = tip_policy.total_tip(bill.grand_subtotal)
    else:
        logger.debug("No charged lines; tip is 0.00")

    shares = equal_shares(bill.total_tip, len(bill.results))
    for result, share in zip(bill.results, shares):
        result.tip_and_tax = share
        result.total = result.subtotal + share

    logger.debug(
        "Split %d lines over %d people: subtotal=%s tip=%s (%d unassigned, %d unpriced)",
        len(lines),
        len(bill.results),
        bill.grand_subtotal,
        bill.total_tip,
        len(bill.unassigned),
        len(bill.unpriced),
    )
    return bill


def split_costs(
    lines: Sequence[OrderLine],
    people: Sequence[Person],
    tip_policy: TipPolicy,
) -> list[SplitResult]:
    """Per-person results only; see split_bill for the unassigned/unpriced report."""
    return split_bill(lines, people, tip_policy).results
