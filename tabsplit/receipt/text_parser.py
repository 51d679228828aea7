"""Parse raw OCR receipt text into structured ParsedReceipt data.

Every cleaned line is tested against ``RECEIPT_LINE_RULES`` top to bottom;
each pattern must match the whole line and the first match wins. Lines no
rule accepts are headers/footers and are dropped. Lines longer than
``MAX_LINE_LENGTH`` are dropped before any rule runs. Failures never leave a
single line: a bad amount skips that line, the rest of the receipt still
parses.
"""

import logging
import re
from collections.abc import Callable

from tabsplit.domain.errors import DivisionGuardError, NoMatchError, ParseError
from tabsplit.domain.receipt import ParsedReceipt, ReceiptItem
from tabsplit.receipt.numbers import (
    normalize_amount,
    parse_quantity,
    quantize_cents,
    unit_price_from_line_total,
)

logger = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")
# Dot/underscore leaders between label and price: "Cola ....... 5,00" (whitespace already collapsed)
_LEADER_RUN = re.compile(r"(?: ?[._·]){2,} ?")
_TRAILING_PUNCTUATION = " \t.,:;!*|"
_COMPLETE_AMOUNT = re.compile(r"\d[.,]\d{2}")

# Longer lines are never receipt items or totals
MAX_LINE_LENGTH = 200

_CURRENCY = r"(?:€|\$|EUR)"
# Summary amounts may be whole numbers ("Totaal 45")
SUMMARY_AMOUNT = rf"{_CURRENCY}?\s?\d{{1,6}}(?:[.,](?:\d{{1,2}}|-)?|-)?(?:\s?{_CURRENCY})?"
# Item prices need a separator or dash, which keeps house numbers and table numbers out
ITEM_AMOUNT = rf"{_CURRENCY}?\s?\d{{1,5}}(?:[.,](?:\d{{2}}|-)?|-)(?:\s?{_CURRENCY})?"
_VAT_MARKER = r"(?:\s+[A-D])?"
_LABEL = r"(?P<label>.*?[^\W\d_].*?)"
_QTY_PREFIX = r"(?P<qty>\d{1,3})\s*[xX×]?"
_QTY_SUFFIX = r"(?P<qty>\d{1,3})\s*[xX×]"

TIP_LABEL = r"(?:tip|fooi|gratuity|service(?:\s*charge)?|servicekosten|bediening)"
SUBTOTAL_LABEL = r"(?:sub\s*-?\s*totaa?l|tussentotaal)"
TOTAL_LABEL = (
    r"(?:grand\s+total|amount\s+due|te\s+betalen|"
    r"totaa?l(?!\s*(?:discount|korting|savings|besparing|items|artikelen|aantal|number)))"
)
TAX_LABEL = r"(?:btw|vat|tax|hst|gst)"
PAYMENT_LABEL = (
    r"(?:pin|pinnen|contant|cash|visa|mastercard|maestro|amex|creditcard|debit|"
    r"wisselgeld|change|terug|betaald|paid|card|kaart|retour)"
)
DISCOUNT_WORD = r"(?:korting|discount|savings|besparing|voordeel)"


def _summary_pattern(label: str) -> re.Pattern[str]:
    return re.compile(rf"^{label}\b(?:.*?[\s:])?(?P<amount>{SUMMARY_AMOUNT})$", re.IGNORECASE)


LineHandler = Callable[[re.Match[str], ParsedReceipt], None]


def _summary_handler(field_name: str) -> LineHandler:
    """Build a handler that stores the first amount seen for a totals field."""

    def handle(match: re.Match[str], receipt: ParsedReceipt) -> None:
        amount = quantize_cents(normalize_amount(match.group("amount")))
        if getattr(receipt.totals, field_name) is None:
            setattr(receipt.totals, field_name, amount)
        else:
            logger.debug("Ignoring repeated %s line: %r", field_name, match.group(0))

    return handle


def _ignore_line(match: re.Match[str], receipt: ParsedReceipt) -> None:
    logger.debug("Ignoring payment/discount line: %r", match.group(0))


def _priced_item(match: re.Match[str], receipt: ParsedReceipt) -> None:
    """Add an item whose captured price is the line total, not the unit price."""
    label = clean_item_label(match.group("label"))
    if not label:
        raise NoMatchError(f"No item label in {match.group(0)!r}")

    qty_text = match.groupdict().get("qty")
    quantity = parse_quantity(qty_text) if qty_text is not None else 1
    line_total = quantize_cents(normalize_amount(match.group("amount")))

    try:
        unit_price = unit_price_from_line_total(line_total, quantity)
    except DivisionGuardError:
        logger.debug("Zero quantity on %r; using line total as unit price", match.group(0))
        unit_price = line_total
        quantity = 1

    receipt.items.append(ReceiptItem(label=label, quantity=quantity, unit_price=unit_price))


def _unpriced_item(match: re.Match[str], receipt: ParsedReceipt) -> None:
    """Add an item listed with a quantity but no price (``2x cola``)."""
    label = clean_item_label(match.group("label"))
    if not label:
        raise NoMatchError(f"No item label in {match.group(0)!r}")
    quantity = max(1, parse_quantity(match.group("qty")))
    receipt.items.append(ReceiptItem(label=label, quantity=quantity))


# Ordered (name, pattern, handler) rules; first full-line match wins.
RECEIPT_LINE_RULES: list[tuple[str, re.Pattern[str], LineHandler]] = [
    ("tip", _summary_pattern(TIP_LABEL), _summary_handler("tip")),
    ("subtotal", _summary_pattern(SUBTOTAL_LABEL), _summary_handler("subtotal")),
    ("total", _summary_pattern(TOTAL_LABEL), _summary_handler("total")),
    ("tax", _summary_pattern(TAX_LABEL), _summary_handler("tax")),
    ("payment", re.compile(rf"^{PAYMENT_LABEL}\b.*$", re.IGNORECASE), _ignore_line),
    ("discount", re.compile(rf"^.*\b{DISCOUNT_WORD}\b.*$", re.IGNORECASE), _ignore_line),
    # "2 Cola 5,00" / "2x Cola 5,00"
    (
        "qty_label_total",
        re.compile(rf"^{_QTY_PREFIX}\s+{_LABEL}\s+(?P<amount>{ITEM_AMOUNT}){_VAT_MARKER}$", re.IGNORECASE),
        _priced_item,
    ),
    # "Cola 2x 5,00"
    (
        "label_qty_total",
        re.compile(rf"^{_LABEL}\s+{_QTY_SUFFIX}\s+(?P<amount>{ITEM_AMOUNT}){_VAT_MARKER}$", re.IGNORECASE),
        _priced_item,
    ),
    # "Cola 5,00 2x"
    (
        "label_total_qty",
        re.compile(rf"^{_LABEL}\s+(?P<amount>{ITEM_AMOUNT})\s+{_QTY_SUFFIX}$", re.IGNORECASE),
        _priced_item,
    ),
    # "2x Cola"
    ("qty_label", re.compile(rf"^(?P<qty>\d{{1,3}})\s*[xX×]\s+{_LABEL}$", re.IGNORECASE), _unpriced_item),
    # "Cola 2x"
    ("label_qty", re.compile(rf"^{_LABEL}\s+{_QTY_SUFFIX}$", re.IGNORECASE), _unpriced_item),
    # "Pizza Margherita 8,50"
    (
        "label_total",
        re.compile(rf"^{_LABEL}\s+(?P<amount>{ITEM_AMOUNT}){_VAT_MARKER}$", re.IGNORECASE),
        _priced_item,
    ),
]


def clean_receipt_line(line: str) -> str:
    """Normalize one OCR line: trim, drop leader runs, collapse spaces, strip trailing punctuation."""
    cleaned = _WHITESPACE_RUN.sub(" ", line).strip()
    if not cleaned:
        return ""
    cleaned = _LEADER_RUN.sub(" ", cleaned).strip()

    stripped = cleaned.rstrip(_TRAILING_PUNCTUATION)
    if stripped[-1:].isdigit() and not _COMPLETE_AMOUNT.fullmatch(stripped[-4:]):
        # "11," and "45." keep the separator that belongs to the amount
        stripped = cleaned[: len(stripped) + 1]
    return stripped.strip()


def clean_item_label(label: str) -> str:
    """Remove currency marks and stray separators around an item label."""
    cleaned = re.sub(_CURRENCY, " ", label, flags=re.IGNORECASE)
    cleaned = _WHITESPACE_RUN.sub(" ", cleaned)
    return cleaned.strip(" .,:;-*#|")


def match_receipt_line(line: str) -> tuple[str, re.Match[str], LineHandler]:
    """
    Find the first rule whose pattern matches the whole (cleaned) line.

    Raises:
        NoMatchError: if no rule applies.
    """
    for name, pattern, handler in RECEIPT_LINE_RULES:
        match = pattern.fullmatch(line)
        if match:
            return name, match, handler
    raise NoMatchError(f"No receipt rule matches {line!r}")


def parse_receipt_text(ocr_text: str | None) -> ParsedReceipt:
    """
    Parse an OCR transcript into items plus optional tip/subtotal/total/tax.

    Never raises for malformed input; ``None`` and empty text give an empty receipt.
    """
    raw_text = ocr_text if isinstance(ocr_text, str) else ""
    receipt = ParsedReceipt(raw_text=raw_text)

    for raw_line in raw_text.splitlines():
        line = clean_receipt_line(raw_line)
        if not line:
            continue
        if len(line) > MAX_LINE_LENGTH:
            logger.debug("Discarded overlong receipt line (%d chars)", len(line))
            continue
        try:
            name, match, handler = match_receipt_line(line)
            logger.debug("Receipt line %r matched rule %s", line, name)
            handler(match, receipt)
        except NoMatchError:
            logger.debug("Discarded receipt line: %r", line)
        except ParseError as exc:
            logger.debug("Skipped receipt line %r: %s", line, exc)

    logger.debug(
        "Parsed receipt: %d items, tip=%s subtotal=%s total=%s",
        len(receipt.items),
        receipt.tip,
        receipt.subtotal,
        receipt.total,
    )
    return receipt
