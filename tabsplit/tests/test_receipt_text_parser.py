"""Tests for OCR receipt text parsing."""

import time
from decimal import Decimal

import pytest

from tabsplit.domain.errors import NoMatchError
from tabsplit.domain.receipt import ReceiptItem
from tabsplit.receipt.text_parser import clean_receipt_line, match_receipt_line, parse_receipt_text


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2 Cola .... €5,00", "2 Cola €5,00"),
        ("Bier______3,50", "Bier 3,50"),
        ("  Koffie    2,00  ", "Koffie 2,00"),
        ("Bedankt!", "Bedankt"),
        ("Koffie 11,", "Koffie 11,"),
        ("Bier 9,-", "Bier 9,-"),
        ("Cola 5,00.", "Cola 5,00"),
        ("2 Bier 7,00.", "2 Bier 7,00"),
        ("Bier 3,50 :", "Bier 3,50"),
        ("Totaal 45.", "Totaal 45."),
        ("Koffie 11 .", "Koffie 11"),
        ("   ", ""),
    ],
)
def test_clean_receipt_line(raw: str, expected: str) -> None:
    assert clean_receipt_line(raw) == expected


@pytest.mark.parametrize(
    ("line", "rule"),
    [
        ("Fooi 5,00", "tip"),
        ("Service charge: 2,50", "tip"),
        ("Subtotaal 30,00", "subtotal"),
        ("Sub-total 30.00", "subtotal"),
        ("Totaal 33,00", "total"),
        ("Te betalen 33,00", "total"),
        ("BTW 21% 1,50", "tax"),
        ("PIN 33,00", "payment"),
        ("Wisselgeld 0,50", "payment"),
        ("Totaal korting 2,00", "discount"),
        ("2 Cola €5,00", "qty_label_total"),
        ("2x Cola 5,00", "qty_label_total"),
        ("Cola 2x 5,00", "label_qty_total"),
        ("Bier 7,00 2x", "label_total_qty"),
        ("2x Cola", "qty_label"),
        ("Cola 2x", "label_qty"),
        ("Pizza Margherita 8,50", "label_total"),
        ("Cola 2,50 B", "label_total"),
    ],
)
def test_first_matching_rule_wins(line: str, rule: str) -> None:
    name, _match, _handler = match_receipt_line(line)
    assert name == rule


@pytest.mark.parametrize("line", ["Café De Kroeg", "Tafel 12", "Datum 12-03-2024", "Bedankt en tot ziens"])
def test_header_and_footer_lines_match_no_rule(line: str) -> None:
    with pytest.raises(NoMatchError):
        match_receipt_line(line)


def test_quantity_line_total_becomes_unit_price() -> None:
    receipt = parse_receipt_text("2 Cola .... €5,00")

    assert receipt.items == [ReceiptItem(label="Cola", quantity=2, unit_price=Decimal("2.50"))]


def test_item_layouts() -> None:
    receipt = parse_receipt_text(
        "\n".join(
            [
                "Cola 2x 5,00",
                "Bier 7,00 2x",
                "Koffie 11,",
                "Wijn 9,-",
                "Spa rood 2,75.",
                "2 Bitterballen 13,00.",
                "3x Thee",
            ]
        )
    )

    assert receipt.items == [
        ReceiptItem(label="Cola", quantity=2, unit_price=Decimal("2.50")),
        ReceiptItem(label="Bier", quantity=2, unit_price=Decimal("3.50")),
        ReceiptItem(label="Koffie", quantity=1, unit_price=Decimal("11.00")),
        ReceiptItem(label="Wijn", quantity=1, unit_price=Decimal("9.00")),
        ReceiptItem(label="Spa rood", quantity=1, unit_price=Decimal("2.75")),
        ReceiptItem(label="Bitterballen", quantity=2, unit_price=Decimal("6.50")),
        ReceiptItem(label="Thee", quantity=3, unit_price=None),
    ]


def test_zero_quantity_uses_line_total_as_unit_price() -> None:
    receipt = parse_receipt_text("0 Cola 5,00")

    assert receipt.items == [ReceiptItem(label="Cola", quantity=1, unit_price=Decimal("5.00"))]


def test_summary_amounts_and_discarded_lines(cafe_receipt_text: str) -> None:
    receipt = parse_receipt_text(cafe_receipt_text)

    assert [item.label for item in receipt.items] == ["Bier", "Pizza Margherita"]
    assert receipt.subtotal == Decimal("15.50")
    assert receipt.tip == Decimal("1.50")
    assert receipt.total == Decimal("17.00")
    assert receipt.totals.tax is None
    assert receipt.raw_text == cafe_receipt_text


def test_first_summary_occurrence_wins() -> None:
    receipt = parse_receipt_text("Totaal 10,00\nTotaal 12,00")

    assert receipt.total == Decimal("10.00")


def test_whole_number_summary_amount() -> None:
    receipt = parse_receipt_text("Totaal 45\nBTW 21% 1,50")

    assert receipt.total == Decimal("45.00")
    assert receipt.totals.tax == Decimal("1.50")


def test_subtotal_is_not_taken_as_total() -> None:
    receipt = parse_receipt_text("Subtotaal 30,00")

    assert receipt.subtotal == Decimal("30.00")
    assert receipt.total is None


def test_discount_and_payment_lines_are_not_items() -> None:
    receipt = parse_receipt_text("Totaal korting 2,00\nPIN 33,00\nContant 40,00\nWisselgeld 7,00")

    assert receipt.items == []
    assert receipt.total is None


@pytest.mark.parametrize("text", [None, "", "\n\n   \n"])
def test_empty_input_gives_empty_receipt(text: str | None) -> None:
    receipt = parse_receipt_text(text)

    assert receipt.items == []
    assert receipt.tip is None
    assert receipt.subtotal is None
    assert receipt.total is None


def test_long_malformed_lines_parse_quickly() -> None:
    ocr_text = "\n".join(
        [
            "a" + " " * 40_000 + "b 5,00",
            ":" * 20_000 + " x",
            "." * 40_000 + " Cola",
            " ".join(["a1"] * 6_000),
            "Cola 2,50",
        ]
    )

    start = time.perf_counter()
    receipt = parse_receipt_text(ocr_text)
    elapsed = time.perf_counter() - start

    assert receipt.items == [
        ReceiptItem(label="a b", quantity=1, unit_price=Decimal("5.00")),
        ReceiptItem(label="Cola", quantity=1, unit_price=Decimal("2.50")),
    ]
    assert elapsed < 1.0
