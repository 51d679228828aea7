"""Tests for the item catalog and its runtime TOML loader."""

import tomllib
from decimal import Decimal
from pathlib import Path

import pytest

from tabsplit.orders.catalog import DEFAULT_ESTIMATED_PRICE, build_item_catalog, get_default_catalog
from tabsplit.runtime.catalog_rules import load_item_catalog
from tabsplit.runtime.paths import get_paths


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("Biertje", ("bier", Decimal("3.50"))),
        ("beer", ("bier", Decimal("3.50"))),
        ("  Coke ", ("cola", Decimal("2.50"))),
        ("koffietje", ("koffie", Decimal("2.00"))),
        ("wine", ("wijn", Decimal("4.50"))),
        ("Nachos", ("nachos", DEFAULT_ESTIMATED_PRICE)),
        ("Pizza  Hawaii", ("pizza hawaii", DEFAULT_ESTIMATED_PRICE)),
    ],
)
def test_default_catalog_resolves_synonyms(label: str, expected: tuple[str, Decimal]) -> None:
    assert get_default_catalog().resolve(label) == expected


def test_config_adds_items_and_overrides_builtin_prices() -> None:
    catalog = build_item_catalog(
        [
            {
                "defaults": {"price": "2,75"},
                "items": [
                    {"name": "Bier", "price": "4.00", "synonyms": ["rakker"]},
                    {"name": "friet", "synonyms": "patat"},
                ],
            }
        ]
    )

    assert catalog.resolve("rakker") == ("bier", Decimal("4.00"))
    assert catalog.resolve("beer") == ("bier", Decimal("4.00"))
    assert catalog.resolve("patat") == ("friet", Decimal("2.75"))
    assert catalog.resolve("nachos") == ("nachos", Decimal("2.75"))


def test_later_configs_win() -> None:
    catalog = build_item_catalog(
        [
            {"items": [{"name": "friet", "price": "4.00"}]},
            {"items": [{"name": "friet", "price": "4.50"}]},
        ]
    )

    assert catalog.resolve("friet") == ("friet", Decimal("4.50"))


def test_invalid_prices_are_skipped() -> None:
    catalog = build_item_catalog(
        [{"defaults": {"price": "gratis"}, "items": [{"name": "nachos", "price": "veel", "synonyms": ["nacho"]}]}]
    )

    assert catalog.default_price == DEFAULT_ESTIMATED_PRICE
    assert not catalog.is_known("nachos")
    assert not catalog.is_known("nacho")


def test_load_item_catalog_from_project_config(isolated_project_root: Path) -> None:
    config_dir = isolated_project_root / "config"
    config_dir.mkdir()
    (config_dir / "item_catalog.toml").write_text(
        '[[items]]\nname = "bitterballen"\nsynonyms = ["bitterbal"]\nprice = "6.50"\n',
        encoding="utf-8",
    )

    catalog = load_item_catalog()

    assert get_paths().item_catalog == config_dir.resolve() / "item_catalog.toml"
    assert catalog.resolve("bitterbal") == ("bitterballen", Decimal("6.50"))
    assert catalog.resolve("biertje") == ("bier", Decimal("3.50"))


def test_missing_catalog_file_gives_builtins_only(tmp_path: Path) -> None:
    catalog = load_item_catalog((str(tmp_path / "missing.toml"),))

    assert catalog.resolve("biertje") == ("bier", Decimal("3.50"))
    assert not catalog.is_known("bitterbal")


def test_invalid_catalog_toml_raises(tmp_path: Path) -> None:
    path = tmp_path / "broken.toml"
    path.write_text("[[items]\nname = ", encoding="utf-8")

    with pytest.raises(tomllib.TOMLDecodeError):
        load_item_catalog((str(path),))
