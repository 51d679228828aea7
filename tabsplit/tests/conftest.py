"""Shared pytest fixtures for tabsplit tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from tabsplit.domain.order import Person
from tabsplit.runtime.catalog_rules import load_item_catalog
from tabsplit.runtime.paths import reset_paths
from tabsplit.runtime.session_store import SessionStore

CAFE_RECEIPT = """\
Café De Kroeg
Tafel 12
2 Bier .... €7,00
Pizza Margherita 8,50
Subtotaal 15,50
Fooi 1,50
Totaal 17,00
PIN 17,00
Bedankt en tot ziens!
"""


@pytest.fixture(autouse=True)
def isolated_project_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point TABSPLIT_HOME at an empty directory and drop cached runtime state."""
    monkeypatch.setenv("TABSPLIT_HOME", str(tmp_path))
    reset_paths()
    load_item_catalog.cache_clear()
    yield tmp_path
    reset_paths()
    load_item_catalog.cache_clear()


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def cafe_receipt_text() -> str:
    return CAFE_RECEIPT


@pytest.fixture
def timo_and_bart() -> list[Person]:
    return [
        Person(id="p-timo", name="Timo", initial="T", color_tag="green"),
        Person(id="p-bart", name="Bart", initial="B", color_tag="purple"),
    ]
