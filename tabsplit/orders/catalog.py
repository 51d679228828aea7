"""Item synonym catalog for order text.

Maps Dutch/English item words onto one canonical item and gives every
canonical item a fixed estimated unit price. Unknown items fall back to
DEFAULT_ESTIMATED_PRICE.

Project-level overrides come from ``config/item_catalog.toml``::

    [defaults]
    price = "3.00"

    [[items]]
    name = "bitterballen"
    synonyms = ["bitterbal"]
    price = "6.50"

An entry whose name matches a built-in item replaces its price and adds
its synonyms.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from typing import Any

from tabsplit.domain.errors import ParseError
from tabsplit.receipt.numbers import normalize_amount

logger = logging.getLogger(__name__)

DEFAULT_ESTIMATED_PRICE = Decimal("3.00")

# (canonical name, synonyms, estimated unit price)
BUILTIN_ITEMS: list[tuple[str, tuple[str, ...], str]] = [
    ("bier", ("beer", "beers", "biertje", "biertjes", "bieren", "pils", "pilsje"), "3.50"),
    ("cola", ("coke", "colaatje", "colas"), "2.50"),
    ("koffie", ("coffee", "koffietje", "coffees"), "2.00"),
    ("thee", ("tea", "theetje", "teas"), "2.00"),
    ("wijn", ("wine", "wijntje", "wines"), "4.50"),
    ("pizza", ("pizzas", "pizza's"), "8.50"),
]


@dataclass(frozen=True)
class ItemCatalog:
    """In-memory synonym table and price estimates."""

    synonyms: Mapping[str, str]
    prices: Mapping[str, Decimal]
    default_price: Decimal = DEFAULT_ESTIMATED_PRICE

    def canonical_name(self, label: str) -> str | None:
        """Return the canonical item for a label, or None if it is not in the catalog."""
        return self.synonyms.get(" ".join(label.lower().split()))

    def is_known(self, word: str) -> bool:
        return self.canonical_name(word) is not None

    def resolve(self, label: str) -> tuple[str, Decimal]:
        """Return (item label, estimated unit price) for free-text item words."""
        cleaned = " ".join(label.split())
        canonical = self.canonical_name(cleaned)
        if canonical is None:
            return cleaned.lower(), self.default_price
        return canonical, self.prices.get(canonical, self.default_price)


def _parse_price(raw: Any) -> Decimal | None:
    try:
        return normalize_amount(str(raw))
    except ParseError:
        return None


def build_item_catalog(configs: Sequence[Mapping[str, Any]] | None = None) -> ItemCatalog:
    """Build the catalog from built-in items plus in-memory TOML configs (later configs win)."""
    synonyms: dict[str, str] = {}
    prices: dict[str, Decimal] = {}
    default_price = DEFAULT_ESTIMATED_PRICE

    for name, words, price in BUILTIN_ITEMS:
        prices[name] = Decimal(price)
        synonyms[name] = name
        for word in words:
            synonyms[word] = name

    for config in configs or ():
        defaults = config.get("defaults", {})
        if isinstance(defaults, Mapping) and "price" in defaults:
            parsed_default = _parse_price(defaults["price"])
            if parsed_default is None:
                logger.warning("Ignoring invalid default price %r", defaults["price"])
            else:
                default_price = parsed_default

        for entry in config.get("items", []):
            if not isinstance(entry, Mapping):
                continue
            name = " ".join(str(entry.get("name") or "").lower().split())
            if not name:
                continue

            if "price" in entry:
                price_value = _parse_price(entry["price"])
                if price_value is None:
                    logger.warning("Ignoring invalid price %r for item %s", entry["price"], name)
                    continue
                prices[name] = price_value

            synonyms[name] = name
            raw_synonyms = entry.get("synonyms", [])
            if isinstance(raw_synonyms, str):
                raw_synonyms = [raw_synonyms]
            for word in raw_synonyms:
                key = " ".join(str(word).lower().split())
                if key:
                    synonyms[key] = name

    return ItemCatalog(synonyms=synonyms, prices=prices, default_price=default_price)


@lru_cache(maxsize=1)
def get_default_catalog() -> ItemCatalog:
    """Built-in-only catalog (no file I/O, no runtime deps)."""
    return build_item_catalog()
