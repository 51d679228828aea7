"""Order text parsing and the item catalog."""

from tabsplit.orders.catalog import (
    DEFAULT_ESTIMATED_PRICE,
    ItemCatalog,
    build_item_catalog,
    get_default_catalog,
)
from tabsplit.orders.text_parser import parse_order_text

__all__ = [
    "parse_order_text",
    "ItemCatalog",
    "build_item_catalog",
    "get_default_catalog",
    "DEFAULT_ESTIMATED_PRICE",
]
