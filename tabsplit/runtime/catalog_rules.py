"""Runtime loader for the item synonym/price catalog."""

from __future__ import annotations

import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from tabsplit.orders.catalog import ItemCatalog, build_item_catalog
from tabsplit.runtime.paths import get_paths


def _load_toml(path: Path) -> dict[str, Any]:
    """Load TOML file and return parsed dict; missing files map to empty dict."""
    if not path.exists():
        return {}

    with open(path, "rb") as f:
        data = tomllib.load(f)
    return data if isinstance(data, dict) else {}


@lru_cache(maxsize=8)
def load_item_catalog(catalog_paths: tuple[str, ...] | None = None) -> ItemCatalog:
    """Load the item catalog from runtime-configured TOML files into a pure in-memory catalog.

    Without explicit paths the project file ``config/item_catalog.toml`` is used
    when it exists; otherwise the catalog holds only the built-in items.

    Raises:
        tomllib.TOMLDecodeError: if a catalog file is not valid TOML.
    """
    if catalog_paths is None:
        catalog_files = [get_paths().item_catalog]
    else:
        catalog_files = [Path(path) for path in catalog_paths]

    configs = tuple(_load_toml(path) for path in catalog_files)
    return build_item_catalog(configs)
