"""Runtime infrastructure for tabsplit.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths
- Item catalog loading via load_item_catalog()
- In-memory session storage via SessionStore

Usage:
    from tabsplit.runtime import get_logger, get_paths, load_item_catalog

    logger = get_logger(__name__)
    catalog = load_item_catalog()
"""

from tabsplit.runtime.catalog_rules import load_item_catalog
from tabsplit.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    set_log_level,
)
from tabsplit.runtime.paths import ProjectPaths, get_paths, reset_paths
from tabsplit.runtime.session_store import SessionStore

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Catalog
    "load_item_catalog",
    # Paths
    "get_paths",
    "reset_paths",
    "ProjectPaths",
    # Session
    "SessionStore",
]
