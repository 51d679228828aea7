"""Centralized path management for tabsplit.

This module provides a single source of truth for the configuration
locations read at runtime.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _get_project_root() -> Path:
    """Determine the project root directory (TABSPLIT_HOME or cwd)."""
    env_root = os.environ.get("TABSPLIT_HOME", "").strip()
    if env_root:
        return Path(env_root).expanduser()
    return Path.cwd()


@dataclass
class ProjectPaths:
    """Container for all project-related paths.

    All paths are computed relative to the project root, ensuring consistency
    across all modules regardless of where they are imported from.
    """

    root: Path = field(default_factory=_get_project_root)

    def __post_init__(self) -> None:
        self.root = self.root.resolve()

    # --- Configuration paths ---
    @property
    def config(self) -> Path:
        """Configuration directory (config/)."""
        return self.root / "config"

    @property
    def item_catalog(self) -> Path:
        """Project-level item synonym/price catalog TOML file."""
        return self.config / "item_catalog.toml"


_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance."""
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def reset_paths() -> None:
    """Drop the cached ProjectPaths so the next call re-reads TABSPLIT_HOME."""
    global _paths
    _paths = None
