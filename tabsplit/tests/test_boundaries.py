"""Architecture boundary checks: parsing/splitting code stays pure."""

from __future__ import annotations

import ast
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PURE_PACKAGES = ("domain", "orders", "receipt", "split")
_FORBIDDEN_PREFIXES = (
    "tabsplit.runtime",
    "tabsplit.application",
    "tabsplit.cli",
    "fastapi",
    "starlette",
    "httpx",
    "uvicorn",
)


def _imports(path: Path) -> list[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    result: list[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                result.append(alias.name)
        elif isinstance(node, ast.ImportFrom):
            base = "." * node.level + (node.module or "")
            result.append(base)
    return result


def _is_forbidden(module: str) -> bool:
    return any(module == prefix or module.startswith(f"{prefix}.") for prefix in _FORBIDDEN_PREFIXES)


@pytest.mark.parametrize("package", _PURE_PACKAGES)
def test_pure_packages_do_not_import_runtime_or_web_stack(package: str) -> None:
    package_dir = _ROOT / package
    assert package_dir.exists(), f"Missing package directory: {package_dir}"

    violations: list[str] = []
    for path in sorted(package_dir.rglob("*.py")):
        for mod in _imports(path):
            if _is_forbidden(mod) or mod.startswith(".."):
                violations.append(f"{path}: {mod}")
    assert not violations, "Pure -> runtime import violations:\n" + "\n".join(violations)


def test_domain_depends_on_nothing_else_in_the_package() -> None:
    violations: list[str] = []
    for path in sorted((_ROOT / "domain").rglob("*.py")):
        for mod in _imports(path):
            if mod.startswith("tabsplit.") and not mod.startswith("tabsplit.domain"):
                violations.append(f"{path}: {mod}")
    assert not violations, "Domain import violations:\n" + "\n".join(violations)
