"""Enforce inward-only imports between plot_analytics layers."""

from __future__ import annotations

import ast
from pathlib import Path

PACKAGE = "plot_analytics"
PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SOURCE_ROOT = PROJECT_ROOT / "src" / PACKAGE
KNOWN_LAYERS = ("domain", "core", "application", "adapters", "api", "cli")
RULES: dict[str, frozenset[str]] = {
    "domain": frozenset({"core", "application", "adapters", "api", "cli"}),
    "core": frozenset({"application", "adapters", "api", "cli"}),
    "application": frozenset({"adapters", "api", "cli"}),
    "adapters": frozenset({"api", "cli"}),
}


def _layer_for_path(path: Path, source_root: Path) -> str | None:
    try:
        relative = path.relative_to(source_root)
    except ValueError:
        return None
    if len(relative.parts) < 2:
        return None
    return relative.parts[0]


def _layer_of(module_parts: list[str], names: list[str]) -> set[str]:
    if not module_parts or module_parts[0] != PACKAGE:
        return set()
    if len(module_parts) >= 2:
        return {module_parts[1]} if module_parts[1] in KNOWN_LAYERS else set()
    return {name for name in names if name in KNOWN_LAYERS}


def _absolute_parts(node: ast.ImportFrom, path: Path, source_root: Path) -> list[str]:
    if node.level == 0:
        return node.module.split(".") if node.module else []
    package_parts = [PACKAGE, *path.relative_to(source_root).with_suffix("").parts[:-1]]
    if node.level - 1 > len(package_parts) - 1:
        return []
    base = package_parts[: len(package_parts) - (node.level - 1)]
    return [*base, *node.module.split(".")] if node.module else base


def imported_layers(node: ast.Import | ast.ImportFrom, path: Path, source_root: Path) -> set[str]:
    if isinstance(node, ast.Import):
        layers: set[str] = set()
        for alias in node.names:
            layers |= _layer_of(alias.name.split("."), [])
        return layers
    names = [alias.name for alias in node.names]
    return _layer_of(_absolute_parts(node, path, source_root), names)


def check_file(path: Path, source_root: Path = DEFAULT_SOURCE_ROOT) -> list[str]:
    layer = _layer_for_path(path, source_root)
    banned = RULES.get(layer or "", frozenset())
    if not banned:
        return []
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    violations: list[str] = []
    for node in ast.walk(tree):
        if not isinstance(node, (ast.Import, ast.ImportFrom)):
            continue
        for imported in sorted(imported_layers(node, path, source_root) & banned):
            violations.append(f"{path}: {layer} must not import {PACKAGE}.{imported}")
    return violations


def check_import_boundaries(source_root: Path = DEFAULT_SOURCE_ROOT) -> list[str]:
    violations: list[str] = []
    for path in sorted(source_root.rglob("*.py")):
        violations.extend(check_file(path, source_root))
    return violations


def main() -> None:
    violations = check_import_boundaries()
    if violations:
        raise SystemExit("\n".join(violations))
    print("import boundary checks passed")


if __name__ == "__main__":
    main()
