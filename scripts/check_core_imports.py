#!/usr/bin/env python3
"""
Fail if core imports transport-specific modules.
Checks all Python files under src/geocore/core/.
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
CORE_DIR = REPO_ROOT / "src" / "geocore" / "core"
CORE_PACKAGE = "geocore.core"

FORBIDDEN_PREFIXES = (
    "httpx",
    "respx",
    "geocore.transports",
    "geocore.client",
)


def is_forbidden(module: str) -> bool:
    return any(
        module == prefix or module.startswith(prefix + ".")
        for prefix in FORBIDDEN_PREFIXES
    )


def resolve_relative(module: str, level: int) -> str:
    # level 1 -> geocore.core, level 2 -> geocore
    parts = CORE_PACKAGE.split(".")
    base = parts[: max(len(parts) - (level - 1), 0)]
    return ".".join(base + ([module] if module else []))


def scan_file(path: Path) -> list[str]:
    errors: list[str] = []
    tree = ast.parse(path.read_text())
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                mod = alias.name
                if is_forbidden(mod):
                    errors.append(f"{path}: forbidden import '{mod}'")
        elif isinstance(node, ast.ImportFrom):
            mod = node.module or ""
            if node.level:
                mod = resolve_relative(mod, node.level)
            if mod and is_forbidden(mod):
                errors.append(f"{path}: forbidden import '{mod}'")
    return errors


def main() -> int:
    violations: list[str] = []
    for py_file in CORE_DIR.rglob("*.py"):
        violations.extend(scan_file(py_file))

    if violations:
        for v in violations:
            print(v, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
