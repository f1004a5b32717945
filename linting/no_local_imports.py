#!/usr/bin/env python
"""Reject imports inside function, method or class bodies.

The session client is imported into long-running event loops; every
dependency is resolved at module import time so a missing library fails
fast instead of in the middle of a conversation.
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
TARGET_DIRS = [ROOT / "convai"]


class _Visitor(ast.NodeVisitor):
    def __init__(self, *, rel_path: str) -> None:
        self.rel_path = rel_path
        self.depth = 0
        self.violations: list[str] = []

    def _scoped(self, node: ast.AST) -> None:
        self.depth += 1
        self.generic_visit(node)
        self.depth -= 1

    visit_FunctionDef = _scoped  # noqa: N815
    visit_AsyncFunctionDef = _scoped  # noqa: N815
    visit_ClassDef = _scoped  # noqa: N815

    def _check_import(self, node: ast.Import | ast.ImportFrom) -> None:
        if self.depth > 0:
            self.violations.append(f"  {self.rel_path}:{node.lineno} local import is forbidden")

    visit_Import = _check_import  # noqa: N815
    visit_ImportFrom = _check_import  # noqa: N815


def check_file(path: Path, root: Path = ROOT) -> list[str]:
    try:
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    except (OSError, UnicodeDecodeError, SyntaxError):
        return []
    visitor = _Visitor(rel_path=str(path.relative_to(root)))
    visitor.visit(tree)
    return visitor.violations


def find_violations(targets: list[Path] = TARGET_DIRS, root: Path = ROOT) -> list[str]:
    violations: list[str] = []
    for base in targets:
        if not base.is_dir():
            continue
        for py_file in sorted(base.rglob("*.py")):
            if "__pycache__" not in py_file.parts:
                violations.extend(check_file(py_file, root))
    return violations


def main() -> int:
    violations = find_violations()
    if not violations:
        return 0
    print("Local import violations:", file=sys.stderr)
    for v in violations:
        print(v, file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
