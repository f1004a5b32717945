#!/usr/bin/env python
"""Require a single ``__all__`` literal as the last statement of a module.

Top-level rules:
- ``__all__`` is assigned exactly once (``__all__ = [...]``), never mutated.
- Nothing follows it.

Modules that do not define ``__all__`` are ignored.
"""

from __future__ import annotations

import ast
import sys
import argparse
from pathlib import Path

DEFAULT_DIRS = ("convai",)


def _is_all(node: ast.AST) -> bool:
    return isinstance(node, ast.Name) and node.id == "__all__"


def _is_definition(node: ast.stmt) -> bool:
    if isinstance(node, ast.Assign):
        return len(node.targets) == 1 and _is_all(node.targets[0])
    if isinstance(node, ast.AnnAssign):
        return _is_all(node.target) and node.value is not None
    return False


def _is_mutation(node: ast.stmt) -> bool:
    if isinstance(node, ast.Assign):
        return any(_is_all(t) for t in node.targets) and not _is_definition(node)
    if isinstance(node, (ast.AugAssign, ast.AnnAssign)):
        return _is_all(node.target) and not _is_definition(node)
    if isinstance(node, ast.Delete):
        return any(_is_all(t) for t in node.targets)
    if isinstance(node, ast.Expr) and isinstance(node.value, ast.Call):
        func = node.value.func
        return isinstance(func, ast.Attribute) and _is_all(func.value)
    return False


def _label(node: ast.stmt) -> str:
    name = getattr(node, "name", None)
    if isinstance(node, ast.ClassDef):
        return f"class `{name}`"
    if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
        return f"function `{name}`"
    if isinstance(node, (ast.Import, ast.ImportFrom)):
        return "import"
    if isinstance(node, ast.Assign):
        names = [t.id for t in node.targets if isinstance(t, ast.Name)]
        return f"assignment `{', '.join(names)}`" if names else "assignment"
    return type(node).__name__


def check_file(path: Path, root: Path) -> list[str]:
    try:
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    except (OSError, UnicodeDecodeError, SyntaxError):
        return []

    rel = path.relative_to(root)
    definitions = [(idx, node) for idx, node in enumerate(tree.body) if _is_definition(node)]
    mutations = [node for node in tree.body if _is_mutation(node)]
    if not definitions and not mutations:
        return []

    violations = [f"  {rel}:{node.lineno} `__all__` must not be mutated" for node in mutations]
    if len(definitions) != 1:
        violations.append(f"  {rel}: expected exactly one `__all__` assignment, found {len(definitions)}")
        return violations

    idx, _ = definitions[0]
    for node in tree.body[idx + 1 :]:
        violations.append(f"  {rel}:{node.lineno} {_label(node)} defined after `__all__`")
    return violations


def find_violations(root: Path, dirs: tuple[str, ...] | list[str] = DEFAULT_DIRS) -> list[str]:
    violations: list[str] = []
    for d in dirs:
        base = (root / d).resolve()
        if not base.is_dir():
            continue
        for py_file in sorted(base.rglob("*.py")):
            if "__pycache__" in py_file.parts:
                continue
            violations.extend(check_file(py_file, root))
    return violations


def main() -> int:
    parser = argparse.ArgumentParser(description="Check that __all__ is defined once at module bottom.")
    parser.add_argument("--dirs", nargs="+", default=list(DEFAULT_DIRS), help="Directories to scan")
    parser.add_argument("--root", default=".", help="Project root (default: .)")
    args = parser.parse_args()

    violations = find_violations(Path(args.root).resolve(), args.dirs)
    if violations:
        print("__all__ placement violations:", file=sys.stderr)
        for violation in violations:
            print(violation, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
