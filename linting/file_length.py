#!/usr/bin/env python
"""Cap the number of code lines per library module.

Blank lines, comment-only lines and docstrings do not count. Barrel
``__init__.py`` files (imports and ``__all__`` only) are exempt.
"""

from __future__ import annotations

import ast
import sys
import tokenize
from pathlib import Path

CODE_LINE_LIMIT = 300

ROOT = Path(__file__).resolve().parents[1]
PACKAGE_DIR = ROOT / "convai"


def _comment_lines(path: Path) -> set[int]:
    lines: set[int] = set()
    try:
        with path.open("rb") as f:
            for tok in tokenize.tokenize(f.readline):
                if tok.type == tokenize.COMMENT:
                    lines.add(tok.start[0])
    except tokenize.TokenError:
        pass
    return lines


def _docstring_lines(tree: ast.Module) -> set[int]:
    lines: set[int] = set()
    for node in ast.walk(tree):
        if not isinstance(node, (ast.Module, ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)):
            continue
        first = node.body[0] if node.body else None
        if isinstance(first, ast.Expr) and isinstance(first.value, ast.Constant) and isinstance(first.value.value, str):
            lines.update(range(first.lineno, (first.end_lineno or first.lineno) + 1))
    return lines


def _is_barrel(path: Path, tree: ast.Module) -> bool:
    if path.name != "__init__.py":
        return False
    for node in tree.body:
        if isinstance(node, (ast.Import, ast.ImportFrom, ast.Pass)):
            continue
        if isinstance(node, ast.Expr) and isinstance(node.value, ast.Constant):
            continue
        if isinstance(node, ast.Assign) and [getattr(t, "id", None) for t in node.targets] == ["__all__"]:
            continue
        return False
    return True


def count_code_lines(path: Path) -> int:
    source = path.read_text(encoding="utf-8")
    try:
        tree = ast.parse(source)
    except SyntaxError:
        return 0
    skip = _comment_lines(path) | _docstring_lines(tree)
    return sum(1 for i, line in enumerate(source.splitlines(), start=1) if line.strip() and i not in skip)


def find_violations(package_dir: Path = PACKAGE_DIR, limit: int = CODE_LINE_LIMIT) -> list[str]:
    violations: list[str] = []
    if not package_dir.is_dir():
        return violations
    for py_file in sorted(package_dir.rglob("*.py")):
        if "__pycache__" in py_file.parts:
            continue
        try:
            tree = ast.parse(py_file.read_text(encoding="utf-8"))
        except SyntaxError:
            continue
        if _is_barrel(py_file, tree):
            continue
        code_lines = count_code_lines(py_file)
        if code_lines > limit:
            violations.append(f"  {py_file.relative_to(package_dir.parent)}: {code_lines} code lines (limit {limit})")
    return violations


def main() -> int:
    violations = find_violations()
    if violations:
        print("File length violations:", file=sys.stderr)
        for v in violations:
            print(v, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
