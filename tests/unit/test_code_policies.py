from __future__ import annotations

import importlib.util
from types import ModuleType
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def _load(name: str) -> ModuleType:
    spec = importlib.util.spec_from_file_location(f"linting_{name}", ROOT / "linting" / f"{name}.py")
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_all_is_last_statement_everywhere() -> None:
    assert _load("all_at_bottom").find_violations(ROOT, ["convai"]) == []


def test_modules_stay_under_length_limit() -> None:
    assert _load("file_length").find_violations() == []


def test_no_function_level_imports() -> None:
    assert _load("no_local_imports").find_violations() == []
