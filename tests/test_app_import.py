from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]


@pytest.mark.parametrize(
    "module",
    ["app.main", "app.auth.dependencies", "app.routes.fields", "app.models.base"],
)
def test_module_imports_in_fresh_interpreter(module: str) -> None:
    # A fresh process so import order is not masked by modules conftest already loaded.
    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        cwd=ROOT,
        capture_output=True,
        text=True,
        check=False,
    )
    assert result.returncode == 0, result.stderr


def test_only_model_and_engine_packages_carry_init_files() -> None:
    inits = sorted(path.parent.name for path in (ROOT / "app").rglob("__init__.py"))
    assert inits == ["engine", "models"]
