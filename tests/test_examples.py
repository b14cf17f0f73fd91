"""Smoke tests for example scripts.

Each script is run in a subprocess and must exit cleanly and print its
result summary.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]


@pytest.mark.parametrize(
    "name, marker",
    [
        ("landweber.py", "Landweber solution:"),
        ("bfgs_rosenbrock.py", "Minimizer found:"),
        ("trust_region.py", "Final radius:"),
    ],
)
def test_example_runs(name: str, marker: str) -> None:
    script = ROOT / "examples" / name
    assert script.exists(), f"Example script not found: {script}"

    result = subprocess.run(
        [sys.executable, str(script)],
        capture_output=True,
        text=True,
        check=False,
        timeout=60,
    )

    assert result.returncode == 0, (
        f"Example script failed with return code {result.returncode}.\n"
        f"STDOUT:\n{result.stdout}\n"
        f"STDERR:\n{result.stderr}"
    )
    assert "OptimizationResult:" in result.stdout
    assert marker in result.stdout
