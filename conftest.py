"""
Root conftest.py: loads .env and registers custom markers.

Markers:
  @pytest.mark.stress: randomized invariant sweeps; skipped unless STRESS_TESTS=1
"""
from __future__ import annotations

import os
from pathlib import Path

import pytest


# ---------------------------------------------------------------------------
# Load .env file (if it exists) before any test collection
# ---------------------------------------------------------------------------

def _load_dotenv(path: Path) -> None:
    """Minimal .env parser for KEY=value, KEY="value" and # comments."""
    if not path.exists():
        return
    with open(path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, raw_val = line.partition("=")
            key = key.strip()
            raw_val = raw_val.strip()
            if len(raw_val) >= 2 and raw_val[0] == raw_val[-1] and raw_val[0] in ('"', "'"):
                raw_val = raw_val[1:-1]
            # Shell environment wins over the file
            if key and key not in os.environ:
                os.environ[key] = raw_val


_load_dotenv(Path(__file__).parent / ".env")

for _pkg_env in Path(__file__).parent.glob("packages/*/.env"):
    _load_dotenv(_pkg_env)


# ---------------------------------------------------------------------------
# Custom markers
# ---------------------------------------------------------------------------

def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "stress: randomized invariant sweep (run with STRESS_TESTS=1 or --stress flag)",
    )


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--stress",
        action="store_true",
        default=False,
        help="Run tests marked with @pytest.mark.stress",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip @pytest.mark.stress tests unless --stress flag or STRESS_TESTS=1 is set."""
    run_stress = config.getoption("--stress") or os.environ.get("STRESS_TESTS", "").lower() in ("1", "true", "yes")
    skip_stress = pytest.mark.skip(reason="Stress test, run with --stress or STRESS_TESTS=1")
    for item in items:
        if "stress" in item.keywords and not run_stress:
            item.add_marker(skip_stress)
