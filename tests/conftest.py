from __future__ import annotations

import sys
from pathlib import Path

import pytest

BASE_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = BASE_DIR / "src"

sys.path.insert(0, str(SRC_DIR))


@pytest.fixture(autouse=True)
def _milan_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MILAN_API_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("MILAN_RETRY_BACKOFF_SECONDS", "0")
    for name in ("MILAN_ENV", "MILAN_VARIANCE_TOLERANCE", "MILAN_REVIEW_THRESHOLD", "MILAN_TELEMETRY_ENABLED", "MILAN_TELEMETRY_FILE"):
        monkeypatch.delenv(name, raising=False)
