from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from platformdirs import user_log_dir

from .events import TelemetryEvent

TELEMETRY_ENV = "MILAN_TELEMETRY_ENABLED"
TELEMETRY_FILE_ENV = "MILAN_TELEMETRY_FILE"


def _truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class TelemetryLogger:
    """Append-only JSONL sink. Nothing is written unless ``enabled``."""

    app_name: str
    enabled: bool = False
    log_file: Path | None = None
    stdout_sink: bool = False
    stdout_stream: TextIO | None = None

    def __post_init__(self) -> None:
        if self.log_file is None:
            self.log_file = Path(user_log_dir("milan", "MilanFragancias")) / f"{self.app_name}.jsonl"
        else:
            self.log_file = Path(self.log_file)

    @classmethod
    def from_env(cls, app_name: str) -> TelemetryLogger:
        target = os.getenv(TELEMETRY_FILE_ENV)
        return cls(
            app_name=app_name,
            enabled=_truthy(os.getenv(TELEMETRY_ENV)),
            log_file=Path(target) if target else None,
        )

    def emit(self, event: TelemetryEvent) -> bool:
        if not self.enabled:
            return False
        line = json.dumps({**event.to_dict(), "app_name": self.app_name}, sort_keys=True, default=str)
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        with self.log_file.open("a", encoding="utf-8") as fp:
            fp.write(line + "\n")
        if self.stdout_sink:
            stream = self.stdout_stream or sys.stdout
            stream.write(line + "\n")
            stream.flush()
        return True
