from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_data_dir
from pydantic import ValidationError as ModelValidationError

from .models import SessionData

logger = logging.getLogger(__name__)


@dataclass
class AuthStore:
    app_name: str = "milan"
    filename: str = "session.json"
    base_dir: Path | None = None

    def _path(self) -> Path:
        base = self.base_dir or Path(user_data_dir(self.app_name, "MilanFragancias"))
        base.mkdir(parents=True, exist_ok=True)
        return base / self.filename

    def save(self, session: SessionData) -> None:
        path = self._path()
        data = session.model_dump(mode="json")
        path.write_text(json.dumps(data, indent=2))
        try:
            path.chmod(0o600)
        except OSError:
            logger.warning("session_file_chmod_failed", extra={"path": str(path)})

    def load(self) -> SessionData | None:
        path = self._path()
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text())
            return SessionData.model_validate(data)
        except (json.JSONDecodeError, ModelValidationError):
            logger.warning("session_file_corrupt", extra={"path": str(path)})
            self.clear()
            return None

    def clear(self) -> None:
        path = self._path()
        if path.exists():
            path.unlink()
