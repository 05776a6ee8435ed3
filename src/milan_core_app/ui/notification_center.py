from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

LEVELS = ("success", "info", "warning", "error")


@dataclass
class NotificationCenter:
    """Transient messages shown after an action; the presentation layer drains them."""

    messages: list[dict[str, Any]] = field(default_factory=list)

    def push(self, *, level: str, title: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
        if level not in LEVELS:
            raise ValueError(f"Unsupported notification level: {level}")
        payload = {
            "level": level,
            "title": title,
            "message": message,
            "details": details or {},
        }
        self.messages.append(payload)
        return payload

    def drain(self) -> list[dict[str, Any]]:
        drained = list(self.messages)
        self.messages.clear()
        return drained

    def clear(self) -> None:
        self.messages.clear()

    def render(self) -> dict[str, Any]:
        return {"count": len(self.messages), "messages": list(self.messages)}
