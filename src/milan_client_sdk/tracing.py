from __future__ import annotations

import uuid
from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field

TRACE_HEADER = "X-Request-ID"

# Error bodies name the id either way depending on the route.
_PAYLOAD_KEYS = ("requestId", "trace_id")


def new_request_id(prefix: str = "milan") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:16]}"


@dataclass
class TraceContext:
    """Request ids used to match client logs and errors with server logs.

    The cash-closing API does not assign ids itself, so every outgoing request
    gets a fresh one from ``begin``. Retries of that request reuse it. If the
    server answers with its own id, in the response header or in an error
    body, that id replaces ours. ``trace_id`` always names the latest exchange
    and ``recent`` keeps a short history for support reports.
    """

    prefix: str = "milan"
    trace_id: str | None = None
    recent: deque[str] = field(default_factory=lambda: deque(maxlen=20))

    def begin(self) -> str:
        self.trace_id = new_request_id(self.prefix)
        self.recent.append(self.trace_id)
        return self.trace_id

    def adopt(self, value: object) -> bool:
        if not isinstance(value, str) or not value.strip():
            return False
        value = value.strip()
        if value != self.trace_id:
            self.trace_id = value
            self.recent.append(value)
        return True

    def update_from_headers(self, headers: Mapping[str, str]) -> None:
        # requests exposes response headers case-insensitively.
        self.adopt(headers.get(TRACE_HEADER))

    def update_from_payload(self, payload: Mapping[str, object]) -> None:
        for key in _PAYLOAD_KEYS:
            if self.adopt(payload.get(key)):
                return
