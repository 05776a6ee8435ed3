from __future__ import annotations

import uuid
from dataclasses import dataclass

IDEMPOTENCY_HEADER = "Idempotency-Key"


@dataclass(frozen=True)
class IdempotencyKey:
    value: str

    def headers(self) -> dict[str, str]:
        return {IDEMPOTENCY_HEADER: self.value}


def new_idempotency_key(prefix: str | None = None) -> IdempotencyKey:
    token = str(uuid.uuid4())
    return IdempotencyKey(value=f"{prefix}-{token}" if prefix else token)


def resolve_idempotency_key(value: str | None = None, *, prefix: str | None = None) -> IdempotencyKey:
    if value:
        return IdempotencyKey(value=value)
    return new_idempotency_key(prefix)
