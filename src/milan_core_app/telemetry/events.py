from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any

from milan_client_sdk import Reconciliation

TELEMETRY_CATEGORIES = frozenset({"auth", "api_call_result", "cash_closing", "error"})

# Usernames, tokens and customer data never leave the device.
PII_CONTEXT_KEYS = frozenset(
    {"password", "token", "authorization", "username", "email", "phone", "nombre", "name", "address"}
)


@dataclass(frozen=True)
class TelemetryEvent:
    category: str
    name: str
    module: str
    action: str
    timestamp_utc: str
    trace_id: str | None = None
    duration_ms: int | None = None
    success: bool | None = None
    error_code: str | None = None
    context: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


def build_event(
    *,
    category: str,
    name: str,
    module: str,
    action: str,
    trace_id: str | None = None,
    duration_ms: int | None = None,
    success: bool | None = None,
    error_code: str | None = None,
    context: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> TelemetryEvent:
    if category not in TELEMETRY_CATEGORIES:
        raise ValueError(f"Unsupported telemetry category: {category}")
    if context:
        leaked = sorted(key for key in context if key.lower() in PII_CONTEXT_KEYS)
        if leaked:
            raise ValueError(f"PII-like keys are forbidden in telemetry context: {leaked}")
    return TelemetryEvent(
        category=category,
        name=name,
        module=module,
        action=action,
        timestamp_utc=(now or datetime.now(timezone.utc)).isoformat(),
        trace_id=trace_id,
        duration_ms=duration_ms,
        success=success,
        error_code=error_code,
        context=context,
    )


def closing_outcome_event(
    figures: Reconciliation,
    *,
    closing_date: str,
    trace_id: str | None = None,
    now: datetime | None = None,
) -> TelemetryEvent:
    """Record how a submitted closing reconciled; amounts stay out of the event."""
    return build_event(
        category="cash_closing",
        name="cash_closing_reconciled",
        module="cash_closing",
        action="reconcile",
        trace_id=trace_id,
        success=True,
        context={
            "date": closing_date,
            "tier": figures.tier.value,
            "direction": figures.direction.value,
            "review_advised": figures.review_advised,
        },
        now=now,
    )
