from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any

from .config import DEFAULT_REVIEW_THRESHOLD
from .reconciliation import Number, to_amount

REMINDER_HOUR = 18
MAX_DAYS_WITHOUT_CLOSING = 3


@dataclass(frozen=True)
class LastClosing:
    day: date
    difference: Decimal


@dataclass(frozen=True)
class ClosingAlert:
    type: str
    title: str
    message: str
    severity: str
    action_required: bool
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "severity": self.severity,
            "action_required": self.action_required,
            "data": dict(self.data),
        }


def build_closing_alerts(
    last_closing: LastClosing | None,
    current_sales: Number = 0,
    *,
    now: datetime,
    review_threshold: Number = DEFAULT_REVIEW_THRESHOLD,
) -> list[ClosingAlert]:
    alerts: list[ClosingAlert] = []
    today = now.date()
    yesterday = today - timedelta(days=1)
    sales = to_amount(current_sales)

    if last_closing is None or last_closing.day < yesterday:
        alerts.append(
            ClosingAlert(
                type="missing",
                title="Cash closing pending",
                message=f"No cash closing recorded for {yesterday.isoformat()}",
                severity="error",
                action_required=True,
                data={"missing_date": yesterday.isoformat()},
            )
        )

    if last_closing is not None and abs(last_closing.difference) > to_amount(review_threshold):
        alerts.append(
            ClosingAlert(
                type="large_difference",
                title="Significant difference detected",
                message=f"The last closing had a difference of ${last_closing.difference:,.0f}",
                severity="warning",
                action_required=False,
                data={"difference": last_closing.difference, "date": last_closing.day.isoformat()},
            )
        )

    if now.hour >= REMINDER_HOUR and sales > 0 and last_closing is not None and last_closing.day < today:
        alerts.append(
            ClosingAlert(
                type="daily_reminder",
                title="Time to close the register",
                message=f"Close today's register. Sales recorded: ${sales:,.0f}",
                severity="info",
                action_required=True,
                data={"sales": sales},
            )
        )

    if last_closing is not None:
        days_pending = (today - last_closing.day).days
        if days_pending > MAX_DAYS_WITHOUT_CLOSING:
            alerts.append(
                ClosingAlert(
                    type="pending",
                    title="Several closings pending",
                    message=f"{days_pending} days since the last closing",
                    severity="error",
                    action_required=True,
                    data={"days_pending": days_pending},
                )
            )

    return alerts
