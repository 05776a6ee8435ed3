from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from milan_client_sdk import CashClosing, ClosingAlert, ClosingAnalytics, analyze_closings
from milan_client_sdk.reconciliation import Number

from ..services.cash_closing_service import CashClosingService
from ..services.errors import ServiceError
from .formatting import format_signed
from .view_state import resolve_state


@dataclass
class ClosingHistoryView:
    service: CashClosingService
    rows: list[CashClosing] = field(default_factory=list)
    analytics: ClosingAnalytics | None = None
    alerts: list[ClosingAlert] = field(default_factory=list)
    error_message: str | None = None
    trace_id: str | None = None

    def load(
        self,
        *,
        now: datetime,
        date_from: date | None = None,
        date_to: date | None = None,
        current_sales: Number = 0,
    ) -> bool:
        try:
            self.rows = self.service.list_closings(date_from, date_to)
        except ServiceError as exc:
            self.rows = []
            self.analytics = None
            self.alerts = []
            self.error_message = exc.message
            self.trace_id = exc.trace_id
            return False
        self.error_message = None
        self.analytics = analyze_closings(self.rows, tolerance=self.service.tolerance)
        self.alerts = self.service.closing_alerts(self.rows, now=now, current_sales=current_sales)
        return True

    def render(self) -> dict[str, Any]:
        view_state = resolve_state(
            is_loading=False,
            error=self.error_message,
            has_data=bool(self.rows),
            trace_id=self.trace_id,
            empty_message="No cash closings recorded",
        )
        return {
            "state": view_state.render(),
            "rows": [
                {
                    "id": row.id,
                    "date": row.day.isoformat(),
                    "difference": format_signed(row.difference),
                    "notes": row.notes,
                }
                for row in self.rows
            ],
            "analytics": self.analytics.to_dict() if self.analytics else None,
            "alerts": [alert.to_dict() for alert in self.alerts],
        }
