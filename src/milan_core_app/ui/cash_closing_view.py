from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from milan_client_sdk import DailySummary, Reconciliation, is_late_closing, new_idempotency_key, reconcile_or_none
from milan_client_sdk.reconciliation import Number, to_amount

from ..services.cash_closing_service import CashClosingService, ClosingSubmission
from ..services.errors import ServiceError
from ..state import AppState
from .formatting import format_amount, render_reconciliation
from .notification_center import NotificationCenter
from .view_state import resolve_state

STEPS: tuple[str, ...] = ("opening", "count", "confirm")
NO_SALES_MESSAGE = "No sales recorded for this day. A closing cannot be submitted."


@dataclass
class CashClosingView:
    """Closing workflow for one business day.

    The reconciliation is recomputed whenever the opening amount, the counted
    amount or the day's summary changes. Without a summary there is nothing to
    reconcile and the view renders its empty state.
    """

    service: CashClosingService
    state: AppState
    notifications: NotificationCenter
    day: date
    today: date | None = None
    opening_cash: Decimal = Decimal("0")
    closing_cash: Decimal | None = None
    notes: str = ""
    summary: DailySummary | None = None
    reconciliation: Reconciliation | None = None
    step_index: int = 0
    is_loading: bool = False
    is_submitting: bool = False
    error_message: str | None = None
    trace_id: str | None = None
    last_submission: ClosingSubmission | None = None
    _submission_key: str | None = field(default=None, repr=False)

    def open(self) -> bool:
        self.reset()
        if self.state.active_cash_session is not None:
            self.opening_cash = self.state.active_cash_session.opening_cash
        return self.load_summary()

    def load_summary(self) -> bool:
        self.is_loading = True
        try:
            self.summary = self.service.load_summary(self.day)
            self.error_message = None
            return self.summary is not None
        except ServiceError as exc:
            # The notification carries the failure; the form falls back to its no-data state.
            self.summary = None
            self.trace_id = exc.trace_id
            self.notifications.push(level="error", title="Daily summary", message=exc.message)
            return False
        finally:
            self.is_loading = False
            self._recompute()

    def set_opening_cash(self, value: Number | None) -> None:
        self.opening_cash = to_amount(value)
        self._recompute()

    def set_closing_cash(self, value: Number | None) -> None:
        self.closing_cash = to_amount(value) if value is not None else None
        self._recompute()

    def set_notes(self, value: str) -> None:
        self.notes = value

    def _recompute(self) -> None:
        self.reconciliation = reconcile_or_none(
            self.opening_cash,
            self.summary,
            self.closing_cash if self.closing_cash is not None else 0,
            tolerance=self.service.tolerance,
            review_threshold=self.service.review_threshold,
        )

    @property
    def step(self) -> str:
        return STEPS[self.step_index]

    def next_step(self) -> str:
        if self.step_index < len(STEPS) - 1:
            self.step_index += 1
        return self.step

    def prev_step(self) -> str:
        if self.step_index > 0:
            self.step_index -= 1
        return self.step

    def blocked_reason(self) -> str | None:
        if self.summary is None:
            return "The day's summary is not available"
        if not self.summary.has_sales:
            return NO_SALES_MESSAGE
        if self.closing_cash is None:
            return "Enter the counted cash"
        if self.closing_cash < 0:
            return "Counted cash must be >= 0"
        return None

    def can_submit(self) -> bool:
        return self.blocked_reason() is None and not self.is_submitting

    def submit(self) -> dict[str, Any]:
        if self.is_submitting:
            return {"ok": False, "error": "Closing already in progress"}
        reason = self.blocked_reason()
        if reason is not None:
            return {"ok": False, "error": reason}
        if self._submission_key is None:
            self._submission_key = new_idempotency_key("closing").value
        self.is_submitting = True
        try:
            outcome = self.service.submit(
                day=self.day,
                opening_cash=self.opening_cash,
                closing_cash=self.closing_cash,
                summary=self.summary,
                notes=self.notes,
                idempotency_key=self._submission_key,
            )
        except ServiceError as exc:
            # The form stays populated so the cashier can resubmit.
            self.error_message = exc.message
            self.trace_id = exc.trace_id
            self.notifications.push(level="error", title="Cash closing", message=exc.message)
            return {"ok": False, "error": exc.message, "trace_id": exc.trace_id, "details": exc.details}
        finally:
            self.is_submitting = False
        self.last_submission = outcome
        closing = outcome.closing
        self.notifications.push(
            level="success",
            title="Cash closing",
            message=f"Closing for {self.day.isoformat()} saved",
            details={"closing_id": closing.id, "tier": outcome.reconciliation.tier.value},
        )
        self.reset()
        return {
            "ok": True,
            "closing": closing.model_dump(mode="json"),
            "reconciliation": render_reconciliation(outcome.reconciliation),
        }

    def reset(self) -> None:
        self.opening_cash = Decimal("0")
        self.closing_cash = None
        self.notes = ""
        self.step_index = 0
        self.error_message = None
        self.trace_id = None
        self._submission_key = None
        self._recompute()

    def render(self) -> dict[str, Any]:
        has_data = self.summary is not None
        view_state = resolve_state(
            is_loading=self.is_loading,
            error=self.error_message,
            has_data=has_data,
            trace_id=self.trace_id,
            empty_message="No data for this day",
        )
        return {
            "date": self.day.isoformat(),
            "late_closing": is_late_closing(self.day, self.today) if self.today else False,
            "step": self.step,
            "steps": list(STEPS),
            "state": view_state.render(),
            "form": {
                "opening_cash": self.opening_cash,
                "opening_cash_text": format_amount(self.opening_cash),
                "closing_cash": self.closing_cash,
                "notes": self.notes,
            },
            "summary": self.summary.model_dump(mode="json", by_alias=True) if has_data else None,
            "reconciliation": render_reconciliation(self.reconciliation),
            "can_submit": self.can_submit(),
            "blocked_reason": self.blocked_reason(),
        }
