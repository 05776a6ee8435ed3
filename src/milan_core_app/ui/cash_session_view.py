from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from milan_client_sdk.models_cash_session import CashSessionStatistics
from milan_client_sdk.reconciliation import Number

from ..services.cash_session_service import CashSessionService
from ..services.errors import ServiceError
from ..state import AppState
from .formatting import format_amount, format_signed
from .notification_center import NotificationCenter


def format_duration(minutes: int | None) -> str | None:
    if minutes is None:
        return None
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m"


@dataclass
class CashSessionView:
    service: CashSessionService
    state: AppState
    notifications: NotificationCenter
    statistics: CashSessionStatistics | None = None
    error_message: str | None = None
    trace_id: str | None = None
    is_loading: bool = False
    is_submitting: bool = False

    def load(self) -> bool:
        self.is_loading = True
        try:
            active = self.service.refresh_active()
            self.statistics = active.statistics
            self.error_message = None
            return True
        except ServiceError as exc:
            self.statistics = None
            self.error_message = exc.message
            self.trace_id = exc.trace_id
            return False
        finally:
            self.is_loading = False

    def open(self, opening_cash: Number, notes: str | None = None) -> dict[str, Any]:
        if self.is_submitting:
            return {"ok": False, "error": "Register action already in progress"}
        self.is_submitting = True
        try:
            result = self.service.open_register(opening_cash, notes)
        except ServiceError as exc:
            self.error_message = exc.message
            self.trace_id = exc.trace_id
            self.notifications.push(level="error", title="Open register", message=exc.message)
            return {"ok": False, "error": exc.message, "trace_id": exc.trace_id}
        finally:
            self.is_submitting = False
        self.notifications.push(
            level="success",
            title="Open register",
            message=result.message or "Register opened",
        )
        self.load()
        return {"ok": True, "session": self._session_payload()}

    def close(self, closing_cash: Number | None, notes: str | None = None) -> dict[str, Any]:
        if not self.state.register_open:
            return {"ok": False, "error": "No register is open"}
        if self.is_submitting:
            return {"ok": False, "error": "Register action already in progress"}
        self.is_submitting = True
        try:
            result = self.service.close_register(closing_cash, notes)
        except ServiceError as exc:
            self.error_message = exc.message
            self.trace_id = exc.trace_id
            self.notifications.push(level="error", title="Close register", message=exc.message)
            return {"ok": False, "error": exc.message, "trace_id": exc.trace_id}
        finally:
            self.is_submitting = False
        # The closed session's figures stay on screen until the next load.
        self.statistics = result.statistics
        self.error_message = None
        self.notifications.push(
            level="success",
            title="Close register",
            message=result.message or "Register closed",
        )
        return {
            "ok": True,
            "session": result.session.model_dump(mode="json") if result.session else None,
            "statistics": self._statistics_payload(),
        }

    def _session_payload(self) -> dict[str, Any] | None:
        session = self.state.active_cash_session
        return session.model_dump(mode="json") if session is not None else None

    def status_chip(self) -> dict[str, Any]:
        session = self.state.active_cash_session
        is_open = self.state.register_open
        return {
            "label": "Register OPEN" if is_open else "Register CLOSED",
            "status": session.status if session else "NONE",
            "is_open": is_open,
            "session_number": session.session_number if session else None,
            "opening_cash_text": format_amount(session.opening_cash) if session else None,
        }

    def _statistics_payload(self) -> dict[str, Any] | None:
        stats = self.statistics
        if stats is None:
            return None
        return {
            "total_sales_text": format_amount(stats.total_sales),
            "cash_sales_text": format_amount(stats.cash_sales),
            "sales_count": stats.sales_count,
            "duration": format_duration(stats.duration_minutes),
            "difference_text": format_signed(stats.difference) if stats.difference is not None else None,
        }

    def render(self) -> dict[str, Any]:
        return {
            "status_chip": self.status_chip(),
            "action_enabled": {
                "open": not self.state.register_open and not self.is_submitting,
                "close": self.state.register_open and not self.is_submitting,
            },
            "session": self._session_payload(),
            "statistics": self._statistics_payload(),
            "error": self.error_message,
            "trace_id": self.trace_id,
            "loading": self.is_loading,
        }
