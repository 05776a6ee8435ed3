from __future__ import annotations

import logging
from datetime import date
from time import perf_counter

from milan_client_sdk import ApiSession, CashClosing, ClientConfig, load_config

from .services.auth_service import AuthService
from .services.cash_closing_service import CashClosingService, ClosingSubmission
from .services.cash_session_service import CashSessionService
from .services.errors import ServiceError
from .state import AppState
from .telemetry.events import build_event, closing_outcome_event
from .telemetry.logger import TelemetryLogger
from .ui.cash_closing_view import CashClosingView
from .ui.cash_session_view import CashSessionView
from .ui.closing_detail_view import ClosingDetailView
from .ui.closing_history_view import ClosingHistoryView
from .ui.notification_center import NotificationCenter

logger = logging.getLogger(__name__)


class CoreApp:
    """Wires the API session, shared state and services, and builds views on demand."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        session: ApiSession | None = None,
        telemetry: TelemetryLogger | None = None,
    ) -> None:
        self.config = config or load_config()
        self.session = session or ApiSession(self.config)
        self.state = AppState()
        self.notifications = NotificationCenter()
        self.auth_service = AuthService(self.session)
        self.cash_session_service = CashSessionService(self.session, self.state)
        self.cash_closing_service = CashClosingService(self.session)
        self.telemetry = telemetry or TelemetryLogger.from_env("milan_core_app")

    def start(self) -> bool:
        if not self.auth_service.has_active_session():
            self.state.status_message = "No active session"
            return False
        self.state.session.user = self.session.user
        try:
            self.cash_session_service.refresh_active()
        except ServiceError as exc:
            self.state.error_message = exc.message
            self.state.trace_id = exc.trace_id
        self.state.status_message = "Authenticated"
        logger.info("app_ready", extra={"register_open": self.state.register_open})
        return True

    def login(self, username: str, password: str) -> bool:
        started = perf_counter()
        try:
            token = self.auth_service.login(username, password)
        except ServiceError as exc:
            self.state.error_message = exc.message
            self.state.status_message = "Authentication failed"
            self.emit_result("auth", "login", success=False, started=started, trace_id=exc.trace_id, error_code=exc.code)
            return False
        self.state.session.user = token.user
        self.state.error_message = None
        self.emit_result("auth", "login", success=True, started=started)
        return self.start()

    def logout(self) -> None:
        self.auth_service.logout()
        self.state.reset()
        self.notifications.clear()
        self.state.status_message = "Session cleared"

    def cash_session_view(self) -> CashSessionView:
        return CashSessionView(service=self.cash_session_service, state=self.state, notifications=self.notifications)

    def cash_closing_view(self, day: date, *, today: date | None = None) -> CashClosingView:
        return CashClosingView(
            service=self.cash_closing_service,
            state=self.state,
            notifications=self.notifications,
            day=day,
            today=today,
        )

    def closing_history_view(self) -> ClosingHistoryView:
        return ClosingHistoryView(service=self.cash_closing_service)

    def closing_detail_view(self, closing: CashClosing) -> ClosingDetailView:
        return ClosingDetailView(closing=closing, service=self.cash_closing_service, notifications=self.notifications)

    def emit_result(
        self,
        module: str,
        action: str,
        *,
        success: bool,
        started: float | None = None,
        trace_id: str | None = None,
        error_code: str | None = None,
        context: dict[str, object] | None = None,
    ) -> bool:
        duration_ms = int((perf_counter() - started) * 1000) if started is not None else None
        category = "auth" if module == "auth" else "api_call_result"
        return self.telemetry.emit(
            build_event(
                category=category,
                name=f"{module}_{action}_result",
                module=module,
                action=action,
                trace_id=trace_id,
                duration_ms=duration_ms,
                success=success,
                error_code=error_code,
                context=context,
            )
        )

    def record_closing(self, submission: ClosingSubmission, *, trace_id: str | None = None) -> bool:
        return self.telemetry.emit(
            closing_outcome_event(
                submission.reconciliation,
                closing_date=submission.closing.day.isoformat(),
                trace_id=trace_id,
            )
        )
