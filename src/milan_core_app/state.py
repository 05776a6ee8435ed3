from __future__ import annotations

from dataclasses import dataclass, field

from milan_client_sdk.models import UserResponse
from milan_client_sdk.models_cash_session import CashSession


@dataclass
class SessionContext:
    user: UserResponse | None = None

    @property
    def username(self) -> str | None:
        return self.user.username if self.user else None


@dataclass
class AppState:
    """Shared state handed explicitly to services and views."""

    status_message: str = "Ready"
    error_message: str | None = None
    trace_id: str | None = None
    session: SessionContext = field(default_factory=SessionContext)
    active_cash_session: CashSession | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.session.user is not None

    @property
    def register_open(self) -> bool:
        return self.active_cash_session is not None and self.active_cash_session.is_open

    def reset(self) -> None:
        self.status_message = "Ready"
        self.error_message = None
        self.trace_id = None
        self.session = SessionContext()
        self.active_cash_session = None
