from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from milan_client_sdk.models import TokenResponse, UserResponse
from milan_client_sdk.models_cash_closing import CashClosing, CashClosingQuery, ClosingEntry, DailySummary
from milan_client_sdk.models_cash_session import (
    ActiveCashSession,
    CashSession,
    CashSessionActionResult,
    CashSessionStatistics,
)


def make_summary(**overrides: Any) -> DailySummary:
    payload: dict[str, Any] = {
        "date": "2024-03-01",
        "totalSales": 280000,
        "cashSales": 200000,
        "cardSales": 80000,
        "totalIncome": 10000,
        "totalExpense": 30000,
        "totalPayments": 15000,
        "closingExists": False,
    }
    payload.update(overrides)
    return DailySummary.model_validate(payload)


def make_closing(closing_id: int = 1, day: str = "2024-03-01", difference: int = 0) -> CashClosing:
    return CashClosing.model_validate(
        {
            "id": closing_id,
            "date": day,
            "openingCash": 50000,
            "closingCash": 215000 + difference,
            "systemCash": 215000,
            "difference": difference,
            "totalSales": 280000,
            "cashSales": 200000,
        }
    )


@dataclass
class FakeCashClosingClient:
    summary: DailySummary | None = None
    closings: list[CashClosing] = field(default_factory=list)
    fail_summary: Exception | None = None
    fail_create: Exception | None = None
    fail_list: Exception | None = None
    fail_download: Exception | None = None
    pdf: bytes = b"%PDF-1.4"
    created: list[tuple[ClosingEntry, str | None]] = field(default_factory=list)
    queries: list[CashClosingQuery | None] = field(default_factory=list)

    def get_summary(self, day: date) -> DailySummary | None:
        if self.fail_summary:
            raise self.fail_summary
        return self.summary

    def list_closings(self, query: CashClosingQuery | None = None) -> list[CashClosing]:
        if self.fail_list:
            raise self.fail_list
        self.queries.append(query)
        return list(self.closings)

    def create_closing(self, entry: ClosingEntry, idempotency_key: str | None = None) -> CashClosing:
        self.created.append((entry, idempotency_key))
        if self.fail_create:
            raise self.fail_create
        return make_closing(closing_id=len(self.created), day=entry.day.isoformat())

    def download_report_pdf(self, day: date) -> bytes:
        if self.fail_download:
            raise self.fail_download
        return self.pdf


@dataclass
class FakeCashSessionClient:
    active: ActiveCashSession = field(default_factory=ActiveCashSession)
    fail_active: Exception | None = None
    fail_open: Exception | None = None
    fail_close: Exception | None = None
    opened: list[Any] = field(default_factory=list)
    closed: list[Any] = field(default_factory=list)

    def get_active(self) -> ActiveCashSession:
        if self.fail_active:
            raise self.fail_active
        return self.active

    def open_session(self, payload: Any) -> CashSessionActionResult:
        if self.fail_open:
            raise self.fail_open
        self.opened.append(payload)
        session = CashSession(id=5, session_number=1, status="OPEN", opening_cash=payload.opening_cash)
        self.active = ActiveCashSession(session=session)
        return CashSessionActionResult(session=session, message="Caja abierta")

    def close_session(self, payload: Any) -> CashSessionActionResult:
        if self.fail_close:
            raise self.fail_close
        self.closed.append(payload)
        previous = self.active.session
        session = CashSession(
            id=previous.id if previous else 5,
            status="CLOSED",
            opening_cash=previous.opening_cash if previous else 0,
            closing_cash=payload.closing_cash,
        )
        self.active = ActiveCashSession()
        return CashSessionActionResult(
            session=session,
            statistics=CashSessionStatistics(total_sales=120000, cash_sales=90000, sales_count=4, duration_minutes=480),
            message="Caja cerrada",
        )


@dataclass
class FakeAuthClient:
    login_error: Exception | None = None

    def login(self, username: str, password: str) -> TokenResponse:
        if self.login_error:
            raise self.login_error
        return TokenResponse(token="jwt-1", user=UserResponse(id=1, username=username))


@dataclass
class FakeSession:
    config: Any
    closing_client: FakeCashClosingClient = field(default_factory=FakeCashClosingClient)
    session_client: FakeCashSessionClient = field(default_factory=FakeCashSessionClient)
    auth: FakeAuthClient = field(default_factory=FakeAuthClient)
    token: str | None = None
    user: UserResponse | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def auth_client(self) -> FakeAuthClient:
        return self.auth

    def cash_closing_client(self) -> FakeCashClosingClient:
        return self.closing_client

    def cash_session_client(self) -> FakeCashSessionClient:
        return self.session_client

    def establish(self, token: TokenResponse, user: UserResponse | None = None) -> None:
        self.token = token.access_token
        self.user = user or token.user

    def clear(self) -> None:
        self.token = None
        self.user = None
