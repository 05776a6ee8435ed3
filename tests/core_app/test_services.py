from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from milan_client_sdk.exceptions import AuthError, ClosingNotFoundError, NoSalesForDayError
from milan_client_sdk.models_cash_session import ActiveCashSession, CashSession

from closing_fakes import make_closing, make_summary
from milan_core_app.services.auth_service import AuthService
from milan_core_app.services.cash_closing_service import CLOSING_REQUIRED_MESSAGE, CashClosingService
from milan_core_app.services.cash_session_service import CashSessionService
from milan_core_app.services.errors import ServiceError, normalize_error
from milan_core_app.state import AppState


def test_submit_validates_before_calling_api(fake_session) -> None:
    service = CashClosingService(fake_session)
    with pytest.raises(ServiceError) as excinfo:
        service.submit(day=date(2024, 3, 1), opening_cash=0, closing_cash=None, summary=make_summary())
    assert excinfo.value.code == "VALIDATION_ERROR"
    assert "closing_cash: is required" in excinfo.value.message
    assert fake_session.closing_client.created == []


def test_submit_returns_closing_and_reconciliation(fake_session) -> None:
    service = CashClosingService(fake_session)
    outcome = service.submit(
        day=date(2024, 3, 1),
        opening_cash=50000,
        closing_cash=Decimal("215000"),
        summary=make_summary(),
        idempotency_key="closing-1",
    )
    assert outcome.reconciliation.difference == 0
    assert outcome.closing.day == date(2024, 3, 1)
    assert fake_session.closing_client.created[0][1] == "closing-1"


def test_submit_maps_api_errors(fake_session) -> None:
    fake_session.closing_client.fail_create = NoSalesForDayError(
        code="HTTP_ERROR", message="No hay ventas", details="total 0", trace_id="t-1", status_code=400
    )
    service = CashClosingService(fake_session)
    with pytest.raises(ServiceError) as excinfo:
        service.submit(day=date(2024, 3, 1), opening_cash=0, closing_cash=10, summary=make_summary())
    assert excinfo.value.message == "No hay ventas"
    assert excinfo.value.trace_id == "t-1"
    assert excinfo.value.details == "HTTP_ERROR (HTTP 400): total 0"


def test_thresholds_come_from_config(fake_session) -> None:
    object.__setattr__(fake_session.config, "variance_tolerance", Decimal("100"))
    service = CashClosingService(fake_session)
    outcome = service.submit(day=date(2024, 3, 1), opening_cash=50000, closing_cash=215500, summary=make_summary())
    assert outcome.reconciliation.tier.value == "significant variance"


def test_list_closings_newest_first(fake_session) -> None:
    fake_session.closing_client.closings = [make_closing(1, "2024-03-01"), make_closing(2, "2024-03-03")]
    service = CashClosingService(fake_session)
    rows = service.list_closings(date(2024, 3, 1), date(2024, 3, 31))
    assert [row.id for row in rows] == [2, 1]
    query = fake_session.closing_client.queries[0]
    assert query.date_from == date(2024, 3, 1)


def test_report_requires_closing(fake_session, tmp_path) -> None:
    fake_session.closing_client.summary = make_summary(closingExists=False)
    service = CashClosingService(fake_session)
    with pytest.raises(ServiceError) as excinfo:
        service.download_report(date(2024, 3, 1), tmp_path)
    assert excinfo.value.message == CLOSING_REQUIRED_MESSAGE
    assert list(tmp_path.iterdir()) == []


def test_report_saved_with_dated_name(fake_session, tmp_path) -> None:
    fake_session.closing_client.summary = make_summary(closingExists=True)
    service = CashClosingService(fake_session)
    path = service.download_report(date(2024, 3, 1), tmp_path / "reports")
    assert path == tmp_path / "reports" / "cierre-caja-2024-03-01.pdf"
    assert path.read_bytes() == b"%PDF-1.4"


def test_report_not_found_on_server(fake_session, tmp_path) -> None:
    fake_session.closing_client.fail_download = ClosingNotFoundError(
        code="CLOSING_NOT_FOUND", message="No existe", details=None, trace_id="t-3", status_code=404
    )
    service = CashClosingService(fake_session)
    with pytest.raises(ServiceError) as excinfo:
        service.download_report(date(2024, 3, 1), tmp_path, verify_exists=False)
    assert excinfo.value.code == "CLOSING_NOT_FOUND"
    assert excinfo.value.trace_id == "t-3"


def test_closing_alerts_from_latest_closing(fake_session) -> None:
    fake_session.closing_client.closings = [make_closing(1, "2024-03-01"), make_closing(2, "2024-03-05")]
    service = CashClosingService(fake_session)
    alerts = service.closing_alerts(service.list_closings(), now=datetime(2024, 3, 10, 9, 0))
    assert [alert.type for alert in alerts] == ["missing", "pending"]
    assert alerts[1].data == {"days_pending": 5}


def test_auth_login_and_logout(fake_session) -> None:
    service = AuthService(fake_session)
    assert not service.has_active_session()
    token = service.login("caja1", "secret")
    assert token.access_token == "jwt-1"
    assert service.has_active_session()
    service.logout()
    assert not service.has_active_session()


def test_auth_login_failure_is_normalized(fake_session) -> None:
    fake_session.auth.login_error = AuthError(
        code="HTTP_ERROR", message="Credenciales inválidas", details=None, trace_id="t-4", status_code=401
    )
    service = AuthService(fake_session)
    with pytest.raises(ServiceError) as excinfo:
        service.login("caja1", "wrong")
    assert excinfo.value.message == "Credenciales inválidas"
    assert not service.has_active_session()


def test_normalize_error_fallback() -> None:
    assert normalize_error(RuntimeError(""), fallback="Could not load").message == "Could not load"
    original = ServiceError(message="kept")
    assert normalize_error(original, fallback="x") is original


def test_close_register_clears_active_session(fake_session) -> None:
    fake_session.session_client.active = ActiveCashSession(
        session=CashSession(id=9, status="OPEN", opening_cash=Decimal("50000"))
    )
    state = AppState()
    service = CashSessionService(fake_session, state)
    service.refresh_active()
    result = service.close_register(140000, "cierre")
    assert result.session.closing_cash == Decimal("140000")
    assert result.statistics.sales_count == 4
    assert state.active_cash_session is None
    assert fake_session.session_client.closed[0].notes == "cierre"


def test_close_register_checks_before_calling_api(fake_session) -> None:
    state = AppState()
    service = CashSessionService(fake_session, state)
    with pytest.raises(ServiceError) as excinfo:
        service.close_register(1000)
    assert excinfo.value.code == "CASH_SESSION_NOT_OPEN"

    state.active_cash_session = CashSession(id=9, status="OPEN")
    with pytest.raises(ServiceError) as excinfo:
        service.close_register(-1)
    assert excinfo.value.code == "VALIDATION_ERROR"
    assert excinfo.value.message == "closing_cash: must be >= 0"
    assert fake_session.session_client.closed == []
