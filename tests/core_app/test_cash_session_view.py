from __future__ import annotations

from decimal import Decimal

from milan_client_sdk.exceptions import CashSessionAlreadyOpenError, CashSessionNotOpenError, TransportError
from milan_client_sdk.models_cash_session import ActiveCashSession, CashSession, CashSessionStatistics

from milan_core_app.services.cash_session_service import CashSessionService
from milan_core_app.state import AppState
from milan_core_app.ui.cash_session_view import CashSessionView, format_duration
from milan_core_app.ui.notification_center import NotificationCenter


def _view(fake_session, state: AppState | None = None) -> CashSessionView:
    state = state or AppState()
    return CashSessionView(
        service=CashSessionService(fake_session, state),
        state=state,
        notifications=NotificationCenter(),
    )


def test_closed_register(fake_session) -> None:
    view = _view(fake_session)
    assert view.load() is True
    rendered = view.render()
    assert rendered["status_chip"]["label"] == "Register CLOSED"
    assert rendered["action_enabled"] == {"open": True, "close": False}
    assert rendered["statistics"] is None


def test_open_register_with_statistics(fake_session) -> None:
    fake_session.session_client.active = ActiveCashSession(
        session=CashSession(id=3, session_number=7, status="open", opening_cash=Decimal("50000")),
        statistics=CashSessionStatistics(total_sales=Decimal("120000"), cash_sales=Decimal("90000"), sales_count=4, duration_minutes=125),
    )
    view = _view(fake_session)
    view.load()
    rendered = view.render()
    assert rendered["status_chip"]["label"] == "Register OPEN"
    assert rendered["status_chip"]["session_number"] == 7
    assert rendered["statistics"]["total_sales_text"] == "$ 120,000"
    assert rendered["statistics"]["duration"] == "2h 5m"
    assert view.state.register_open


def test_open_action_updates_state(fake_session) -> None:
    view = _view(fake_session)
    view.load()
    result = view.open(Decimal("30000"), "turno tarde")
    assert result["ok"] is True
    assert view.state.register_open
    assert fake_session.session_client.opened[0].opening_cash == Decimal("30000")
    assert view.notifications.drain()[0]["message"] == "Caja abierta"


def test_open_rejected_when_register_already_open(fake_session) -> None:
    fake_session.session_client.active = ActiveCashSession(session=CashSession(id=3, status="OPEN"))
    view = _view(fake_session)
    view.load()
    result = view.open(1000)
    assert result["ok"] is False
    assert result["error"] == "The register is already open"
    assert fake_session.session_client.opened == []


def test_open_negative_amount(fake_session) -> None:
    view = _view(fake_session)
    result = view.open(-5)
    assert result["ok"] is False
    assert "opening_cash" in result["error"]


def test_open_api_conflict(fake_session) -> None:
    fake_session.session_client.fail_open = CashSessionAlreadyOpenError(
        code="HTTP_ERROR", message="Ya hay una caja abierta", details=None, trace_id="t-2", status_code=400
    )
    view = _view(fake_session)
    result = view.open(0)
    assert result == {"ok": False, "error": "Ya hay una caja abierta", "trace_id": "t-2"}


def test_load_failure_treats_register_as_closed(fake_session) -> None:
    fake_session.session_client.fail_active = TransportError(
        code="TRANSPORT_ERROR", message="refused", details=None, trace_id=None, status_code=0
    )
    state = AppState(active_cash_session=CashSession(id=1))
    view = _view(fake_session, state)
    assert view.load() is False
    assert not state.register_open
    assert view.render()["error"].startswith("Could not reach the server")


def test_format_duration() -> None:
    assert format_duration(None) is None
    assert format_duration(59) == "0h 59m"


def test_close_action_shows_statistics_and_closes_register(fake_session) -> None:
    fake_session.session_client.active = ActiveCashSession(
        session=CashSession(id=3, session_number=7, status="OPEN", opening_cash=Decimal("50000"))
    )
    view = _view(fake_session)
    view.load()
    result = view.close(Decimal("140000"), "fin de turno")
    assert result["ok"] is True
    assert result["session"]["status"] == "CLOSED"
    assert result["statistics"]["cash_sales_text"] == "$ 90,000"
    assert result["statistics"]["duration"] == "8h 0m"
    assert fake_session.session_client.closed[0].closing_cash == Decimal("140000")
    assert not view.state.register_open
    rendered = view.render()
    assert rendered["status_chip"]["label"] == "Register CLOSED"
    assert rendered["action_enabled"] == {"open": True, "close": False}
    assert rendered["statistics"]["sales_count"] == 4
    assert view.notifications.drain()[0]["message"] == "Caja cerrada"


def test_close_rejected_without_open_register(fake_session) -> None:
    view = _view(fake_session)
    view.load()
    assert view.close(1000) == {"ok": False, "error": "No register is open"}
    assert fake_session.session_client.closed == []


def test_close_requires_counted_cash(fake_session) -> None:
    fake_session.session_client.active = ActiveCashSession(session=CashSession(id=3, status="OPEN"))
    view = _view(fake_session)
    view.load()
    result = view.close(None)
    assert result["ok"] is False
    assert result["error"] == "closing_cash: is required"
    assert view.state.register_open


def test_close_api_failure_keeps_register_open(fake_session) -> None:
    fake_session.session_client.active = ActiveCashSession(session=CashSession(id=3, status="OPEN"))
    fake_session.session_client.fail_close = CashSessionNotOpenError(
        code="HTTP_ERROR", message="No hay caja abierta", details=None, trace_id="t-4", status_code=400
    )
    view = _view(fake_session)
    view.load()
    result = view.close(Decimal("1000"))
    assert result == {"ok": False, "error": "No hay caja abierta", "trace_id": "t-4"}
    assert view.state.register_open
    assert view.notifications.drain()[0]["title"] == "Close register"
