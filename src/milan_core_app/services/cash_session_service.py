from __future__ import annotations

import logging
from decimal import Decimal

from milan_client_sdk import ApiSession, validate_close_session, validate_open_session
from milan_client_sdk.models_cash_session import (
    ActiveCashSession,
    CashSessionActionResult,
    CloseCashSessionRequest,
    OpenCashSessionRequest,
)
from milan_client_sdk.reconciliation import Number, to_amount

from ..state import AppState
from .errors import ServiceError, normalize_error

logger = logging.getLogger(__name__)


class CashSessionService:
    def __init__(self, session: ApiSession, state: AppState) -> None:
        self.session = session
        self.state = state

    def refresh_active(self) -> ActiveCashSession:
        try:
            active = self.session.cash_session_client().get_active()
        except Exception as exc:
            # Unknown register state is treated as closed.
            self.state.active_cash_session = None
            raise normalize_error(exc, fallback="Could not load cash session") from exc
        self.state.active_cash_session = active.session
        logger.info("cash_session_loaded", extra={"open": self.state.register_open})
        return active

    def open_register(self, opening_cash: Number, notes: str | None = None) -> CashSessionActionResult:
        amount: Decimal | None = to_amount(opening_cash) if opening_cash is not None else None
        check = validate_open_session(amount)
        if not check.ok:
            raise ServiceError(message=check.message(), code="VALIDATION_ERROR")
        if self.state.register_open:
            raise ServiceError(message="The register is already open", code="CASH_SESSION_ALREADY_OPEN")
        logger.info("cash_session_open_attempt")
        try:
            result = self.session.cash_session_client().open_session(
                OpenCashSessionRequest(opening_cash=amount, notes=notes)
            )
        except Exception as exc:
            logger.warning("cash_session_open_failure", extra={"error": str(exc)})
            raise normalize_error(exc, fallback="Could not open the register") from exc
        if result.session is not None:
            self.state.active_cash_session = result.session
        else:
            self.refresh_active()
        logger.info("cash_session_open_success")
        return result

    def close_register(self, closing_cash: Number | None, notes: str | None = None) -> CashSessionActionResult:
        amount: Decimal | None = to_amount(closing_cash) if closing_cash is not None else None
        check = validate_close_session(amount, register_open=self.state.register_open)
        if not check.ok:
            not_open = any(issue.field == "session" for issue in check.issues)
            raise ServiceError(
                message="No register is open" if not_open else check.message(),
                code="CASH_SESSION_NOT_OPEN" if not_open else "VALIDATION_ERROR",
            )
        session_id = self.state.active_cash_session.id
        logger.info("cash_session_close_attempt", extra={"session_id": session_id})
        try:
            result = self.session.cash_session_client().close_session(
                CloseCashSessionRequest(closing_cash=amount, notes=notes)
            )
        except Exception as exc:
            logger.warning("cash_session_close_failure", extra={"session_id": session_id, "error": str(exc)})
            raise normalize_error(exc, fallback="Could not close the register") from exc
        self.state.active_cash_session = None
        logger.info("cash_session_close_success", extra={"session_id": session_id})
        return result
