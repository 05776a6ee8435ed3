from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from ..error_mapper import rebrand
from ..exceptions import (
    ApiError,
    CashSessionAlreadyOpenError,
    CashSessionNotOpenError,
    ConflictError,
    EnvelopeError,
)
from ..models_cash_session import (
    ActiveCashSession,
    CashSession,
    CashSessionActionResult,
    CloseCashSessionRequest,
    OpenCashSessionRequest,
)
from .base import BaseClient, coerce_model, unwrap_envelope

logger = logging.getLogger(__name__)

SESSIONS_PATH = "/cash-session"

_ALREADY_OPEN_MARKERS = ("already open", "ya hay una caja abierta", "caja ya está abierta", "sesión activa")
_NOT_OPEN_MARKERS = ("not open", "no active", "no hay caja abierta", "no hay sesión")


@dataclass
class CashSessionClient(BaseClient):
    def get_active(self) -> ActiveCashSession:
        try:
            data = unwrap_envelope(
                self._request(
                    "GET",
                    f"{SESSIONS_PATH}/active",
                    use_get_cache=False,
                    module="cash_session",
                    operation="active",
                )
            )
        except EnvelopeError as exc:
            # success=false on this route means "register closed".
            logger.debug("cash_session_none_active", extra={"reason": exc.message})
            return ActiveCashSession()
        if data is None:
            return ActiveCashSession()
        if not isinstance(data, dict):
            raise ValueError("Expected active cash session response to be a JSON object")
        if "session" not in data and "id" in data:
            data = {"session": data}
        return ActiveCashSession.model_validate(data)

    def open_session(self, payload: OpenCashSessionRequest | Mapping[str, Any]) -> CashSessionActionResult:
        request = coerce_model(payload, OpenCashSessionRequest)
        return self._action("open", request.model_dump(by_alias=True, exclude_none=True, mode="json"))

    def close_session(self, payload: CloseCashSessionRequest | Mapping[str, Any]) -> CashSessionActionResult:
        request = coerce_model(payload, CloseCashSessionRequest)
        return self._action("close", request.model_dump(by_alias=True, exclude_none=True, mode="json"))

    def _action(self, action: str, body: dict[str, Any]) -> CashSessionActionResult:
        try:
            raw = self._request(
                "POST",
                f"{SESSIONS_PATH}/{action}",
                json_body=body,
                module="cash_session",
                operation=action,
                invalidate_paths=[SESSIONS_PATH],
            )
            data = unwrap_envelope(raw)
        except ApiError as exc:
            raise _map_session_error(exc) from exc
        message = raw.get("message") if isinstance(raw, dict) else None
        if data is None:
            return CashSessionActionResult(message=message)
        if not isinstance(data, dict):
            raise ValueError("Expected cash session response to be a JSON object")
        if "session" not in data and "id" in data:
            return CashSessionActionResult(session=CashSession.model_validate(data), message=message)
        return CashSessionActionResult.model_validate({**data, "message": message})


def _map_session_error(exc: ApiError) -> ApiError:
    combined = f"{exc.message} {exc.details or ''}".lower()
    if isinstance(exc, ConflictError) or any(marker in combined for marker in _ALREADY_OPEN_MARKERS):
        return rebrand(exc, CashSessionAlreadyOpenError)
    if any(marker in combined for marker in _NOT_OPEN_MARKERS):
        return rebrand(exc, CashSessionNotOpenError)
    return exc
