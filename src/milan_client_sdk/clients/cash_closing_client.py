from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping

from ..error_mapper import rebrand
from ..exceptions import (
    ApiError,
    ClosingAlreadyExistsError,
    ClosingNotFoundError,
    ConflictError,
    NoSalesForDayError,
    NotFoundError,
    ValidationError,
)
from ..idempotency import resolve_idempotency_key
from ..models_cash_closing import CashClosing, CashClosingQuery, ClosingEntry, DailySummary
from .base import BaseClient, coerce_model, unwrap_envelope

CLOSINGS_PATH = "/cash-closing"

_NO_SALES_MARKERS = ("no sales", "sin ventas", "no hay ventas")


@dataclass
class CashClosingClient(BaseClient):
    def get_summary(self, day: date | str) -> DailySummary | None:
        """Day aggregates, or ``None`` when the API has nothing for that date."""
        try:
            data = unwrap_envelope(
                self._request(
                    "GET",
                    f"{CLOSINGS_PATH}/summary",
                    params={"date": _iso(day)},
                    module="cash_closing",
                    operation="summary",
                )
            )
        except NotFoundError:
            return None
        if data is None:
            return None
        if not isinstance(data, dict):
            raise ValueError("Expected daily summary response to be a JSON object")
        return DailySummary.model_validate(data)

    def list_closings(self, query: CashClosingQuery | Mapping[str, Any] | None = None) -> list[CashClosing]:
        params = None
        if query is not None:
            params = coerce_model(query, CashClosingQuery).model_dump(by_alias=True, exclude_none=True, mode="json")
        data = unwrap_envelope(
            self._request(
                "GET",
                CLOSINGS_PATH,
                params=params or None,
                module="cash_closing",
                operation="list",
            )
        )
        if isinstance(data, dict):
            data = data.get("items", data.get("rows"))
        if not isinstance(data, list):
            raise ValueError("Expected cash closings response to be a JSON array")
        return [CashClosing.model_validate(row) for row in data]

    def create_closing(
        self,
        entry: ClosingEntry | Mapping[str, Any],
        idempotency_key: str | None = None,
    ) -> CashClosing:
        request = coerce_model(entry, ClosingEntry)
        key = resolve_idempotency_key(idempotency_key, prefix="closing")
        try:
            data = unwrap_envelope(
                self._request(
                    "POST",
                    CLOSINGS_PATH,
                    json_body=request.model_dump(by_alias=True, exclude_none=True, mode="json"),
                    headers=key.headers(),
                    module="cash_closing",
                    operation="create",
                    invalidate_paths=[CLOSINGS_PATH],
                )
            )
        except ApiError as exc:
            raise _map_closing_error(exc) from exc
        if not isinstance(data, dict):
            raise ValueError("Expected cash closing response to be a JSON object")
        return CashClosing.model_validate(data)

    def download_report_pdf(self, day: date | str) -> bytes:
        try:
            return self.http.download(
                f"{CLOSINGS_PATH}/report/pdf/{_iso(day)}",
                headers=self._auth_headers(),
                module="cash_closing",
                operation="report_pdf",
            )
        except NotFoundError as exc:
            raise rebrand(exc, ClosingNotFoundError, code="CLOSING_NOT_FOUND") from exc


def _iso(day: date | str) -> str:
    if isinstance(day, date):
        return day.isoformat()
    return date.fromisoformat(day.strip()).isoformat()


def _map_closing_error(exc: ApiError) -> ApiError:
    combined = f"{exc.message} {exc.details or ''}".lower()
    if isinstance(exc, ConflictError):
        return rebrand(exc, ClosingAlreadyExistsError)
    if isinstance(exc, ValidationError) and any(marker in combined for marker in _NO_SALES_MARKERS):
        return rebrand(exc, NoSalesForDayError)
    return exc
