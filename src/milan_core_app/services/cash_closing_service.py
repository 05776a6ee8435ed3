from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

from milan_client_sdk import (
    ApiSession,
    CashClosing,
    CashClosingQuery,
    ClosingAlert,
    ClosingEntry,
    DailySummary,
    LastClosing,
    Reconciliation,
    build_closing_alerts,
    reconcile,
    validate_closing_entry,
    validate_date_range,
)
from milan_client_sdk.exceptions import ClosingNotFoundError
from milan_client_sdk.reconciliation import Number, to_amount

from .errors import ServiceError, normalize_error

logger = logging.getLogger(__name__)

CLOSING_REQUIRED_MESSAGE = "Complete the cash closing for this day before generating its report"


@dataclass(frozen=True)
class ClosingSubmission:
    closing: CashClosing
    reconciliation: Reconciliation


class CashClosingService:
    def __init__(self, session: ApiSession) -> None:
        self.session = session

    @property
    def tolerance(self) -> Decimal:
        return self.session.config.variance_tolerance

    @property
    def review_threshold(self) -> Decimal:
        return self.session.config.review_threshold

    def load_summary(self, day: date) -> DailySummary | None:
        try:
            summary = self.session.cash_closing_client().get_summary(day)
        except Exception as exc:
            logger.warning("closing_summary_failure", extra={"date": day.isoformat()})
            raise normalize_error(exc, fallback="Could not load the day's summary") from exc
        logger.info("closing_summary_loaded", extra={"date": day.isoformat(), "available": summary is not None})
        return summary

    def list_closings(self, date_from: date | None = None, date_to: date | None = None) -> list[CashClosing]:
        check = validate_date_range(date_from, date_to)
        if not check.ok:
            raise ServiceError(message=check.message(), code="VALIDATION_ERROR")
        try:
            rows = self.session.cash_closing_client().list_closings(
                CashClosingQuery(date_from=date_from, date_to=date_to)
            )
        except Exception as exc:
            raise normalize_error(exc, fallback="Could not load cash closings") from exc
        return sorted(rows, key=lambda row: row.day, reverse=True)

    def submit(
        self,
        *,
        day: date,
        opening_cash: Number,
        closing_cash: Number | None,
        summary: DailySummary | None,
        notes: str | None = None,
        idempotency_key: str | None = None,
    ) -> ClosingSubmission:
        opening = to_amount(opening_cash)
        counted = to_amount(closing_cash) if closing_cash is not None else None
        check = validate_closing_entry(
            closing_date=day,
            opening_cash=opening,
            closing_cash=counted,
            summary=summary,
        )
        if not check.ok:
            raise ServiceError(message=check.message(), code="VALIDATION_ERROR")
        figures = reconcile(
            opening,
            summary,
            counted,
            tolerance=self.tolerance,
            review_threshold=self.review_threshold,
        )
        entry = ClosingEntry(day=day, opening_cash=opening, closing_cash=counted, notes=notes)
        logger.info(
            "closing_submit_attempt",
            extra={"date": day.isoformat(), "tier": figures.tier.value, "review_advised": figures.review_advised},
        )
        try:
            closing = self.session.cash_closing_client().create_closing(entry, idempotency_key=idempotency_key)
        except Exception as exc:
            logger.warning("closing_submit_failure", extra={"date": day.isoformat()})
            raise normalize_error(exc, fallback="Could not save the cash closing") from exc
        logger.info("closing_submit_success", extra={"date": day.isoformat(), "closing_id": closing.id})
        return ClosingSubmission(closing=closing, reconciliation=figures)

    def download_report(self, day: date, target_dir: Path, *, verify_exists: bool = True) -> Path:
        if verify_exists:
            summary = self.load_summary(day)
            if summary is not None and summary.closing_exists is False:
                raise ServiceError(message=CLOSING_REQUIRED_MESSAGE, code="CLOSING_NOT_FOUND")
        try:
            content = self.session.cash_closing_client().download_report_pdf(day)
        except ClosingNotFoundError as exc:
            raise ServiceError(message=CLOSING_REQUIRED_MESSAGE, code=exc.code, trace_id=exc.trace_id) from exc
        except Exception as exc:
            raise normalize_error(exc, fallback="Could not generate the PDF report") from exc
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / f"cierre-caja-{day.isoformat()}.pdf"
        target.write_bytes(content)
        logger.info("closing_report_saved", extra={"date": day.isoformat(), "path": str(target)})
        return target

    def closing_alerts(
        self,
        closings: list[CashClosing],
        *,
        now: datetime,
        current_sales: Number = 0,
    ) -> list[ClosingAlert]:
        """Alerts for the newest closing in ``closings`` (as returned by ``list_closings``)."""
        last = LastClosing(day=closings[0].day, difference=closings[0].difference) if closings else None
        return build_closing_alerts(last, current_sales, now=now, review_threshold=self.review_threshold)
