from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from .models_cash_closing import DailySummary


@dataclass(frozen=True)
class ClosingValidationIssue:
    field: str
    reason: str


@dataclass(frozen=True)
class ClosingValidationResult:
    ok: bool
    issues: list[ClosingValidationIssue]

    def message(self) -> str:
        return "; ".join(f"{issue.field}: {issue.reason}" for issue in self.issues)


def _require_non_negative(value: Decimal | None, field: str, issues: list[ClosingValidationIssue]) -> None:
    if value is None:
        issues.append(ClosingValidationIssue(field=field, reason="is required"))
        return
    if value < 0:
        issues.append(ClosingValidationIssue(field=field, reason="must be >= 0"))


def validate_closing_entry(
    *,
    closing_date: date | str | None,
    opening_cash: Decimal | None,
    closing_cash: Decimal | None,
    summary: DailySummary | None,
) -> ClosingValidationResult:
    issues: list[ClosingValidationIssue] = []
    if closing_date is None or (isinstance(closing_date, str) and not closing_date.strip()):
        issues.append(ClosingValidationIssue(field="date", reason="is required"))
    if opening_cash is not None and opening_cash < 0:
        issues.append(ClosingValidationIssue(field="opening_cash", reason="must be >= 0"))
    _require_non_negative(closing_cash, "closing_cash", issues)
    if summary is None:
        issues.append(ClosingValidationIssue(field="summary", reason="daily summary is not available"))
    elif not summary.has_sales:
        issues.append(ClosingValidationIssue(field="total_sales", reason="no sales recorded for this day"))
    return ClosingValidationResult(ok=not issues, issues=issues)


def validate_open_session(opening_cash: Decimal | None) -> ClosingValidationResult:
    issues: list[ClosingValidationIssue] = []
    _require_non_negative(opening_cash, "opening_cash", issues)
    return ClosingValidationResult(ok=not issues, issues=issues)


def validate_close_session(closing_cash: Decimal | None, *, register_open: bool) -> ClosingValidationResult:
    issues: list[ClosingValidationIssue] = []
    _require_non_negative(closing_cash, "closing_cash", issues)
    if not register_open:
        issues.append(ClosingValidationIssue(field="session", reason="no register is open"))
    return ClosingValidationResult(ok=not issues, issues=issues)


def validate_date_range(date_from: date | None, date_to: date | None) -> ClosingValidationResult:
    issues: list[ClosingValidationIssue] = []
    if date_from is not None and date_to is not None and date_from > date_to:
        issues.append(ClosingValidationIssue(field="date_from", reason="must be on or before date_to"))
    return ClosingValidationResult(ok=not issues, issues=issues)


def is_late_closing(closing_date: date, today: date) -> bool:
    return closing_date != today
