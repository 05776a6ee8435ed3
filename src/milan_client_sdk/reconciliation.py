"""Cash reconciliation for a day's closing.

Expected cash on hand is::

    opening_cash + cash_sales + total_income - total_expense - total_payments

and the variance is ``closing_cash - expected_cash``. Every closing screen uses
the functions here so the modal wizard, the detailed form and the stored-record
view always agree on the figures and on the tier shown to the cashier.

All functions are pure. When the day's summary is unavailable there is nothing
to reconcile against: :func:`reconcile_or_none` returns ``None`` and callers
render a "no data" state instead of a zero-filled result.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Union

from .config import DEFAULT_REVIEW_THRESHOLD, DEFAULT_VARIANCE_TOLERANCE
from .models_cash_closing import CashClosing, DailySummary

Number = Union[Decimal, int, float, str]


class VarianceTier(str, Enum):
    BALANCED = "balanced"
    MINOR = "minor variance"
    SIGNIFICANT = "significant variance"

    @property
    def severity(self) -> str:
        return _SEVERITY[self]


_SEVERITY = {
    VarianceTier.BALANCED: "success",
    VarianceTier.MINOR: "warning",
    VarianceTier.SIGNIFICANT: "error",
}


class VarianceDirection(str, Enum):
    NONE = "none"
    SURPLUS = "surplus"
    SHORTAGE = "shortage"


@dataclass(frozen=True)
class Reconciliation:
    opening_cash: Decimal
    closing_cash: Decimal
    expected_cash: Decimal
    difference: Decimal
    tier: VarianceTier
    review_advised: bool

    @property
    def direction(self) -> VarianceDirection:
        return variance_direction(self.difference)

    @property
    def severity(self) -> str:
        return self.tier.severity

    def to_dict(self) -> dict[str, object]:
        return {
            "opening_cash": self.opening_cash,
            "closing_cash": self.closing_cash,
            "expected_cash": self.expected_cash,
            "difference": self.difference,
            "tier": self.tier.value,
            "severity": self.severity,
            "direction": self.direction.value,
            "review_advised": self.review_advised,
        }


def to_amount(value: Number | None) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    # str() first so floats keep their printed value instead of binary noise.
    return Decimal(str(value))


def expected_cash(opening_cash: Number, summary: DailySummary) -> Decimal:
    return (
        to_amount(opening_cash)
        + summary.cash_sales
        + summary.total_income
        - summary.total_expense
        - summary.total_payments
    )


def classify_variance(difference: Number, *, tolerance: Number = DEFAULT_VARIANCE_TOLERANCE) -> VarianceTier:
    magnitude = abs(to_amount(difference))
    if magnitude == 0:
        return VarianceTier.BALANCED
    if magnitude <= to_amount(tolerance):
        return VarianceTier.MINOR
    return VarianceTier.SIGNIFICANT


def needs_review(difference: Number, *, threshold: Number = DEFAULT_REVIEW_THRESHOLD) -> bool:
    """Advisory only; independent of the tier."""
    return abs(to_amount(difference)) > to_amount(threshold)


def variance_direction(difference: Number) -> VarianceDirection:
    value = to_amount(difference)
    if value > 0:
        return VarianceDirection.SURPLUS
    if value < 0:
        return VarianceDirection.SHORTAGE
    return VarianceDirection.NONE


def reconcile(
    opening_cash: Number,
    summary: DailySummary,
    closing_cash: Number | None = 0,
    *,
    tolerance: Number = DEFAULT_VARIANCE_TOLERANCE,
    review_threshold: Number = DEFAULT_REVIEW_THRESHOLD,
) -> Reconciliation:
    opening = to_amount(opening_cash)
    counted = to_amount(closing_cash)
    expected = expected_cash(opening, summary)
    difference = counted - expected
    return Reconciliation(
        opening_cash=opening,
        closing_cash=counted,
        expected_cash=expected,
        difference=difference,
        tier=classify_variance(difference, tolerance=tolerance),
        review_advised=needs_review(difference, threshold=review_threshold),
    )


def reconcile_or_none(
    opening_cash: Number,
    summary: DailySummary | None,
    closing_cash: Number | None = 0,
    *,
    tolerance: Number = DEFAULT_VARIANCE_TOLERANCE,
    review_threshold: Number = DEFAULT_REVIEW_THRESHOLD,
) -> Reconciliation | None:
    if summary is None:
        return None
    return reconcile(
        opening_cash,
        summary,
        closing_cash,
        tolerance=tolerance,
        review_threshold=review_threshold,
    )


def reconcile_closing(
    closing: CashClosing,
    *,
    tolerance: Number = DEFAULT_VARIANCE_TOLERANCE,
    review_threshold: Number = DEFAULT_REVIEW_THRESHOLD,
) -> Reconciliation:
    """Classify a stored closing. The stored difference is authoritative."""
    return Reconciliation(
        opening_cash=closing.opening_cash,
        closing_cash=closing.closing_cash,
        expected_cash=closing.system_cash,
        difference=closing.difference,
        tier=classify_variance(closing.difference, tolerance=tolerance),
        review_advised=needs_review(closing.difference, threshold=review_threshold),
    )
