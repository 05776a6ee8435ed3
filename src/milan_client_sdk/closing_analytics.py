from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from .config import DEFAULT_VARIANCE_TOLERANCE
from .models_cash_closing import CashClosing
from .reconciliation import Number, VarianceTier, classify_variance

RECENT_WINDOW = 7


@dataclass(frozen=True)
class ClosingAnalytics:
    total: int
    perfect: int
    minor: int
    major: int
    accuracy_rate: float
    acceptable_rate: float
    average_difference: Decimal
    max_difference: Decimal
    total_shortage: Decimal
    total_surplus: Decimal
    recent_accuracy: float
    older_accuracy: float

    @property
    def trend(self) -> str:
        if self.recent_accuracy > self.older_accuracy:
            return "up"
        if self.recent_accuracy < self.older_accuracy:
            return "down"
        return "flat"

    def to_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "perfect": self.perfect,
            "minor": self.minor,
            "major": self.major,
            "accuracy_rate": self.accuracy_rate,
            "acceptable_rate": self.acceptable_rate,
            "average_difference": self.average_difference,
            "max_difference": self.max_difference,
            "total_shortage": self.total_shortage,
            "total_surplus": self.total_surplus,
            "recent_accuracy": self.recent_accuracy,
            "older_accuracy": self.older_accuracy,
            "trend": self.trend,
        }


def _rate(part: int, whole: int) -> float:
    if whole == 0:
        return 0.0
    return round(part * 100 / whole, 2)


def _perfect_count(closings: Sequence[CashClosing]) -> int:
    return sum(1 for closing in closings if closing.difference == 0)


def analyze_closings(
    closings: Sequence[CashClosing],
    *,
    tolerance: Number = DEFAULT_VARIANCE_TOLERANCE,
) -> ClosingAnalytics | None:
    """Accuracy figures over a newest-first closing history."""
    if not closings:
        return None
    tiers = [classify_variance(closing.difference, tolerance=tolerance) for closing in closings]
    perfect = tiers.count(VarianceTier.BALANCED)
    minor = tiers.count(VarianceTier.MINOR)
    major = tiers.count(VarianceTier.SIGNIFICANT)
    magnitudes = [abs(closing.difference) for closing in closings]
    total = len(closings)

    recent = closings[:RECENT_WINDOW]
    older = closings[RECENT_WINDOW:]

    return ClosingAnalytics(
        total=total,
        perfect=perfect,
        minor=minor,
        major=major,
        accuracy_rate=_rate(perfect, total),
        acceptable_rate=_rate(perfect + minor, total),
        average_difference=sum(magnitudes, Decimal("0")) / total,
        max_difference=max(magnitudes),
        total_shortage=sum((-c.difference for c in closings if c.difference < 0), Decimal("0")),
        total_surplus=sum((c.difference for c in closings if c.difference > 0), Decimal("0")),
        recent_accuracy=_rate(_perfect_count(recent), len(recent)),
        older_accuracy=_rate(_perfect_count(older), len(older)),
    )
