from __future__ import annotations

from decimal import Decimal

from milan_client_sdk.reconciliation import Reconciliation, VarianceDirection, VarianceTier

TIER_LABELS = {
    VarianceTier.BALANCED: "Balanced register",
    VarianceTier.MINOR: "Minor variance",
    VarianceTier.SIGNIFICANT: "Significant variance",
}

REVIEW_ADVISORY = {
    "title": "Significant difference detected",
    "message": "Review the count and the day's transactions before confirming the closing.",
}


def format_amount(value: Decimal | int | None) -> str:
    amount = Decimal(value or 0)
    sign = "-" if amount < 0 else ""
    return f"{sign}$ {abs(amount):,.0f}"


def format_signed(value: Decimal) -> str:
    if value > 0:
        return f"+{format_amount(value)}"
    return format_amount(value)


def describe_difference(figures: Reconciliation) -> str:
    if figures.direction is VarianceDirection.SURPLUS:
        return f"Surplus {format_amount(figures.difference)}"
    if figures.direction is VarianceDirection.SHORTAGE:
        return f"Shortage {format_amount(abs(figures.difference))}"
    return "No difference"


def render_reconciliation(figures: Reconciliation | None) -> dict[str, object] | None:
    if figures is None:
        return None
    return {
        **figures.to_dict(),
        "label": TIER_LABELS[figures.tier],
        "difference_text": describe_difference(figures),
        "expected_cash_text": format_amount(figures.expected_cash),
        "advisory": dict(REVIEW_ADVISORY) if figures.review_advised else None,
    }
