from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from milan_client_sdk import CashClosing, reconcile_closing

from ..services.cash_closing_service import CashClosingService
from ..services.errors import ServiceError
from .formatting import format_amount, format_signed, render_reconciliation
from .notification_center import NotificationCenter


@dataclass
class ClosingDetailView:
    closing: CashClosing
    service: CashClosingService
    notifications: NotificationCenter
    is_generating: bool = False

    def download_report(self, target_dir: Path) -> Path | None:
        self.is_generating = True
        try:
            # The record is already stored, no need to probe the summary first.
            path = self.service.download_report(self.closing.day, target_dir, verify_exists=False)
        except ServiceError as exc:
            self.notifications.push(level="error", title="PDF report", message=exc.message)
            return None
        finally:
            self.is_generating = False
        self.notifications.push(level="success", title="PDF report", message=f"Saved {path.name}")
        return path

    def render(self) -> dict[str, Any]:
        closing = self.closing
        figures = reconcile_closing(
            closing,
            tolerance=self.service.tolerance,
            review_threshold=self.service.review_threshold,
        )
        return {
            "id": closing.id,
            "date": closing.day.isoformat(),
            "cash": {
                "opening": format_amount(closing.opening_cash),
                "expected": format_amount(closing.system_cash),
                "counted": format_amount(closing.closing_cash),
                "difference": format_signed(closing.difference),
            },
            "sales": {
                "total": format_amount(closing.total_sales),
                "cash": format_amount(closing.cash_sales),
                "card": format_amount(closing.card_sales),
                "transfer": format_amount(closing.transfer_sales),
                "credit": format_amount(closing.credit_sales),
            },
            "outflows": {
                "other_income": format_amount(closing.total_income),
                "expenses": format_amount(closing.total_expense),
                "supplier_payments": format_amount(closing.total_payments),
            },
            "notes": closing.notes,
            "reconciliation": render_reconciliation(figures),
            "generating": self.is_generating,
        }
