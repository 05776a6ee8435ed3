from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models_cash_closing import Amount

SESSION_OPEN = "OPEN"
SESSION_CLOSED = "CLOSED"


class CashSession(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)

    id: int | str
    session_number: int | None = None
    status: str = SESSION_OPEN
    opening_cash: Amount = Decimal("0")
    closing_cash: Amount | None = None
    opened_at: datetime | None = None
    closed_at: datetime | None = None
    notes: str | None = None
    user_id: int | str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _upper_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @property
    def is_open(self) -> bool:
        return self.status == SESSION_OPEN


class CashSessionStatistics(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)

    total_sales: Amount = Decimal("0")
    cash_sales: Amount = Decimal("0")
    sales_count: int = 0
    duration_minutes: int | None = None
    difference: Amount | None = None


class ActiveCashSession(BaseModel):
    model_config = ConfigDict(extra="allow")

    session: CashSession | None = None
    statistics: CashSessionStatistics | None = None


class OpenCashSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    opening_cash: Amount = Field(ge=0)
    notes: str | None = None


class CloseCashSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    closing_cash: Amount = Field(ge=0)
    notes: str | None = None


class CashSessionActionResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    session: CashSession | None = None
    statistics: CashSessionStatistics | None = None
    message: str | None = None
