from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel


def _amount_to_json(value: Decimal) -> int | float:
    # The API stores plain JSON numbers; whole currency units go out as ints.
    if value == value.to_integral_value():
        return int(value)
    return float(value)


Amount = Annotated[Decimal, PlainSerializer(_amount_to_json, return_type=Any, when_used="json")]

_ZERO = Decimal("0")


def _zero_if_missing(value: Any) -> Any:
    if value is None or value == "":
        return _ZERO
    return value


class DailySummary(BaseModel):
    """Per-day sales and outflow aggregates computed by the API."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)

    day: date | None = Field(default=None, validation_alias=AliasChoices("date", "fecha", "day"), serialization_alias="date")
    total_sales: Amount = _ZERO
    cash_sales: Amount = _ZERO
    card_sales: Amount = _ZERO
    transfer_sales: Amount = _ZERO
    credit_sales: Amount = _ZERO
    total_income: Amount = _ZERO
    total_expense: Amount = _ZERO
    total_payments: Amount = _ZERO
    system_cash: Amount | None = None
    closing_exists: bool | None = None

    @field_validator(
        "total_sales",
        "cash_sales",
        "card_sales",
        "transfer_sales",
        "credit_sales",
        "total_income",
        "total_expense",
        "total_payments",
        mode="before",
    )
    @classmethod
    def _missing_amounts_are_zero(cls, value: Any) -> Any:
        return _zero_if_missing(value)

    @property
    def has_sales(self) -> bool:
        return self.total_sales > 0


class ClosingEntry(BaseModel):
    """Closing submitted by the cashier. Expected cash and difference are derived server side."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    day: date = Field(validation_alias=AliasChoices("date", "day"), serialization_alias="date")
    opening_cash: Amount = Field(default=_ZERO, ge=0)
    closing_cash: Amount = Field(ge=0)
    notes: str | None = None

    @field_validator("notes")
    @classmethod
    def _blank_notes_are_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()


class CashClosing(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)

    id: int | str
    day: date = Field(validation_alias=AliasChoices("date", "fecha", "day"), serialization_alias="date")
    opening_cash: Amount = _ZERO
    closing_cash: Amount = _ZERO
    system_cash: Amount = _ZERO
    difference: Amount = _ZERO
    total_sales: Amount = _ZERO
    cash_sales: Amount = _ZERO
    card_sales: Amount = _ZERO
    transfer_sales: Amount = _ZERO
    credit_sales: Amount = _ZERO
    total_income: Amount = _ZERO
    total_expense: Amount = _ZERO
    total_payments: Amount = _ZERO
    notes: str | None = None
    created_at: datetime | None = None

    @field_validator(
        "opening_cash",
        "closing_cash",
        "system_cash",
        "difference",
        "total_sales",
        "cash_sales",
        "card_sales",
        "transfer_sales",
        "credit_sales",
        "total_income",
        "total_expense",
        "total_payments",
        mode="before",
    )
    @classmethod
    def _missing_amounts_are_zero(cls, value: Any) -> Any:
        return _zero_if_missing(value)

    @field_validator("day", mode="before")
    @classmethod
    def _date_part_only(cls, value: Any) -> Any:
        # Some rows come back as full ISO timestamps.
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value


class CashClosingQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    date_from: date | None = None
    date_to: date | None = None
