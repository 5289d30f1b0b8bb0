from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def positive_money(value) -> Decimal:
    value = to_money(value)
    if value <= 0:
        raise ValueError("amount must be greater than 0")
    return value


def required_text(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class SettingsSchema(BaseModel):
    cycle_start_day: int = Field(default=1, ge=1, le=31)
    currency: str = "USD"

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, value: str) -> str:
        return required_text(value).upper()


class AccountSchema(BaseModel):
    name: str
    type: Literal["main", "saving", "custom"] = "custom"
    balance: Decimal = Decimal("0")

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return required_text(value)

    @field_validator("balance")
    @classmethod
    def round_balance(cls, value: Decimal) -> Decimal:
        return to_money(value)


class CategorySchema(BaseModel):
    name: str
    type: Literal["income", "expense"]

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return required_text(value)


class TransactionSchema(BaseModel):
    account_id: str = Field(min_length=1)
    type: Literal["income", "expense"]
    category: str
    description: str = ""
    amount: Decimal
    date: date

    @field_validator("category")
    @classmethod
    def strip_category(cls, value: str) -> str:
        return required_text(value)

    @field_validator("amount")
    @classmethod
    def round_amount(cls, value: Decimal) -> Decimal:
        return positive_money(value)


class TransferSchema(BaseModel):
    source_id: str = Field(min_length=1)
    dest_id: str = Field(min_length=1)
    amount: Decimal
    date: date
    description: str | None = None

    @field_validator("amount")
    @classmethod
    def round_amount(cls, value: Decimal) -> Decimal:
        return positive_money(value)

    @model_validator(mode="after")
    def distinct_accounts(self):
        if self.source_id == self.dest_id:
            raise ValueError("Source and destination accounts must be different")
        return self


class RecurringRuleSchema(BaseModel):
    account_id: str = Field(min_length=1)
    to_account_id: str | None = None
    type: Literal["income", "expense", "transfer"]
    category: str = ""
    description: str = ""
    amount: Decimal | None = None
    interval_unit: Literal["day", "week", "month", "year"] = "month"
    interval_value: int = Field(default=1, ge=1)
    start_date: date
    end_date: date | None = None

    @field_validator("amount")
    @classmethod
    def round_amount(cls, value: Decimal | None) -> Decimal | None:
        # None marks a variable-amount rule
        return None if value is None else positive_money(value)

    @model_validator(mode="after")
    def check_shape(self):
        if self.type == "transfer":
            if not self.to_account_id:
                raise ValueError("to_account_id is required for transfers")
            if self.to_account_id == self.account_id:
                raise ValueError("Source and destination accounts must be different")
            self.category = "Transfer"
        else:
            self.to_account_id = None
            self.category = required_text(self.category)
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class DebtSchema(BaseModel):
    name: str
    total_amount: Decimal = Field(ge=0)
    current_balance: Decimal = Field(ge=0)
    interest_rate: Decimal = Field(default=Decimal("0"), ge=0)
    minimum_payment: Decimal = Field(default=Decimal("0"), ge=0)
    due_date: date | None = None
    start_date: date | None = None
    notes: str = ""

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return required_text(value)

    @field_validator("total_amount", "current_balance", "minimum_payment")
    @classmethod
    def round_money(cls, value: Decimal) -> Decimal:
        return to_money(value)


class DebtPaymentSchema(BaseModel):
    debt_id: str = Field(min_length=1)
    account_id: str = Field(min_length=1)
    amount: Decimal
    date: date
    description: str | None = None

    @field_validator("amount")
    @classmethod
    def round_amount(cls, value: Decimal) -> Decimal:
        return positive_money(value)
