from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from core.money import to_decimal
from schemas.common import Money, alias

BalanceStatus = Literal["SHORT", "SURPLUS", "BALANCED"]


class PaymentAmounts(BaseModel):
    """Money collected at the counter for one day, by mode of payment."""

    model_config = ConfigDict(extra="ignore")

    cash_amount: Money = alias("cash_amount", "cashAmount", "cash", default=0)
    upi_amount: Money = alias("upi_amount", "upiAmount", "upi", default=0)
    card_amount: Money = alias("card_amount", "cardAmount", "card", default=0)

    @field_validator("cash_amount", "upi_amount", "card_amount")
    @classmethod
    def _paise(cls, v: float) -> float:
        if v < 0:
            raise ValueError("amount must be >= 0")
        if Decimal(str(v)).as_tuple().exponent < -2:
            raise ValueError("amount can have at most 2 decimal places")
        return v

    @property
    def total(self) -> Decimal:
        return to_decimal(self.cash_amount) + to_decimal(self.upi_amount) + to_decimal(self.card_amount)


class PaymentRecord(PaymentAmounts):
    payment_date: Optional[date] = alias("payment_date", "paymentDate", "date")
    closing_counter_balance: Optional[float] = alias("closing_counter_balance", "closingCounterBalance")

    @field_validator("payment_date", mode="before")
    @classmethod
    def _date_part(cls, v):
        return v[:10] if isinstance(v, str) else v


class PaymentSaveRequest(PaymentAmounts):
    payment_date: Optional[date] = None


class CounterBalance(BaseModel):
    """closing = opening + sale + other income - expenses - collected.

    Positive means the counter is short, negative means a surplus.
    """

    opening_balance: float = 0.0
    todays_sale: float = 0.0
    other_income: float = 0.0
    expenses: float = 0.0
    collected: float = 0.0
    closing_balance: float = 0.0
    status: BalanceStatus = "BALANCED"


class PaymentSheet(BaseModel):
    payment_date: date
    cash_amount: float = 0.0
    upi_amount: float = 0.0
    card_amount: float = 0.0
    total: float = 0.0
    saved: bool = False
    balance: CounterBalance
    recent_payments: List[PaymentRecord] = []
