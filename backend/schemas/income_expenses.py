from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from schemas.common import Money, alias


class IncomeEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    day: Optional[date] = alias("day", "date")
    # upstream stores the income category as "source"
    category: str = alias("category", "source", default="")
    amount: Money = 0
    description: Optional[str] = ""

    @field_validator("day", mode="before")
    @classmethod
    def _date_part(cls, v):
        return v[:10] if isinstance(v, str) else v

    @field_validator("amount")
    @classmethod
    def _non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("amount must be >= 0")
        return v


class ExpenseEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    day: Optional[date] = alias("day", "date")
    category: str = ""
    amount: Money = 0
    description: Optional[str] = ""

    @field_validator("day", mode="before")
    @classmethod
    def _date_part(cls, v):
        return v[:10] if isinstance(v, str) else v

    @field_validator("amount")
    @classmethod
    def _non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("amount must be >= 0")
        return v


class DaySheet(BaseModel):
    day: date
    income: List[IncomeEntry]
    expenses: List[ExpenseEntry]
    total_income: float
    total_expenses: float
    net: float
    income_saved: bool
    expenses_saved: bool


class DaySheetSave(BaseModel):
    income: Optional[List[IncomeEntry]] = None
    expenses: Optional[List[ExpenseEntry]] = None
