from datetime import date
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from schemas.common import Count, Money, OptionalId, alias

ReportType = Literal["daily", "weekly", "monthly", "yearly", "custom"]


class ReceivedStockRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    master_brand_id: OptionalId = alias("master_brand_id", "masterBrandId")
    brand_number: Optional[str] = alias("brand_number", "brandNumber")
    brand_name: Optional[str] = alias("brand_name", "brandName")
    size_code: Optional[str] = alias("size_code", "sizeCode")
    size_ml: Count = alias("size_ml", "sizeMl", default=0)
    invoice_quantity: Count = alias("invoice_quantity", "invoiceQuantity", default=0)
    mrp_price: Money = alias("mrp_price", "mrpPrice", default=0)

    @field_validator("brand_number", "size_code", mode="before")
    @classmethod
    def _stringify(cls, v):
        if v is None:
            return None
        return str(v).strip() or None


class SalesRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    master_brand_id: OptionalId = alias("master_brand_id", "masterBrandId")
    brand_number: Optional[str] = alias("brand_number", "brandNumber")
    brand_name: Optional[str] = alias("brand_name", "brandName")
    size_code: Optional[str] = alias("size_code", "sizeCode")
    size_ml: Count = alias("size_ml", "sizeMl", default=0)
    pack_quantity: Count = alias("pack_quantity", "packQuantity", default=0)
    brand_kind: Optional[str] = alias("brand_kind", "brandKind")
    standard_mrp: Money = alias("standard_mrp", "standardMrp", "mrp", default=0)
    sold_bottles: Count = alias("sold_bottles", "soldBottles", default=0)

    @field_validator("brand_number", "size_code", mode="before")
    @classmethod
    def _stringify(cls, v):
        if v is None:
            return None
        return str(v).strip() or None


class ReportRow(BaseModel):
    id: OptionalId = None
    key: str
    order: int
    brand_number: Optional[str] = None
    brand_name: str
    base_name: str
    size_code: Optional[str] = None
    size_ml: int = 0
    pack_type: Optional[str] = None
    pack_quantity: Optional[int] = None
    brand_kind: str
    bottles: int
    cases: Optional[int] = None
    loose_bottles: int
    mrp: float
    invoice_price: float = 0.0
    mrp_value: float
    invoice_value: float = 0.0


class KindTotal(BaseModel):
    label: str
    mrp_value: float
    invoice_value: float = 0.0
    share: float


class KindTop(BaseModel):
    label: str
    count: int
    top: List[ReportRow]


class PeriodTotal(BaseModel):
    label: str
    mrp_total: float
    invoice_total: float = 0.0


class ReportTotals(BaseModel):
    bottles: int
    mrp_value: float
    invoice_value: float = 0.0


class BrandReport(BaseModel):
    """Stock lifted / sales report for one date range."""

    title: str
    report_type: ReportType
    start_date: date
    end_date: date
    rows: List[ReportRow]
    groups: Dict[str, List[str]]
    totals: ReportTotals
    kind_totals: List[KindTotal]
    kind_share_total: float
    kinds_top: List[KindTop]
    period_totals: List[PeriodTotal]


class CategoryTotal(BaseModel):
    category: str
    amount: float


class IncomeExpenseReport(BaseModel):
    title: str
    report_type: ReportType
    start_date: date
    end_date: date
    income_by_category: List[CategoryTotal]
    expenses_by_category: List[CategoryTotal]
    total_income: float
    total_expenses: float
    net: float
    daily: List[Dict]


class DashboardSummary(BaseModel):
    business_date: date
    stock_value: float = 0.0
    stock_lifted_invoice_value: float = 0.0
    stock_lifted_mrp_value: float = 0.0
    todays_sale: float = 0.0
    counter_balance: float = 0.0
    degraded: bool = False
