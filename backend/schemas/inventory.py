from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from core.quantities import DEFAULT_PACK_QUANTITY
from schemas.common import Count, EntityId, Money, OptionalId, alias
from schemas.payments import CounterBalance, PaymentAmounts


class ShopInventoryItem(BaseModel):
    """One shop's daily record for one brand/size."""

    model_config = ConfigDict(extra="ignore")

    id: EntityId
    master_brand_id: OptionalId = alias("master_brand_id", "masterBrandId")
    brand_number: Optional[str] = alias("brand_number", "brandNumber")
    name: str = alias("name", "brand_name", "brandName", default="")
    size_ml: Count = alias("size_ml", "size", "sizeMl", default=0)
    size_code: Optional[str] = alias("size_code", "sizeCode")
    pack_type: Optional[str] = alias("pack_type", "packType")
    pack_quantity: Count = alias("pack_quantity", "packQuantity", default=DEFAULT_PACK_QUANTITY)
    opening_stock: Count = alias("opening_stock", "openingStock", default=0)
    received_stock: Count = alias("received_stock", "receivedStock", "totalReceivedToday", default=0)
    closing_stock: Optional[int] = alias("closing_stock", "closingStock")
    quantity: Count = alias("quantity", "current_quantity", default=0)
    markup_price: Money = alias("markup_price", "markupPrice", "markup", default=0)
    final_price: Money = alias("final_price", "finalPrice", default=0)
    mrp: Money = alias("mrp", "standard_mrp", "standardMrp", default=0)
    last_updated: Optional[datetime] = alias("last_updated", "lastUpdated")

    @field_validator("brand_number", "size_code", mode="before")
    @classmethod
    def _stringify(cls, v):
        if v is None:
            return None
        return str(v).strip() or None

    @property
    def total_stock(self) -> int:
        return self.opening_stock + self.received_stock

    @property
    def order_key(self) -> str:
        return f"{self.brand_number}|{self.size_code}"


class ClosingStockRow(BaseModel):
    id: EntityId
    serial_number: Optional[int] = None
    brand_name: str
    brand_number: Optional[str] = None
    size: str
    display_size: str
    pack_type: Optional[str] = None
    opening_stock: int
    received: int
    total: int
    closing_stock: int
    is_closing_stock_set: bool
    sales: int
    sale_value: float


class ClosingStockTotals(BaseModel):
    opening_stock: int = 0
    received: int = 0
    total: int = 0
    closing_stock: int = 0
    sales: int = 0
    sale_value: float = 0.0


class ClosingStockSheet(BaseModel):
    business_date: date
    rows: List[ClosingStockRow]
    totals: ClosingStockTotals
    is_fully_saved: bool = False
    is_partially_saved: bool = False


class ClosingStockEntry(BaseModel):
    id: EntityId
    closing_stock: int = alias("closing_stock", "closingStock", default=...)


class ClosingStockSaveRequest(BaseModel):
    business_date: Optional[date] = None
    entries: List[ClosingStockEntry]


class SaleSheet(BaseModel):
    """The day's (or a range's) stock sheet with the money that goes with it."""

    start_date: date
    end_date: date
    rows: List[ClosingStockRow]
    totals: ClosingStockTotals
    opening_stock_value: float = 0.0
    received_stock_value: float = 0.0
    closing_stock_value: float = 0.0
    total_income: float = 0.0
    total_expenses: float = 0.0
    payments: PaymentAmounts
    balance: CounterBalance
    is_fully_saved: bool = False
    is_partially_saved: bool = False
    # sections whose upstream fetch failed and show zeros
    unavailable: List[str] = []
