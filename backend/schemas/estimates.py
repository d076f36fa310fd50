from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, field_validator, model_validator

from core.quantities import DEFAULT_PACK_QUANTITY, pack_or_default
from schemas.common import EntityId


class TcsMode(str, Enum):
    # 1% of (net invoice value + retail excise turnover tax)
    CURRENT = "current"
    # 1.175% of invoice value alone, as older estimates were printed
    LEGACY = "legacy"


class EstimateLineItem(BaseModel):
    brand_id: EntityId
    brand_name: str = ""
    brand_number: Optional[str] = None
    size_code: Optional[str] = None
    size_ml: int = 0
    pack_quantity: int = DEFAULT_PACK_QUANTITY
    cases: int = 0
    bottles: int = 0
    invoice_price: float = 0.0
    special_margin: float = 0.0
    special_excise_cess: float = 0.0

    @field_validator("pack_quantity", mode="before")
    @classmethod
    def _pack_default(cls, v) -> int:
        return pack_or_default(v)

    @field_validator("cases", "bottles")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("invoice_price", "special_margin", "special_excise_cess", mode="before")
    @classmethod
    def _price(cls, v):
        return 0.0 if v is None or v == "" else v


class EstimateRequest(BaseModel):
    items: List[EstimateLineItem]
    ten_times_lifted: bool = False
    tcs_mode: TcsMode = TcsMode.CURRENT

    @model_validator(mode="after")
    def _unique_brands(self):
        seen = set()
        for it in self.items:
            if it.brand_id in seen:
                raise ValueError(f"brand {it.brand_id} is listed more than once")
            seen.add(it.brand_id)
        return self


class EstimateLineOut(BaseModel):
    brand_id: EntityId
    brand_name: str
    brand_number: Optional[str] = None
    size: str
    cases: int
    bottles: int
    total_bottles: int
    invoice_price: float
    amount: float


class EstimateSummary(BaseModel):
    lines: List[EstimateLineOut]
    total_bottles: int
    invoice_value: float
    mrp_rounding_off: float
    net_invoice_value: float
    retail_excise_turnover_tax: float
    special_excise_cess: float
    tcs: float
    grand_total: float
    tcs_mode: TcsMode
