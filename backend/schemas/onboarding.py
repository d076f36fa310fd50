from datetime import date
from typing import List, Optional

from pydantic import BaseModel, field_validator

from schemas.common import EntityId


class OnboardingProduct(BaseModel):
    id: EntityId
    quantity: int = 0
    markup: float = 0.0

    @field_validator("quantity")
    @classmethod
    def _quantity(cls, v: int) -> int:
        if v < 0:
            raise ValueError("quantity must be 0 or greater")
        return v


class OnboardingRequest(BaseModel):
    products: List[OnboardingProduct]
    business_date: Optional[date] = None


class PriceUpdate(BaseModel):
    shop_inventory_id: EntityId
    markup: Optional[float] = None

    @field_validator("markup", mode="before")
    @classmethod
    def _blank_is_zero(cls, v):
        return 0.0 if v == "" else v


class PriceUpdateRequest(BaseModel):
    updates: List[PriceUpdate]


class SortOrderRequest(BaseModel):
    # product ids in the order the shop wants them listed
    product_ids: List[EntityId]


class BrandGroupOrder(BaseModel):
    brand_name: str
    product_ids: List[EntityId]
    group_order: int
