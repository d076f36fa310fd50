from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from core.quantities import DEFAULT_PACK_QUANTITY, pack_or_default
from schemas.common import Count, EntityId, Money, alias


class MasterBrand(BaseModel):
    """Catalog entry for one brand in one size / pack type."""

    model_config = ConfigDict(extra="ignore")

    id: EntityId
    brand_number: Optional[str] = alias("brand_number", "brandNumber")
    name: str = alias("name", "brand_name", "brandName", default="")
    size_ml: Count = alias("size_ml", "size", "sizeMl", default=0)
    size_code: Optional[str] = alias("size_code", "sizeCode")
    pack_type: Optional[str] = alias("pack_type", "packType")
    pack_quantity: int = alias("pack_quantity", "packQuantity", default=DEFAULT_PACK_QUANTITY)
    mrp: Money = alias("mrp", "standard_mrp", "standardMrp", default=0)
    invoice_price: Money = alias("invoice_price", "invoice", "invoicePrice", default=0)
    special_margin: Money = alias("special_margin", "specialMargin", default=0)
    special_excise_cess: Money = alias("special_excise_cess", "specialExciseCess", default=0)
    brand_kind: Optional[str] = alias("brand_kind", "brandKind")

    @field_validator("brand_number", "size_code", mode="before")
    @classmethod
    def _stringify(cls, v):
        if v is None:
            return None
        return str(v).strip() or None

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v) -> str:
        return (v or "").strip()

    @field_validator("pack_quantity", mode="before")
    @classmethod
    def _pack_default(cls, v) -> int:
        return pack_or_default(v)

    @property
    def order_key(self) -> str:
        return f"{self.brand_number}|{self.size_code}"


class BrandSearchResult(BaseModel):
    query: str
    results: list[MasterBrand]
    cached: bool = False
