from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from core.quantities import DEFAULT_PACK_QUANTITY, pack_or_default
from schemas.common import Count, EntityId, OptionalId, alias

ShiftType = Literal["in", "out"]
SupplierSource = Literal["default", "user_shop", "manual"]

TGBCL_ID = "tgbcl"


class Supplier(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    shop_name: str = alias("shop_name", "shopName", "name", default="")
    retailer_code: Optional[str] = alias("retailer_code", "retailerCode")
    source: SupplierSource = "manual"

    @field_validator("id", mode="before")
    @classmethod
    def _id_str(cls, v) -> str:
        return str(v)


class ShiftProduct(BaseModel):
    master_brand_id: EntityId
    name: str = ""
    brand_number: Optional[str] = None
    size_ml: int = 0
    pack_quantity: int = DEFAULT_PACK_QUANTITY
    cases: int = 0
    bottles: int = 0
    # stock on hand, only meaningful for "out" shifts
    available: Optional[int] = None

    @field_validator("cases", "bottles")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("pack_quantity", mode="before")
    @classmethod
    def _pack_default(cls, v) -> int:
        return pack_or_default(v)


class ShiftRequest(BaseModel):
    shift_type: ShiftType
    supplier_id: str
    products: List[ShiftProduct]


class ShiftTransferRecord(BaseModel):
    """Payload for one brand posted to /api/stock-shift (camelCase on the wire)."""

    master_brand_id: EntityId
    quantity: int
    supplier_name: str
    is_from_tgbcl: bool
    supplier_code: Optional[str] = None
    source_shop_id: OptionalId = None
    supplier_shop_id: Optional[str] = None
    shift_type: ShiftType

    def to_api(self) -> dict:
        return {
            "masterBrandId": self.master_brand_id,
            "quantity": self.quantity,
            "supplierName": self.supplier_name,
            "isFromTGBCL": self.is_from_tgbcl,
            "supplierCode": self.supplier_code,
            "sourceShopId": self.source_shop_id,
            "supplierShopId": self.supplier_shop_id,
            "shiftType": self.shift_type,
        }


class ShiftResult(BaseModel):
    shifted: List[ShiftTransferRecord]
    message: str


class TransferReportRow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    serial_number: int = 0
    brand_name: str = alias("brand_name", "brandName", "name", default="")
    brand_number: Optional[str] = alias("brand_number", "brandNumber")
    size_code: Optional[str] = alias("size_code", "sizeCode")
    quantity: Count = 0
    shop_name: str = alias("shop_name", "supplierName", "supplier_name", default="")
    retailer_code: Optional[str] = alias("retailer_code", "supplierCode", "supplier_code")
    transfer_date: Optional[date] = alias("transfer_date", "transferDate")

    @field_validator("brand_number", "size_code", "retailer_code", mode="before")
    @classmethod
    def _stringify(cls, v):
        if v is None:
            return None
        return str(v).strip() or None

    @field_validator("quantity")
    @classmethod
    def _unsigned(cls, v: int) -> int:
        # shifted-out rows are stored negative
        return abs(v)

    @field_validator("transfer_date", mode="before")
    @classmethod
    def _date_part(cls, v):
        return v[:10] if isinstance(v, str) else v


class TransferReport(BaseModel):
    business_date: date
    shifted_in: List[TransferReportRow]
    shifted_out: List[TransferReportRow]
    total_in: int = 0
    total_out: int = 0
