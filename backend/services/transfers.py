import logging
from datetime import date
from typing import Dict, List, Optional

from core.api_client import LedgerApiClient
from core.business_date import business_date
from core.quantities import total_bottles
from schemas.inventory import ShopInventoryItem
from schemas.transfers import (
    TGBCL_ID,
    ShiftProduct,
    ShiftRequest,
    ShiftResult,
    ShiftTransferRecord,
    Supplier,
    TransferReport,
    TransferReportRow,
)

logger = logging.getLogger(__name__)

USER_SHOP_PREFIX = "user_shop_"

TGBCL = Supplier(id=TGBCL_ID, shop_name="TGBCL", retailer_code="TGBCL", source="default")


def _is_current_shop(shop: dict, shop_id=None, retailer_code: Optional[str] = None, shop_name: Optional[str] = None) -> bool:
    # Same precedence as the shop switcher: id, then retailer code, then name.
    if shop_id is not None and shop.get("id") is not None:
        return str(shop.get("id")) == str(shop_id)
    if retailer_code and shop.get("retailer_code"):
        return shop.get("retailer_code") == retailer_code
    if shop_name:
        return shop.get("shop_name") == shop_name
    return False


def build_suppliers(
    user_shops: List[dict],
    supplier_shops: List[dict],
    shop_id=None,
    retailer_code: Optional[str] = None,
    shop_name: Optional[str] = None,
) -> List[Supplier]:
    out = [TGBCL]
    for shop in user_shops:
        if _is_current_shop(shop, shop_id, retailer_code, shop_name):
            continue
        out.append(
            Supplier(
                id=f"{USER_SHOP_PREFIX}{shop.get('id')}",
                shop_name=shop.get("shop_name") or "",
                retailer_code=shop.get("retailer_code"),
                source="user_shop",
            )
        )
    for shop in supplier_shops:
        out.append(Supplier.model_validate({**shop, "source": "manual"}))
    return out


def list_suppliers(
    client: LedgerApiClient,
    shift_type: str = "in",
    shop_id=None,
    retailer_code: Optional[str] = None,
    shop_name: Optional[str] = None,
) -> List[Supplier]:
    suppliers = build_suppliers(client.user_shops(), client.supplier_shops(), shop_id, retailer_code, shop_name)
    if shift_type == "out":
        # stock never goes back to the depot
        suppliers = [s for s in suppliers if s.id != TGBCL_ID]
    return suppliers


def available_for(item: ShopInventoryItem) -> int:
    """Closing count for the business date, else total stock, else raw quantity."""
    if item.closing_stock is not None:
        return item.closing_stock
    if item.opening_stock or item.received_stock:
        return item.total_stock
    return item.quantity


def _available_map(items: List[ShopInventoryItem]) -> Dict[object, int]:
    out = {}
    for it in items:
        out.setdefault(it.id, available_for(it))
        if it.master_brand_id is not None:
            out.setdefault(it.master_brand_id, available_for(it))
    return out


def validate_shift(request: ShiftRequest, suppliers: List[Supplier], stock: Optional[List[ShopInventoryItem]] = None) -> List[ShiftProduct]:
    """Products with a non-zero quantity, or ValueError describing what is wrong."""
    if not request.supplier_id:
        raise ValueError("Please select a supplier")
    if request.supplier_id not in {s.id for s in suppliers}:
        raise ValueError(f"Unknown supplier: {request.supplier_id}")
    if request.shift_type == "out" and request.supplier_id == TGBCL_ID:
        raise ValueError("Stock cannot be shifted out to TGBCL")
    if not request.products:
        raise ValueError("Please add at least one product")

    products = [p for p in request.products if p.cases > 0 or p.bottles > 0]
    if not products:
        raise ValueError("Please enter quantities for the products")

    if request.shift_type == "out":
        available = _available_map(stock or [])
        problems = []
        for p in products:
            have = p.available if p.available is not None else available.get(p.master_brand_id, 0)
            want = total_bottles(p.cases, p.bottles, p.pack_quantity)
            if want > have:
                problems.append(f"{p.name or p.master_brand_id}: available {have}, requested {want}")
        if problems:
            raise ValueError("; ".join(problems))
    return products


def build_record(product: ShiftProduct, shift_type: str, supplier: Supplier) -> ShiftTransferRecord:
    qty = total_bottles(product.cases, product.bottles, product.pack_quantity)
    from_tgbcl = supplier.id == TGBCL_ID
    source_shop_id = None
    supplier_shop_id = None
    if supplier.id.startswith(USER_SHOP_PREFIX):
        source_shop_id = supplier.id[len(USER_SHOP_PREFIX):]
    elif not from_tgbcl:
        supplier_shop_id = supplier.id
    return ShiftTransferRecord(
        master_brand_id=product.master_brand_id,
        quantity=-qty if shift_type == "out" else qty,
        supplier_name=supplier.shop_name or "Unknown",
        is_from_tgbcl=from_tgbcl,
        supplier_code="TGBCL" if from_tgbcl else supplier.retailer_code,
        source_shop_id=source_shop_id,
        supplier_shop_id=supplier_shop_id,
        shift_type=shift_type,
    )


def shift_stock(
    client: LedgerApiClient,
    request: ShiftRequest,
    shop_id=None,
    retailer_code: Optional[str] = None,
    shop_name: Optional[str] = None,
) -> ShiftResult:
    suppliers = list_suppliers(client, request.shift_type, shop_id, retailer_code, shop_name)
    stock = None
    if request.shift_type == "out" and any(p.available is None for p in request.products):
        stock = [ShopInventoryItem.model_validate(p) for p in client.shop_products().get("products") or []]
    products = validate_shift(request, suppliers, stock)

    supplier = next(s for s in suppliers if s.id == request.supplier_id)
    shifted = []
    # one POST per product; a failure stops the batch and propagates
    for p in products:
        record = build_record(p, request.shift_type, supplier)
        client.post_stock_shift(record.to_api())
        shifted.append(record)
    logger.info("Shifted %s %d products via %s", request.shift_type, len(shifted), supplier.shop_name)
    return ShiftResult(shifted=shifted, message="Stock successfully shifted.")


def transfer_rows(raw: List[dict]) -> List[TransferReportRow]:
    rows = []
    for i, r in enumerate(raw or [], start=1):
        row = TransferReportRow.model_validate(r)
        row.serial_number = i
        rows.append(row)
    return rows


def transfer_report(client: LedgerApiClient, day: Optional[date] = None) -> TransferReport:
    """Stock shifted in and out on one business date; quantities are bottles, unsigned."""
    day = day or business_date()
    shifted_in = transfer_rows(client.shifted_in(day))
    shifted_out = transfer_rows(client.shifted_out(day))
    return TransferReport(
        business_date=day,
        shifted_in=shifted_in,
        shifted_out=shifted_out,
        total_in=sum(r.quantity for r in shifted_in),
        total_out=sum(r.quantity for r in shifted_out),
    )
