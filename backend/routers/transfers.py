from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from core.api_client import LedgerApiClient
from core.deps import get_api_client
from schemas.transfers import ShiftRequest, ShiftResult, ShiftType, Supplier, TransferReport
from services.transfers import list_suppliers, shift_stock, transfer_report

router = APIRouter()


class _CurrentShop:
    # The caller's own shop, excluded from its supplier list.
    def __init__(
        self,
        shop_id: Optional[str] = Query(default=None),
        retailer_code: Optional[str] = Query(default=None),
        shop_name: Optional[str] = Query(default=None),
    ):
        self.shop_id = shop_id
        self.retailer_code = retailer_code
        self.shop_name = shop_name


@router.get("/suppliers", response_model=List[Supplier])
def get_suppliers(
    shift_type: ShiftType = "in",
    shop: _CurrentShop = Depends(),
    client: LedgerApiClient = Depends(get_api_client),
):
    return list_suppliers(client, shift_type, shop.shop_id, shop.retailer_code, shop.shop_name)


@router.get("/report", response_model=TransferReport)
def get_transfer_report(day: Optional[date] = None, client: LedgerApiClient = Depends(get_api_client)):
    return transfer_report(client, day)


@router.post("/", response_model=ShiftResult, status_code=status.HTTP_201_CREATED)
def create_shift(
    body: ShiftRequest,
    shop: _CurrentShop = Depends(),
    client: LedgerApiClient = Depends(get_api_client),
):
    try:
        return shift_stock(client, body, shop.shop_id, shop.retailer_code, shop.shop_name)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
