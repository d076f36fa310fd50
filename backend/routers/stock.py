from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from core.api_client import LedgerApiClient
from core.deps import get_api_client
from schemas.inventory import ClosingStockSaveRequest, ClosingStockSheet, SaleSheet
from services.closing_stock import load_sheet, save_closing_stock
from services.sale_sheet import load_sale_sheet

router = APIRouter()


@router.get("/closing", response_model=ClosingStockSheet)
def get_closing_sheet(day: Optional[date] = None, client: LedgerApiClient = Depends(get_api_client)):
    """Reconciliation sheet; defaults to the current business date."""
    return load_sheet(client, day)


@router.post("/closing", response_model=ClosingStockSheet)
def save_closing_sheet(body: ClosingStockSaveRequest, client: LedgerApiClient = Depends(get_api_client)):
    if not body.entries:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No closing stock entries")
    try:
        return save_closing_stock(client, body.entries, body.business_date)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/sale-sheet", response_model=SaleSheet)
def get_sale_sheet(
    day: Optional[date] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    client: LedgerApiClient = Depends(get_api_client),
):
    """One day (`day`) or a range (`start`..`end`); defaults to the current business date."""
    if day is not None:
        start = end = day
    try:
        return load_sale_sheet(client, start, end)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
