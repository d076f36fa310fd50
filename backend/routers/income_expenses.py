from datetime import date
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from core.api_client import LedgerApiClient
from core.deps import get_api_client
from schemas.income_expenses import DaySheet, DaySheetSave
from services.income_expenses import EXPENSE_CATEGORIES, INCOME_CATEGORIES, load_day_sheet, save_day_sheet

router = APIRouter()


@router.get("/categories", response_model=Dict[str, List[str]])
def list_categories():
    return {"income": INCOME_CATEGORIES, "expenses": EXPENSE_CATEGORIES}


@router.get("/{day}", response_model=DaySheet)
def get_day_sheet(day: date, client: LedgerApiClient = Depends(get_api_client)):
    return load_day_sheet(client, day)


@router.post("/{day}", response_model=DaySheet)
def post_day_sheet(day: date, body: DaySheetSave, client: LedgerApiClient = Depends(get_api_client)):
    if body.income is None and body.expenses is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to save")
    try:
        return save_day_sheet(client, day, body)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
