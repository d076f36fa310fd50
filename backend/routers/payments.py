from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from core.api_client import LedgerApiClient
from core.deps import get_api_client
from schemas.payments import PaymentSaveRequest, PaymentSheet
from services.payments import load_payment_sheet, save_payment

router = APIRouter()


@router.get("/", response_model=PaymentSheet)
def get_payments(day: Optional[date] = None, client: LedgerApiClient = Depends(get_api_client)):
    """Collections and counter balance; defaults to the current business date."""
    return load_payment_sheet(client, day)


@router.post("/", response_model=PaymentSheet)
def post_payments(body: PaymentSaveRequest, client: LedgerApiClient = Depends(get_api_client)):
    return save_payment(client, body, body.payment_date)
