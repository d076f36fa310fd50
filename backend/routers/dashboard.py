from fastapi import APIRouter, Depends

from core.api_client import LedgerApiClient
from core.deps import get_api_client
from schemas.reports import DashboardSummary
from services.dashboard import load_dashboard

router = APIRouter()


@router.get("/", response_model=DashboardSummary)
def get_dashboard(client: LedgerApiClient = Depends(get_api_client)):
    return load_dashboard(client)
