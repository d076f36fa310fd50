from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from core.api_client import LedgerApiClient
from core.deps import get_api_client
from schemas.brands import MasterBrand
from schemas.onboarding import BrandGroupOrder, OnboardingRequest, PriceUpdateRequest, SortOrderRequest
from services.onboarding import save_onboarding, save_sort_order, search_candidates, update_prices

router = APIRouter()


@router.get("/candidates", response_model=List[MasterBrand])
def get_candidates(q: str = Query(min_length=1, max_length=100), client: LedgerApiClient = Depends(get_api_client)):
    """Brands matching `q` that the shop has not onboarded yet."""
    return search_candidates(client, q.strip())


@router.post("/", response_model=Dict)
def onboard_products(body: OnboardingRequest, client: LedgerApiClient = Depends(get_api_client)):
    try:
        return save_onboarding(client, body)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/prices", response_model=Dict)
def update_markups(body: PriceUpdateRequest, client: LedgerApiClient = Depends(get_api_client)):
    try:
        return update_prices(client, body)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/sort-order", response_model=List[BrandGroupOrder])
def update_sort_order(body: SortOrderRequest, client: LedgerApiClient = Depends(get_api_client)):
    try:
        return save_sort_order(client, body.product_ids)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
