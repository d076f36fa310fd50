from typing import List

from fastapi import APIRouter, Depends, Query

from core.api_client import LedgerApiClient
from core.deps import get_api_client, get_brand_search
from schemas.brands import BrandSearchResult, MasterBrand
from services.brand_search import BrandSearch, caller_scope, normalize_term

router = APIRouter()


@router.get("/", response_model=List[MasterBrand])
def list_brands(client: LedgerApiClient = Depends(get_api_client)):
    brands = [MasterBrand.model_validate(b) for b in client.list_master_brands()]
    return sorted(brands, key=lambda b: (b.name.lower(), -b.size_ml))


@router.get("/search", response_model=BrandSearchResult)
async def search_brands(
    q: str = Query(default="", max_length=500),
    client: LedgerApiClient = Depends(get_api_client),
    search: BrandSearch = Depends(get_brand_search),
):
    # cached results are only shared with the token that produced them
    scope = caller_scope(client.token)
    results, cached = await search.lookup(q, client.search_brands, scope=scope)
    return BrandSearchResult(query=normalize_term(q), results=results, cached=cached)
