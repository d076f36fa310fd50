import logging
from collections import OrderedDict
from datetime import date
from typing import List, Optional

from core.api_client import LedgerApiClient
from core.business_date import business_date
from schemas.brands import MasterBrand
from schemas.inventory import ShopInventoryItem
from schemas.onboarding import BrandGroupOrder, OnboardingRequest, PriceUpdateRequest

logger = logging.getLogger(__name__)


def _shop_items(client: LedgerApiClient) -> List[ShopInventoryItem]:
    return [ShopInventoryItem.model_validate(p) for p in client.shop_products().get("products") or []]


def filter_candidates(brands: List[MasterBrand], inventory: List[ShopInventoryItem]) -> List[MasterBrand]:
    """Drop brands the shop already carries opening stock for."""
    onboarded = {it.master_brand_id for it in inventory if it.opening_stock > 0}
    return [b for b in brands if b.id not in onboarded]


def search_candidates(client: LedgerApiClient, query: str) -> List[MasterBrand]:
    brands = [MasterBrand.model_validate(b) for b in client.search_brands(query)]
    return filter_candidates(brands, _shop_items(client))


def onboarding_payload(request: OnboardingRequest, today: Optional[date] = None) -> dict:
    seen = set()
    products = []
    for p in request.products:
        if p.id in seen:
            continue
        seen.add(p.id)
        products.append({"id": p.id, "quantity": p.quantity, "markup": p.markup})
    day = request.business_date or today or business_date()
    return {"products": products, "businessDate": day.isoformat()}


def save_onboarding(client: LedgerApiClient, request: OnboardingRequest) -> dict:
    if not request.products:
        raise ValueError("Please select at least one product")
    payload = onboarding_payload(request)
    result = client.save_onboarding(payload["products"], payload["businessDate"])
    logger.info("Onboarded %d products for %s", len(payload["products"]), payload["businessDate"])
    return result


def price_updates(request: PriceUpdateRequest) -> List[dict]:
    return [{"shopInventoryId": u.shop_inventory_id, "markup": u.markup or 0.0} for u in request.updates]


def update_prices(client: LedgerApiClient, request: PriceUpdateRequest) -> dict:
    if not request.updates:
        raise ValueError("No price changes to save")
    return client.update_prices(price_updates(request))


def reorder(items: List[ShopInventoryItem], product_ids: List) -> List[ShopInventoryItem]:
    """Requested ids first, in the given order; everything else keeps its place after them."""
    by_id = {it.id: it for it in items}
    unknown = [i for i in product_ids if i not in by_id]
    if unknown:
        raise ValueError(f"unknown product ids: {unknown}")
    head = []
    for i in product_ids:
        if by_id[i] not in head:
            head.append(by_id[i])
    return head + [it for it in items if it not in head]


def sort_order_groups(items: List[ShopInventoryItem]) -> List[BrandGroupOrder]:
    groups: "OrderedDict[str, List[ShopInventoryItem]]" = OrderedDict()
    for it in items:
        groups.setdefault(it.name, []).append(it)
    out = []
    for n, (name, variants) in enumerate(groups.items(), start=1):
        variants = sorted(variants, key=lambda v: v.size_ml, reverse=True)
        out.append(BrandGroupOrder(brand_name=name, product_ids=[v.id for v in variants], group_order=n))
    return out


def save_sort_order(client: LedgerApiClient, product_ids: List) -> List[BrandGroupOrder]:
    groups = sort_order_groups(reorder(_shop_items(client), product_ids))
    client.update_sort_order([
        {"brandName": g.brand_name, "productIds": g.product_ids, "groupOrder": g.group_order}
        for g in groups
    ])
    return groups
