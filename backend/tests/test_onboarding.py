from datetime import date

import pytest

from schemas.brands import MasterBrand
from schemas.inventory import ShopInventoryItem
from schemas.onboarding import OnboardingProduct, OnboardingRequest, PriceUpdate, PriceUpdateRequest
from services.onboarding import (
    filter_candidates,
    onboarding_payload,
    price_updates,
    reorder,
    save_onboarding,
    save_sort_order,
    sort_order_groups,
)


def _inv(id, name, size, mb=None, opening=0):
    return ShopInventoryItem.model_validate({"id": id, "name": name, "size": size, "masterBrandId": mb, "openingStock": opening})


def test_candidates_skip_brands_with_opening_stock():
    brands = [MasterBrand.model_validate({"id": i, "name": f"B{i}"}) for i in (1, 2, 3)]
    inventory = [_inv(10, "B1", 750, mb=1, opening=6), _inv(11, "B2", 750, mb=2, opening=0)]
    assert [b.id for b in filter_candidates(brands, inventory)] == [2, 3]


def test_payload_uses_iso_business_date_and_dedupes():
    req = OnboardingRequest(products=[OnboardingProduct(id=1, quantity=6, markup=10), OnboardingProduct(id=1, quantity=2)])
    payload = onboarding_payload(req, today=date(2025, 3, 5))
    assert payload["businessDate"] == "2025-03-05"
    assert payload["products"] == [{"id": 1, "quantity": 6, "markup": 10.0}]


def test_negative_quantity_rejected():
    with pytest.raises(ValueError):
        OnboardingProduct(id=1, quantity=-1)


def test_empty_onboarding_rejected(fake):
    with pytest.raises(ValueError):
        save_onboarding(fake, OnboardingRequest(products=[]))


def test_price_updates():
    req = PriceUpdateRequest(updates=[PriceUpdate(shop_inventory_id="4", markup=""), PriceUpdate(shop_inventory_id=5, markup=12.5)])
    assert price_updates(req) == [
        {"shopInventoryId": 4, "markup": 0.0},
        {"shopInventoryId": 5, "markup": 12.5},
    ]


def test_sort_order_groups_by_brand_sizes_descending():
    items = [_inv(1, "Royal Stag", 180), _inv(2, "Old Monk", 750), _inv(3, "Royal Stag", 750)]
    groups = sort_order_groups(items)
    assert [(g.brand_name, g.product_ids, g.group_order) for g in groups] == [
        ("Royal Stag", [3, 1], 1),
        ("Old Monk", [2], 2),
    ]


def test_reorder_moves_requested_to_top():
    items = [_inv(1, "A", 750), _inv(2, "B", 750), _inv(3, "C", 750)]
    assert [i.id for i in reorder(items, [3])] == [3, 1, 2]
    with pytest.raises(ValueError):
        reorder(items, [9])


def test_save_sort_order_posts_camel_case(fake):
    fake.products = [{"id": 1, "name": "A", "size": 750}, {"id": 2, "name": "B", "size": 750}]
    save_sort_order(fake, [2])
    (groups,), = fake.called("update_sort_order")
    assert groups == [
        {"brandName": "B", "productIds": [2], "groupOrder": 1},
        {"brandName": "A", "productIds": [1], "groupOrder": 2},
    ]
