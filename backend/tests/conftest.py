from datetime import date
from typing import Optional

import pytest
from fastapi import Header
from fastapi.testclient import TestClient

from core.api_client import ApiError, ApiErrorType
from core.deps import bearer_token, get_api_client
from main import app
from services.brand_search import BrandSearch


def _iso(d) -> str:
    return d.isoformat() if isinstance(d, date) else str(d)


class FakeLedgerClient:
    """In-memory stand-in for LedgerApiClient. Records every call.

    Put a method name in `fail` to make it raise a SERVER_ERROR ApiError, or
    a date in `fail_days` to fail the per-day fetches for that date only.
    """

    def __init__(self):
        self.brands = []
        self.products = []
        self.products_by_day = {}
        self.received = {}
        self.sales = {}
        self.income_rows = {}
        self.expense_rows = {}
        self.user_shop_rows = []
        self.supplier_shop_rows = []
        self.summary_data = {}
        self.payment_rows = {}
        self.recent_payment_rows = []
        self.transfers_in = {}
        self.transfers_out = {}
        self.fail = set()
        self.fail_days = set()
        self.error_type = ApiErrorType.SERVER_ERROR
        self.calls = []
        self.token = None

    def _call(self, name, *args, day=None):
        self.calls.append((name, args))
        if name in self.fail or (day is not None and _iso(day) in self.fail_days):
            status = {ApiErrorType.UNAUTHORIZED: 401, ApiErrorType.FORBIDDEN: 403}.get(self.error_type, 500)
            raise ApiError(f"{name} failed", self.error_type, status)

    def called(self, name):
        return [args for n, args in self.calls if n == name]

    def list_master_brands(self):
        self._call("list_master_brands")
        return list(self.brands)

    def search_brands(self, query):
        self._call("search_brands", query)
        q = query.lower()
        return [b for b in self.brands if q in (b.get("name") or "").lower()]

    def shop_products(self, day=None):
        self._call("shop_products", day)
        products = self.products_by_day.get(_iso(day), self.products) if day else self.products
        return {"products": list(products)}

    def update_closing_stock(self, day, updates):
        self._call("update_closing_stock", day, updates)
        by_id = {u["id"]: u["closingStock"] for u in updates}
        for p in self.products:
            if p["id"] in by_id:
                p["closingStock"] = by_id[p["id"]]
        return {"updatedCount": len(updates)}

    def save_onboarding(self, products, business_date):
        self._call("save_onboarding", products, business_date)
        return {"success": True, "results": {"openingStockUpdated": len(products)}}

    def update_prices(self, updates):
        self._call("update_prices", updates)
        return {"updatedCount": len(updates)}

    def update_sort_order(self, groups):
        self._call("update_sort_order", groups)
        return {"success": True}

    def received_stock(self, day):
        self._call("received_stock", day, day=day)
        return list(self.received.get(_iso(day), []))

    def sales_rows(self, start, end):
        self._call("sales_rows", start, end, day=start if start == end else None)
        return list(self.sales.get((_iso(start), _iso(end)), []))

    def post_stock_shift(self, record):
        self._call("post_stock_shift", record)
        return {"success": True}

    def user_shops(self):
        self._call("user_shops")
        return list(self.user_shop_rows)

    def supplier_shops(self):
        self._call("supplier_shops")
        return list(self.supplier_shop_rows)

    def initialize_today(self):
        self._call("initialize_today")
        return {"success": True}

    def summary(self, day=None):
        self._call("summary", day)
        return dict(self.summary_data)

    def shifted_in(self, day):
        self._call("shifted_in", day, day=day)
        return list(self.transfers_in.get(_iso(day), []))

    def shifted_out(self, day):
        self._call("shifted_out", day, day=day)
        return list(self.transfers_out.get(_iso(day), []))

    def payments(self, day):
        self._call("payments", day, day=day)
        return {"payment": self.payment_rows.get(_iso(day)), "recentPayments": list(self.recent_payment_rows)}

    def save_payment(self, record):
        self._call("save_payment", record)
        self.payment_rows[record["payment_date"]] = dict(record)
        return {"success": True}

    def income(self, day):
        self._call("income", day, day=day)
        return list(self.income_rows.get(_iso(day), []))

    def expenses(self, day):
        self._call("expenses", day, day=day)
        return list(self.expense_rows.get(_iso(day), []))

    def save_income(self, day, entries):
        self._call("save_income", day, entries)
        self.income_rows[_iso(day)] = [{"source": e["category"], **e} for e in entries]
        return {"success": True}

    def save_expenses(self, day, entries):
        self._call("save_expenses", day, entries)
        self.expense_rows[_iso(day)] = list(entries)
        return {"success": True}


def brand(id, number, name, size, code, kind, mrp, invoice, pack=12, **extra):
    return {
        "id": id,
        "brandNumber": number,
        "name": name,
        "size": size,
        "sizeCode": code,
        "packQuantity": pack,
        "mrp": mrp,
        "invoice": invoice,
        "brandKind": kind,
        **extra,
    }


def product(id, master_brand_id, number, name, size, code, **extra):
    return {
        "id": id,
        "masterBrandId": master_brand_id,
        "brandNumber": number,
        "name": name,
        "size": size,
        "sizeCode": code,
        "packQuantity": 12,
        "openingStock": 0,
        "receivedStock": 0,
        "closingStock": None,
        **extra,
    }


@pytest.fixture()
def fake():
    f = FakeLedgerClient()
    f.brands = [
        brand(1, "101", "Royal Stag 750ml", 750, "QQ", "WHISKY", 1000, 800),
        brand(2, "201", "Kingfisher Strong 650ml", 650, "BB", "BEER", 150, 100),
        brand(3, "101", "Royal Stag 180ml", 180, "NN", "Whiskey", 250, 200, pack=48),
    ]
    f.products = [
        product(12, 2, "201", "Kingfisher Strong", 650, "BB", finalPrice=160),
        product(11, 1, "101", "Royal Stag", 750, "QQ", finalPrice=1050),
        product(13, 3, "101", "Royal Stag", 180, "NN", finalPrice=260),
    ]
    return f


@pytest.fixture()
def api(fake):
    def as_caller(authorization: Optional[str] = Header(default=None)):
        fake.token = bearer_token(authorization)
        return fake

    app.dependency_overrides[get_api_client] = as_caller
    app.state.brand_search = BrandSearch(debounce_ms=0)
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
