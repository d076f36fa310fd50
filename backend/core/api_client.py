"""
Client for the upstream shop API (`/api/*`).

What it provides:
- JSON requests with the headers the shop API expects
  (X-Requested-With, optional X-CSRF-Token, optional bearer token)
- One token refresh + retry when a request comes back 401
- One retry after a short delay on network errors (never on timeouts)
- Typed errors (`ApiError.error_type`) instead of raw status codes
- Thin helpers for every upstream endpoint the ledger service uses
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

import requests

from core.config import settings

logger = logging.getLogger(__name__)


class ApiErrorType(str, Enum):
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    SERVER_ERROR = "SERVER_ERROR"
    HTTP_ERROR = "HTTP_ERROR"


def classify_status(status_code: int) -> ApiErrorType:
    if status_code == 401:
        return ApiErrorType.UNAUTHORIZED
    if status_code == 403:
        return ApiErrorType.FORBIDDEN
    if status_code in (500, 502, 503, 504):
        return ApiErrorType.SERVER_ERROR
    return ApiErrorType.HTTP_ERROR


class ApiError(RuntimeError):
    def __init__(self, message: str, error_type: ApiErrorType, status_code: Optional[int] = None):
        super().__init__(message)
        self.error_type = error_type
        self.status_code = status_code

    @classmethod
    def from_response(cls, method: str, path: str, resp: requests.Response) -> "ApiError":
        detail = ""
        try:
            body = resp.json()
            if isinstance(body, dict):
                detail = body.get("message") or body.get("error") or ""
        except ValueError:
            detail = (resp.text or "")[:200]
        msg = f"{method} {path} failed ({resp.status_code})"
        if detail:
            msg = f"{msg}: {detail}"
        return cls(msg, classify_status(resp.status_code), resp.status_code)


def _iso(d: date | str) -> str:
    return d.isoformat() if isinstance(d, date) else str(d)


@dataclass
class LedgerApiClient:
    base_url: str = settings.api_base_url
    token: Optional[str] = None
    csrf_token: Optional[str] = None
    timeout: float = settings.api_timeout
    max_retries: int = settings.api_max_retries
    retry_delay: float = settings.api_retry_delay
    session: requests.Session = field(default_factory=requests.Session)

    def __post_init__(self) -> None:
        self._refresh_lock = threading.Lock()

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "X-Requested-With": "XMLHttpRequest",
        }
        if self.csrf_token:
            headers["X-CSRF-Token"] = self.csrf_token
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _send(self, method: str, path: str, *, json: Any = None, params: Dict[str, Any] | None = None) -> requests.Response:
        url = self._url(path)
        attempt = 0
        while True:
            try:
                return self.session.request(
                    method,
                    url,
                    json=json,
                    params=params,
                    headers=self._headers(),
                    timeout=self.timeout,
                )
            except requests.Timeout as exc:
                raise ApiError(
                    "Request timeout - please check your connection", ApiErrorType.TIMEOUT
                ) from exc
            except requests.RequestException as exc:
                if attempt < self.max_retries:
                    attempt += 1
                    logger.warning(
                        "Network error on %s %s, retrying (%d/%d): %s",
                        method, path, attempt, self.max_retries + 1, exc,
                    )
                    time.sleep(self.retry_delay)
                    continue
                raise ApiError(f"Network error: {exc}", ApiErrorType.NETWORK_ERROR) from exc

    def refresh_token(self) -> bool:
        """
        POST /api/auth/refresh.

        Only one refresh runs at a time; a caller that finds a refresh already
        in flight gets False instead of waiting for it.
        """
        if not self._refresh_lock.acquire(blocking=False):
            return False
        try:
            resp = self.session.post(self._url("/api/auth/refresh"), headers=self._headers(), timeout=self.timeout)
            if not resp.ok:
                return False
            try:
                data = resp.json()
            except ValueError:
                data = None
            if isinstance(data, dict):
                new_token = data.get("token") or data.get("accessToken") or data.get("access_token")
                if new_token:
                    self.token = new_token
            return True
        except requests.RequestException as exc:
            logger.error("Token refresh failed: %s", exc)
            return False
        finally:
            self._refresh_lock.release()

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Dict[str, Any] | None = None,
        raise_for_status: bool = True,
    ) -> requests.Response:
        resp = self._send(method, path, json=json, params=params)

        # Auth retry happens at most once per request chain.
        if resp.status_code == 401 and self.refresh_token():
            logger.info("Token refreshed, retrying %s %s", method, path)
            resp = self._send(method, path, json=json, params=params)

        if raise_for_status and resp.status_code >= 400:
            err = ApiError.from_response(method, path, resp)
            logger.error("%s", err)
            raise err
        return resp

    def _json(self, method: str, path: str, **kwargs) -> Any:
        resp = self.request(method, path, **kwargs)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    def get(self, path: str, params: Dict[str, Any] | None = None) -> Any:
        return self._json("GET", path, params=params)

    def post(self, path: str, data: Any = None) -> Any:
        return self._json("POST", path, json=data)

    def put(self, path: str, data: Any = None) -> Any:
        return self._json("PUT", path, json=data)

    # ----------------------------
    # Session helpers (never raise)
    # ----------------------------

    def fetch_csrf_token(self) -> Optional[str]:
        try:
            resp = self.session.get(self._url("/api/csrf-token"), timeout=self.timeout)
            if resp.ok:
                self.csrf_token = resp.json().get("csrfToken")
                return self.csrf_token
        except (requests.RequestException, ValueError) as exc:
            logger.error("Failed to get CSRF token: %s", exc)
        return None

    def check_auth_status(self) -> bool:
        try:
            resp = self.session.get(self._url("/api/auth/status"), headers=self._headers(), timeout=self.timeout)
            return resp.ok
        except requests.RequestException as exc:
            logger.error("Auth check failed: %s", exc)
            return False

    def logout(self) -> bool:
        try:
            resp = self.session.post(self._url("/api/auth/logout"), headers=self._headers(), timeout=self.timeout)
            return resp.ok
        except requests.RequestException as exc:
            logger.error("Logout error: %s", exc)
            return False

    # ----------------------------
    # Catalog / shop inventory
    # ----------------------------

    def list_master_brands(self) -> List[dict]:
        data = self.get("/api/master-brands")
        if isinstance(data, dict):
            return data.get("brands") or []
        return data or []

    def search_brands(self, query: str) -> List[dict]:
        data = self.get("/api/search-brands", params={"q": query})
        if isinstance(data, dict):
            return data.get("brands") or []
        return data or []

    def shop_products(self, day: date | str | None = None) -> dict:
        params = {"date": _iso(day)} if day else None
        data = self.get("/api/shop/products", params=params)
        if isinstance(data, list):
            return {"products": data}
        return data or {}

    def update_closing_stock(self, day: date | str, updates: List[dict]) -> dict:
        return self.post("/api/closing-stock/update", {"date": _iso(day), "stockUpdates": updates}) or {}

    def save_onboarding(self, products: List[dict], business_date: str) -> dict:
        return self.post("/api/stock-onboarding/save", {"products": products, "businessDate": business_date}) or {}

    def update_prices(self, updates: List[dict]) -> dict:
        return self.post("/api/shop/inventory/price-update", {"updates": updates}) or {}

    def update_sort_order(self, groups: List[dict]) -> dict:
        return self.put("/api/shop/update-sort-order", {"sortedBrandGroups": groups}) or {}

    # ----------------------------
    # Stock movement / reports
    # ----------------------------

    def received_stock(self, day: date | str) -> List[dict]:
        data = self.get("/api/received-stock", params={"date": _iso(day)})
        if isinstance(data, dict):
            return data.get("receivedStock") or []
        return data or []

    def sales_rows(self, start: date | str, end: date | str) -> List[dict]:
        data = self.get("/api/reports/sales", params={"startDate": _iso(start), "endDate": _iso(end)})
        if isinstance(data, dict):
            return data.get("rows") or []
        return data or []

    def post_stock_shift(self, record: dict) -> dict:
        return self.post("/api/stock-shift", record) or {}

    def user_shops(self) -> List[dict]:
        return (self.get("/api/user-shops") or {}).get("shops") or []

    def supplier_shops(self) -> List[dict]:
        return (self.get("/api/supplier-shops") or {}).get("shops") or []

    def initialize_today(self) -> Any:
        return self.get("/api/stock/initialize-today")

    def summary(self, day: date | str | None = None) -> dict:
        params = {"date": _iso(day)} if day else None
        return self.get("/api/summary", params=params) or {}

    def shifted_in(self, day: date | str) -> List[dict]:
        return self._transfers("/api/stock-transfers/shifted-in", day)

    def shifted_out(self, day: date | str) -> List[dict]:
        return self._transfers("/api/stock-transfers/shifted-out", day)

    def _transfers(self, path: str, day: date | str) -> List[dict]:
        data = self.get(path, params={"date": _iso(day)})
        if isinstance(data, dict):
            return data.get("transfers") or []
        return data or []

    # ----------------------------
    # Payments
    # ----------------------------

    def payments(self, day: date | str) -> dict:
        """`{"payment": {...} or null, "recentPayments": [...]}` for the day."""
        return self.get("/api/payments", params={"date": _iso(day)}) or {}

    def save_payment(self, record: dict) -> dict:
        return self.post("/api/payments", record) or {}

    # ----------------------------
    # Income / expenses
    # ----------------------------

    def income(self, day: date | str) -> List[dict]:
        return self.get("/api/income-expenses/income", params={"date": _iso(day)}) or []

    def expenses(self, day: date | str) -> List[dict]:
        return self.get("/api/income-expenses/expenses", params={"date": _iso(day)}) or []

    def save_income(self, day: date | str, entries: List[dict]) -> dict:
        return self.post("/api/income-expenses/save-income", {"date": _iso(day), "income": entries}) or {}

    def save_expenses(self, day: date | str, entries: List[dict]) -> dict:
        return self.post("/api/income-expenses/save-expenses", {"date": _iso(day), "expenses": entries}) or {}
