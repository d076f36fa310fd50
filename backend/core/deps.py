from typing import Generator, Optional

from fastapi import Header, Request

from core.api_client import LedgerApiClient
from services.brand_search import BrandSearch


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


def get_api_client(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    x_csrf_token: Optional[str] = Header(default=None),
) -> Generator[LedgerApiClient, None, None]:
    """Upstream client acting as the caller: their bearer token, or their `token` cookie."""
    token = bearer_token(authorization) or request.cookies.get("token")
    client = LedgerApiClient(token=token, csrf_token=x_csrf_token)
    try:
        yield client
    finally:
        client.session.close()


def get_brand_search(request: Request) -> BrandSearch:
    # one cache per app; created on first use when the lifespan did not run
    search = getattr(request.app.state, "brand_search", None)
    if search is None:
        search = request.app.state.brand_search = BrandSearch()
    return search
