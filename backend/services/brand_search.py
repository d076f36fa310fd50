"""
Type-ahead brand search.

Each keystroke calls `submit(term)`. The search waits out the debounce
window first; a newer keystroke cancels the one still waiting, so a burst
of typing costs a single upstream request for the last term.

Results are cached per (caller, trimmed term). Entries expire after
`SEARCH_CACHE_TTL` seconds and the least recently used ones are dropped past
`SEARCH_CACHE_SIZE`. A caller only ever sees entries that upstream produced
for its own token; requests without a token always go upstream.
"""

import asyncio
import hashlib
import logging
import time
from collections import OrderedDict
from typing import Callable, List, Optional, Tuple

from core.config import settings
from schemas.brands import MasterBrand

logger = logging.getLogger(__name__)

MAX_TERM_LENGTH = 100

Fetch = Callable[[str], List[dict]]


def normalize_term(term: Optional[str]) -> str:
    return (term or "")[:MAX_TERM_LENGTH].strip()


def caller_scope(token: Optional[str]) -> Optional[str]:
    """Cache scope for a bearer token; None when there is no token."""
    if not token:
        return None
    return hashlib.sha256(token.encode()).hexdigest()


class TTLCache:
    """In-memory LRU cache whose entries expire after `ttl` seconds."""

    def __init__(self, max_entries: int, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.max_entries = max_entries
        self.ttl = ttl
        self._clock = clock
        self._entries: "OrderedDict[tuple, tuple]" = OrderedDict()  # key -> (value, expires_at)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key) -> bool:
        return self.get(key) is not None

    def get(self, key):
        hit = self._entries.get(key)
        if hit is None:
            return None
        value, expires_at = hit
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return value

    def set(self, key, value) -> None:
        self._entries[key] = (value, self._clock() + self.ttl)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)


class BrandSearch:
    def __init__(
        self,
        fetch: Optional[Fetch] = None,
        debounce_ms: Optional[int] = None,
        max_entries: Optional[int] = None,
        ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetch = fetch
        self.debounce = (settings.search_debounce_ms if debounce_ms is None else debounce_ms) / 1000
        self._cache = TTLCache(
            settings.search_cache_size if max_entries is None else max_entries,
            settings.search_cache_ttl if ttl is None else ttl,
            clock,
        )
        self._pending: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        return len(self._cache)

    def cached(self, term: str, scope: str = "") -> bool:
        return (scope, normalize_term(term)) in self._cache

    def submit(self, term: str, fetch: Optional[Fetch] = None) -> "asyncio.Task[List[MasterBrand]]":
        """Schedule a debounced search; the previous pending one is cancelled."""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = asyncio.ensure_future(self._debounced(term, fetch))
        return self._pending

    async def _debounced(self, term: str, fetch: Optional[Fetch]) -> List[MasterBrand]:
        await asyncio.sleep(self.debounce)
        return await self.search(term, fetch)

    async def search(self, term: str, fetch: Optional[Fetch] = None) -> List[MasterBrand]:
        results, _ = await self.lookup(term, fetch)
        return results

    async def lookup(
        self,
        term: str,
        fetch: Optional[Fetch] = None,
        scope: Optional[str] = "",
    ) -> Tuple[List[MasterBrand], bool]:
        """
        (results, served_from_cache). An empty term never reaches upstream.

        `scope` separates callers; None bypasses the cache entirely.
        """
        q = normalize_term(term)
        if not q:
            return [], False
        key = (scope, q)
        if scope is not None:
            hit = self._cache.get(key)
            if hit is not None:
                return hit, True
        fetch = fetch or self._fetch
        if fetch is None:
            raise RuntimeError("BrandSearch has no fetch function")
        raw = await asyncio.to_thread(fetch, q)
        results = [MasterBrand.model_validate(r) for r in raw or []]
        if scope is not None:
            self._cache.set(key, results)
        logger.debug("Brand search %r: %d results", q, len(results))
        return results, False
