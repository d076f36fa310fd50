import asyncio

from services.brand_search import BrandSearch, TTLCache, caller_scope


class Recorder:
    def __init__(self):
        self.terms = []

    def __call__(self, term):
        self.terms.append(term)
        return [{"id": 1, "name": f"{term} 750ml"}]


def test_burst_of_keystrokes_makes_one_request():
    fetch = Recorder()
    search = BrandSearch(fetch, debounce_ms=50)

    async def scenario():
        first = search.submit("r")
        await asyncio.sleep(0.01)
        second = search.submit("ro")
        await asyncio.sleep(0.01)
        last = search.submit("roy")
        results = await last
        return first, second, results

    first, second, results = asyncio.run(scenario())
    assert fetch.terms == ["roy"]
    assert first.cancelled() and second.cancelled()
    assert results[0].name == "roy 750ml"


def test_empty_term_never_fetches():
    fetch = Recorder()
    search = BrandSearch(fetch, debounce_ms=0)
    assert asyncio.run(search.search("   ")) == []
    assert fetch.terms == []


def test_results_cached_per_trimmed_term():
    fetch = Recorder()
    search = BrandSearch(fetch, debounce_ms=0)

    async def scenario():
        _, cached_first = await search.lookup("stag")
        _, cached_again = await search.lookup("  stag ")
        return cached_first, cached_again

    assert asyncio.run(scenario()) == (False, True)
    assert fetch.terms == ["stag"]
    assert search.cached("stag")


def test_long_terms_truncated():
    fetch = Recorder()
    search = BrandSearch(fetch, debounce_ms=0)
    asyncio.run(search.search("x" * 150))
    assert fetch.terms == ["x" * 100]


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_cache_keeps_only_the_most_recent_terms():
    fetch = Recorder()
    search = BrandSearch(fetch, debounce_ms=0, max_entries=3)

    async def scenario():
        for term in ["a", "b", "c"]:
            await search.lookup(term)
        await search.lookup("a")  # touch: "b" is now the oldest
        await search.lookup("d")

    asyncio.run(scenario())
    assert len(search) == 3
    assert not search.cached("b")
    assert search.cached("a") and search.cached("c") and search.cached("d")


def test_many_distinct_terms_stay_bounded():
    search = BrandSearch(Recorder(), debounce_ms=0, max_entries=50)

    async def scenario():
        for i in range(500):
            await search.lookup(f"term {i}")

    asyncio.run(scenario())
    assert len(search) == 50


def test_cached_results_expire():
    fetch = Recorder()
    clock = Clock()
    search = BrandSearch(fetch, debounce_ms=0, ttl=60, clock=clock)

    async def scenario():
        await search.lookup("stag")
        clock.now = 59
        _, fresh = await search.lookup("stag")
        clock.now = 120
        _, after_expiry = await search.lookup("stag")
        return fresh, after_expiry

    assert asyncio.run(scenario()) == (True, False)
    assert fetch.terms == ["stag", "stag"]


def test_callers_do_not_share_cached_results():
    fetch = Recorder()
    search = BrandSearch(fetch, debounce_ms=0)
    alice, bob = caller_scope("token-a"), caller_scope("token-b")

    async def scenario():
        await search.lookup("stag", scope=alice)
        _, bob_cached = await search.lookup("stag", scope=bob)
        _, anon_cached = await search.lookup("stag", scope=None)
        return bob_cached, anon_cached

    assert asyncio.run(scenario()) == (False, False)
    assert fetch.terms == ["stag", "stag", "stag"]
    assert caller_scope(None) is None
    assert search.cached("stag", scope=alice)


def test_ttl_cache_drops_expired_entries_on_read():
    clock = Clock()
    cache = TTLCache(max_entries=10, ttl=5, clock=clock)
    cache.set("k", [1])
    assert cache.get("k") == [1]
    clock.now = 5
    assert cache.get("k") is None
    assert len(cache) == 0
