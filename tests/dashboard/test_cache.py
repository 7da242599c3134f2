from dashboard.cache import ConfigCache


def test_entry_is_fresh_until_duration_elapses(clock):
    cache = ConfigCache(1000, clock=clock)
    cache.store("a: 1")

    clock.advance(999)
    assert cache.get() == "a: 1"

    clock.advance(1)
    assert cache.get() is None
    assert cache.data == "a: 1"


def test_empty_cache_is_never_fresh(clock):
    cache = ConfigCache(1000, clock=clock)
    assert cache.is_fresh() is False
    assert cache.get() is None


def test_clear_resets_slot(clock):
    cache = ConfigCache(1000, clock=clock)
    cache.store("a: 1")

    cache.clear()

    assert cache.data is None
    assert cache.timestamp == 0
