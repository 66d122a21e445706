import threading
import time
from unittest.mock import Mock

import pytest
from django.core.cache import caches

from gangrate.core.cost.cache import NullTaggedCache, SingleFlight, TaggedCache, Tagged
from gangrate.core.cost.errors import CacheTransportError


@pytest.fixture
def cache():
    return TaggedCache(caches["cost_cache"], namespace="test")


class Counter:
    """A compute function that counts its calls."""

    def __init__(self, value=1):
        self.value = value
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.value


def wait_for(condition, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not condition():
        if time.monotonic() > deadline:
            raise AssertionError("Timed out waiting for condition")
        time.sleep(0.005)


def test_round_trip(cache):
    compute = Counter(135)

    assert cache.get_or_compute("k", {"a", "b"}, compute) == 135
    assert cache.get_or_compute("k", {"a", "b"}, compute) == 135

    # Verify the second read was served from the cache
    assert compute.calls == 1


def test_purge_invalidates_tagged_entries(cache):
    compute = Counter(10)
    cache.get_or_compute("k", {"a", "b"}, compute)

    cache.purge({"b"})
    assert cache.get_or_compute("k", {"a", "b"}, compute) == 10

    assert compute.calls == 2


def test_unrelated_purge_keeps_entries(cache):
    compute = Counter()
    cache.get_or_compute("k", {"a"}, compute)

    cache.purge({"z"})
    cache.get_or_compute("k", {"a"}, compute)

    assert compute.calls == 1


def test_purge_is_idempotent(cache):
    compute = Counter()
    cache.get_or_compute("k", {"a"}, compute)

    cache.purge({"a"})
    cache.purge({"a"})
    cache.purge(set())

    assert cache.get_or_compute("k", {"a"}, compute) == 1
    assert cache.get_or_compute("k", {"a"}, compute) == 1
    assert compute.calls == 2


def test_discovered_tags_invalidate(cache):
    calls = []

    def compute():
        calls.append(1)
        return Tagged(42, frozenset({"child"}))

    assert cache.get_or_compute("k", {"parent"}, compute) == 42
    cache.purge({"child"})
    assert cache.get_or_compute("k", {"parent"}, compute) == 42

    assert len(calls) == 2


def test_purge_during_compute_leaves_entry_stale(cache):
    """A write landing mid-computation must not leave its old value cached."""
    values = iter([1, 2])

    def compute():
        value = next(values)
        if value == 1:
            cache.purge({"a"})
        return value

    assert cache.get_or_compute("k", {"a"}, compute) == 1
    # The first value was computed before the purge finished, so it is stale
    assert cache.get_or_compute("k", {"a"}, compute) == 2
    assert cache.get_or_compute("k", {"a"}, compute) == 2


def test_nested_reads_make_outer_entry_depend_on_inner_tags(cache):
    inner = Counter(5)
    outer_calls = []

    def outer():
        outer_calls.append(1)
        return cache.get_or_compute("inner", {"inner-tag"}, inner) * 2

    assert cache.get_or_compute("outer", {"outer-tag"}, outer) == 10
    assert cache.get_or_compute("outer", {"outer-tag"}, outer) == 10
    assert len(outer_calls) == 1

    cache.purge({"inner-tag"})

    assert cache.get_or_compute("outer", {"outer-tag"}, outer) == 10
    assert len(outer_calls) == 2
    assert inner.calls == 2


def test_nested_hit_still_records_inner_tags(cache):
    inner = Counter(3)
    cache.get_or_compute("inner", {"inner-tag"}, inner)

    def outer_fn():
        return cache.get_or_compute("inner", {"inner-tag"}, inner) + 1

    assert cache.get_or_compute("outer", {"outer-tag"}, outer_fn) == 4
    cache.purge({"inner-tag"})
    assert cache.get_or_compute("outer", {"outer-tag"}, outer_fn) == 4

    assert inner.calls == 2


def test_compute_errors_propagate_and_nothing_is_stored(cache):
    def broken():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        cache.get_or_compute("k", {"a"}, broken)

    assert cache.get_or_compute("k", {"a"}, Counter(7)) == 7


def test_lookup_failure_bypasses_cache(caplog_json):
    backend = Mock()
    backend.get.side_effect = ConnectionError("cache down")
    cache = TaggedCache(backend, namespace="test")
    compute = Counter(99)

    assert cache.get_or_compute("k", {"a"}, compute) == 99
    assert cache.get_or_compute("k", {"a"}, compute) == 99

    assert compute.calls == 2
    backend.set.assert_not_called()
    assert len(caplog_json.events("cost_cache_bypass")) == 2


def test_store_failure_is_logged_not_raised(caplog):
    backend = Mock(wraps=caches["cost_cache"])
    backend.set.side_effect = ConnectionError("cache down")
    cache = TaggedCache(backend, namespace="test")

    assert cache.get_or_compute("k", {"a"}, Counter(8)) == 8
    assert "Failed to store cost cache entry" in caplog.text


def test_purge_raises_on_backend_error():
    backend = Mock()
    backend.set_many.side_effect = ConnectionError("cache down")
    cache = TaggedCache(backend, namespace="test")

    with pytest.raises(CacheTransportError):
        cache.purge({"a"})


def test_purge_raises_when_keys_were_not_stored():
    backend = Mock(wraps=caches["cost_cache"])
    backend.set_many.return_value = ["test:tag:a"]
    cache = TaggedCache(backend, namespace="test")

    with pytest.raises(CacheTransportError):
        cache.purge({"a"})


def test_null_cache_always_computes():
    cache = NullTaggedCache()
    compute = Counter(4)

    assert cache.get_or_compute("k", {"a"}, compute) == 4
    assert cache.get_or_compute("k", {"a"}, lambda: Tagged(5, frozenset({"b"}))) == 5
    cache.purge({"a"})
    assert cache.get_or_compute("k", {"a"}, compute) == 4
    assert compute.calls == 2


def test_single_flight_runs_one_compute_for_concurrent_misses(cache):
    threads_count = 8
    release = threading.Event()
    calls = []

    def compute():
        calls.append(1)
        release.wait(timeout=5)
        return 200

    results = []

    def read():
        results.append(cache.get_or_compute("k", {"a"}, compute))

    threads = [threading.Thread(target=read) for _ in range(threads_count)]
    for t in threads:
        t.start()

    # Verify every other thread is waiting on the leader before letting it finish
    wait_for(lambda: cache.flight.waiters("k") == threads_count - 1)
    release.set()
    for t in threads:
        t.join(timeout=5)

    assert len(calls) == 1
    assert results == [200] * threads_count
    assert not cache.flight.in_flight("k")


def test_single_flight_followers_get_leader_error():
    flight = SingleFlight()
    release = threading.Event()
    errors = []

    def leader_fn():
        release.wait(timeout=5)
        raise ValueError("bad input")

    def call():
        try:
            flight.do("k", leader_fn)
        except ValueError as e:
            errors.append(e)

    leader = threading.Thread(target=call)
    leader.start()
    wait_for(lambda: flight.in_flight("k"))

    follower = threading.Thread(target=call)
    follower.start()
    wait_for(lambda: flight.waiters("k") == 1)

    release.set()
    leader.join(timeout=5)
    follower.join(timeout=5)

    assert len(errors) == 2
    assert not flight.in_flight("k")


def test_single_flight_keys_are_independent():
    flight = SingleFlight()

    assert flight.do("a", lambda: 1) == 1
    assert flight.do("b", lambda: 2) == 2
    assert flight.waiters("a") == 0


def test_close_forgets_in_flight_calls(cache):
    cache.flight._calls["stuck"] = object()

    cache.close()

    assert not cache.flight.in_flight("stuck")
