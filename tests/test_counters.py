"""Tests for :mod:`engine_telemetry.telemetry.metrics`."""

from __future__ import annotations

import copy
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from engine_telemetry.telemetry.metrics import Counter, CounterRegistry


def test_counter_increments_and_resets() -> None:
    counter = Counter("activityInstanceStart")

    counter.increment()
    counter.increment(4)

    assert counter.get() == 5
    assert counter.get_and_clear() == 5
    assert counter.get() == 0


@pytest.mark.parametrize("delta", [-1, 1.5, True, "2"])
def test_counter_rejects_invalid_delta(delta: object) -> None:
    counter = Counter("metric")

    with pytest.raises(ValueError):
        counter.increment(delta)  # type: ignore[arg-type]

    assert counter.get() == 0


def test_registry_creates_counters_lazily_in_registration_order() -> None:
    registry = CounterRegistry()

    registry.increment("b")
    registry.increment("a")
    registry.increment("b")
    registry.register("c")

    snapshot = registry.snapshot()
    assert list(snapshot.items()) == [("b", 2), ("a", 1), ("c", 0)]
    assert registry.names() == ("b", "a", "c")
    assert "a" in registry
    assert len(registry) == 3


def test_register_is_idempotent() -> None:
    registry = CounterRegistry()

    first = registry.register("cmd")
    second = registry.register("cmd")

    assert first is second
    assert len(registry) == 1


def test_snapshot_does_not_reset_or_track_later_increments() -> None:
    registry = CounterRegistry()
    registry.increment("x", 3)

    snapshot = registry.snapshot()
    registry.increment("x")
    registry.increment("y")

    assert dict(snapshot) == {"x": 3}
    assert registry.get("x") == 4


def test_get_and_clear_returns_previous_value_then_snapshot_reports_zero() -> None:
    registry = CounterRegistry()
    registry.increment("x", 7)
    before = registry.snapshot()["x"]

    cleared = registry.get_and_clear("x")

    assert cleared == before == 7
    assert registry.snapshot()["x"] == 0


def test_get_and_clear_unknown_name_does_not_register() -> None:
    registry = CounterRegistry()

    assert registry.get_and_clear("missing") == 0
    assert registry.get("missing") == 0
    assert "missing" not in registry


def test_get_and_clear_all_keeps_counters_registered() -> None:
    registry = CounterRegistry()
    registry.increment("first", 2)
    registry.increment("second", 5)

    drained = registry.get_and_clear_all()

    assert list(drained.items()) == [("first", 2), ("second", 5)]
    assert list(registry.snapshot().items()) == [("first", 0), ("second", 0)]


def test_clear_removes_all_entries() -> None:
    registry = CounterRegistry()
    registry.increment("first")

    registry.clear()

    assert len(registry) == 0
    assert dict(registry.snapshot()) == {}


def test_snapshot_is_read_only_and_deep_copyable() -> None:
    registry = CounterRegistry()
    registry.increment("x")

    snapshot = registry.snapshot()
    duplicate = copy.deepcopy(snapshot)

    with pytest.raises(TypeError):
        snapshot["x"] = 10  # type: ignore[index]
    assert duplicate == snapshot
    assert duplicate == {"x": 1}


def test_concurrent_increments_are_never_lost() -> None:
    registry = CounterRegistry()
    workers = 16
    per_worker = 2_000

    def work() -> None:
        for _ in range(per_worker):
            registry.increment("hot")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        for future in [pool.submit(work) for _ in range(workers)]:
            future.result()

    assert registry.snapshot()["hot"] == workers * per_worker


def test_concurrent_registration_converges_on_one_counter() -> None:
    registry = CounterRegistry()
    barrier = threading.Barrier(8)
    seen: list[Counter] = []
    lock = threading.Lock()

    def register() -> None:
        barrier.wait()
        counter = registry.register("RaceCmd")
        with lock:
            seen.append(counter)

    threads = [threading.Thread(target=register) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len({id(counter) for counter in seen}) == 1
    assert list(registry.snapshot().items()) == [("RaceCmd", 0)]


def test_concurrent_drains_never_split_or_duplicate_increments() -> None:
    registry = CounterRegistry()
    total = 20_000
    drained: list[int] = []
    done = threading.Event()

    def produce() -> None:
        for _ in range(total):
            registry.increment("events")
        done.set()

    def drain() -> None:
        while not done.is_set():
            drained.append(registry.get_and_clear("events"))

    producer = threading.Thread(target=produce)
    reporter = threading.Thread(target=drain)
    reporter.start()
    producer.start()
    producer.join()
    reporter.join()
    drained.append(registry.get_and_clear("events"))

    assert sum(drained) == total
