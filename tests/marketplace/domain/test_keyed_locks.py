"""Tests for keyed locks."""

import threading
import time

import pytest
from marketplace.locking import KeyedLocks, order_key, product_key, product_keys


def test_key_helpers():
    assert product_key("eggs") == "product:eggs"
    assert order_key("ord-1") == "order:ord-1"
    assert product_keys(["a", "b"]) == ["product:a", "product:b"]


def test_keys_acquired_sorted_and_deduplicated():
    locks = KeyedLocks()
    with locks.hold("product:b", "order:1", "product:b", "product:a") as held:
        assert held == ["order:1", "product:a", "product:b"]


def test_same_thread_can_reenter():
    locks = KeyedLocks()
    with locks.hold("product:a"):
        with locks.hold("product:a", "product:b"):
            pass


def test_same_key_serializes_threads():
    locks = KeyedLocks()
    active = []
    overlaps = []

    def _work():
        with locks.hold("product:a"):
            active.append(1)
            if len(active) > 1:
                overlaps.append(True)
            time.sleep(0.01)
            active.pop()

    threads = [threading.Thread(target=_work) for _ in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert overlaps == []


def test_opposite_order_does_not_deadlock():
    locks = KeyedLocks()
    done = []

    def _work(keys):
        for _ in range(50):
            with locks.hold(*keys):
                pass
        done.append(keys)

    first = threading.Thread(target=_work, args=(["product:a", "product:b"],))
    second = threading.Thread(target=_work, args=(["product:b", "product:a"],))
    first.start()
    second.start()
    first.join(timeout=5)
    second.join(timeout=5)

    assert len(done) == 2


def test_entries_dropped_after_release():
    locks = KeyedLocks()
    with locks.hold("product:a", "order:1"):
        assert len(locks) == 2
    assert len(locks) == 0


def test_reentrant_hold_keeps_entry_until_outermost_release():
    locks = KeyedLocks()
    with locks.hold("product:a"):
        with locks.hold("product:a", "product:b"):
            assert len(locks) == 2
        assert len(locks) == 1
    assert len(locks) == 0


def test_entries_dropped_after_release_on_error():
    locks = KeyedLocks()
    with pytest.raises(RuntimeError):
        with locks.hold("product:a"):
            raise RuntimeError("boom")
    assert len(locks) == 0


def test_registry_stays_bounded_under_many_keys():
    locks = KeyedLocks()

    def _work(n):
        for i in range(100):
            with locks.hold(f"order:{n}-{i}", "product:shared"):
                pass

    threads = [threading.Thread(target=_work, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(locks) == 0
