from __future__ import annotations

import pytest

from repoclient.core.cache import DEFAULT_CAPACITY, BoundedCache
from repoclient.core.exceptions import InvalidArgumentError


def test_add_rejects_existing_key_without_changing_value() -> None:
    cache: BoundedCache[str] = BoundedCache(capacity=3)

    assert cache.add("a", "first") is True
    assert cache.add("a", "second") is False
    assert cache.get("a") == "first"
    assert len(cache) == 1


def test_add_evicts_oldest_key_first() -> None:
    cache: BoundedCache[int] = BoundedCache(capacity=2)
    cache.add("a", 1)
    cache.add("b", 2)

    # Reading does not refresh the position of "a".
    assert cache.get("a") == 1
    cache.add("c", 3)

    assert cache.get("a") is None
    assert cache.keys() == ["b", "c"]


def test_get_returns_default_for_missing_key() -> None:
    cache: BoundedCache[int] = BoundedCache()
    sentinel = object()

    assert cache.get("missing") is None
    assert cache.get("missing", sentinel) is sentinel


def test_set_overwrites_in_place_when_full() -> None:
    cache: BoundedCache[int] = BoundedCache(capacity=2)
    cache.add("a", 1)
    cache.add("b", 2)

    assert cache.set("a", 10) is True

    assert len(cache) == 2
    assert cache.get("a") == 10
    assert cache.keys() == ["a", "b"]


def test_set_inserts_missing_key_with_eviction() -> None:
    cache: BoundedCache[int] = BoundedCache(capacity=1)
    cache.set("a", 1)
    cache.set("b", 2)

    assert "a" not in cache
    assert cache.get("b") == 2


def test_delete_reports_whether_key_existed() -> None:
    cache: BoundedCache[int] = BoundedCache()
    cache.add("a", 1)

    assert cache.delete("a") is True
    assert cache.delete("a") is False
    assert cache.keys() == []


def test_zero_capacity_keeps_nothing() -> None:
    cache: BoundedCache[int] = BoundedCache(capacity=0)

    assert cache.add("a", 1) is True
    assert len(cache) == 0


def test_resize_growing_keeps_entries() -> None:
    cache: BoundedCache[int] = BoundedCache(capacity=2)
    cache.add("a", 1)
    cache.add("b", 2)

    cache.resize(5)

    assert cache.capacity == 5
    assert cache.keys() == ["a", "b"]


@pytest.mark.parametrize("capacity", [0, 1, 2])
def test_resize_not_growing_flushes(capacity: int) -> None:
    cache: BoundedCache[int] = BoundedCache(capacity=2)
    cache.add("a", 1)

    cache.resize(capacity)

    assert cache.capacity == capacity
    assert len(cache) == 0


def test_reset_restores_default_capacity() -> None:
    cache: BoundedCache[int] = BoundedCache(capacity=3)
    cache.add("a", 1)

    cache.reset()

    assert cache.capacity == DEFAULT_CAPACITY == 100
    assert len(cache) == 0


@pytest.mark.parametrize("capacity", [-1, 1.5, "10", True])
def test_invalid_capacity_rejected(capacity: object) -> None:
    with pytest.raises(InvalidArgumentError):
        BoundedCache(capacity=capacity)  # type: ignore[arg-type]

    cache: BoundedCache[int] = BoundedCache()
    with pytest.raises(InvalidArgumentError):
        cache.resize(capacity)  # type: ignore[arg-type]
