from __future__ import annotations

from typing import Any

import pytest

from repoclient.core.delegate import Delegate, Reference
from repoclient.core.exceptions import InvalidArgumentError, InvalidBackingObjectError


class Counter:
    def __init__(self) -> None:
        self.value = 0

    def increment(self, by: int, *, times: int = 1) -> int:
        self.value += by * times
        return self.value

    def replace(self, item: Any, suffix: str) -> Any:
        if item is None:
            return None
        return f"{item}{suffix}"

    def reject(self, item: Any) -> bool:
        return False


class CounterProxy(Delegate[Counter]):
    contract = Counter
    local_attributes = frozenset({"note"})

    def __init__(self, backing: Counter) -> None:
        super().__init__(backing)
        self.note = "local"


def test_rejects_missing_backing() -> None:
    with pytest.raises(InvalidBackingObjectError):
        CounterProxy(None)  # type: ignore[arg-type]


def test_rejects_backing_outside_contract() -> None:
    with pytest.raises(InvalidBackingObjectError) as exc_info:
        CounterProxy(object())  # type: ignore[arg-type]

    assert isinstance(exc_info.value, InvalidArgumentError)
    assert exc_info.value.context.details["expected"] == "Counter"


def test_backing_returns_same_reference() -> None:
    counter = Counter()

    assert CounterProxy(counter).backing is counter


def test_attribute_access_is_forwarded() -> None:
    counter = Counter()
    proxy = CounterProxy(counter)

    proxy.value = 5
    assert counter.value == 5
    assert proxy.value == 5
    assert hasattr(proxy, "value")

    del proxy.value
    assert not hasattr(counter, "value")
    assert not hasattr(proxy, "value")


def test_local_attributes_stay_on_proxy() -> None:
    counter = Counter()
    proxy = CounterProxy(counter)

    proxy.note = "changed"

    assert proxy.note == "changed"
    assert not hasattr(counter, "note")


def test_method_calls_are_forwarded_with_arguments() -> None:
    proxy = CounterProxy(Counter())

    assert proxy.increment(2, times=3) == 6
    assert proxy.call("increment", 1) == 7
    assert proxy.has_attribute("increment")
    assert not proxy.has_attribute("missing")


def test_missing_attribute_raises_attribute_error() -> None:
    proxy = CounterProxy(Counter())

    with pytest.raises(AttributeError):
        proxy.missing  # noqa: B018


def test_call_by_reference_rebinds_reference() -> None:
    proxy = CounterProxy(Counter())
    ref = Reference("item")

    result = proxy.call_by_reference("replace", ref, "-done")

    assert result == "item-done"
    assert ref.value == "item-done"


@pytest.mark.parametrize("method, args", [("replace", (None, "x")), ("reject", ("item",))])
def test_call_by_reference_keeps_reference_on_empty_result(method: str, args: tuple[Any, ...]) -> None:
    proxy = CounterProxy(Counter())
    ref = Reference(args[0])

    proxy.call_by_reference(method, ref, *args[1:])

    assert ref.value == args[0]


def test_dir_lists_backing_attributes() -> None:
    assert "increment" in dir(CounterProxy(Counter()))
