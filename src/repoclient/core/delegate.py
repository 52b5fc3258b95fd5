"""Generic delegation proxy used by the decorated repository types.

A :class:`Delegate` owns exactly one backing object and forwards to it
everything it does not declare itself: attribute reads, writes and
deletions, and method calls.  Subclasses declare the capability contract the
backing must satisfy and override the handful of operations whose results
need re-wrapping.

Example:
    >>> class Box:
    ...     size = 3
    ...     def grow(self, by, times=1):
    ...         self.size += by * times
    ...         return self.size
    >>> proxy = Delegate(Box())
    >>> proxy.grow(2, times=2)
    7
    >>> proxy.size = 1
    >>> proxy.backing.size
    1
"""

from __future__ import annotations

from typing import Any, ClassVar, Generic, TypeVar

from repoclient.core.exceptions import InvalidBackingObjectError

__all__ = ["Delegate", "Reference"]

T = TypeVar("T")
B = TypeVar("B")


class Reference(Generic[T]):
    """Mutable box standing in for a caller-held variable.

    Passed to :meth:`Delegate.call_by_reference` when the backing operation
    replaces its argument; the caller reads the replacement from ``value``.
    """

    __slots__ = ("value",)

    def __init__(self, value: T) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"Reference({self.value!r})"


class Delegate(Generic[B]):
    """Forward attribute access and method calls to a backing object."""

    # Capability contract the backing object must satisfy.
    contract: ClassVar[type | tuple[type, ...]] = object

    # Public attribute names stored on the proxy rather than forwarded.
    local_attributes: ClassVar[frozenset[str]] = frozenset()

    _backing: B

    def __init__(self, backing: B) -> None:
        if backing is None or not isinstance(backing, self.contract):
            raise InvalidBackingObjectError(
                f"{type(self).__name__} cannot wrap {type(backing).__name__}",
                component="delegate",
                details={"expected": _contract_name(self.contract)},
            )
        object.__setattr__(self, "_backing", backing)

    @property
    def backing(self) -> B:
        """The object this proxy delegates to."""
        return self._backing

    def _is_local(self, name: str) -> bool:
        if name.startswith("_") or name in self.local_attributes:
            return True
        return isinstance(getattr(type(self), name, None), property)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup on the proxy fails.
        if name == "_backing":
            raise AttributeError(name)
        return getattr(self._backing, name)

    def __setattr__(self, name: str, value: Any) -> None:
        if self._is_local(name):
            object.__setattr__(self, name, value)
        else:
            setattr(self._backing, name, value)

    def __delattr__(self, name: str) -> None:
        if self._is_local(name):
            object.__delattr__(self, name)
        else:
            delattr(self._backing, name)

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(dir(self._backing)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._backing!r})"

    def has_attribute(self, name: str) -> bool:
        """Check whether the backing object exposes ``name``."""
        return hasattr(self._backing, name)

    def call(self, method: str, *args: Any, **kwargs: Any) -> Any:
        """Invoke ``method`` on the backing object."""
        return getattr(self._backing, method)(*args, **kwargs)

    def call_by_reference(self, method: str, ref: Reference[Any], *args: Any, **kwargs: Any) -> Any:
        """Invoke ``method`` with the value held by ``ref`` as first argument.

        The backing operation returns the replacement for that argument.  A
        replacement other than ``None`` or ``False`` is stored back into
        ``ref``; the raw result is returned either way.
        """
        result = getattr(self._backing, method)(ref.value, *args, **kwargs)
        if result is not None and result is not False:
            ref.value = result
        return result


def _contract_name(contract: type | tuple[type, ...]) -> str:
    if isinstance(contract, tuple):
        return " | ".join(item.__name__ for item in contract)
    return contract.__name__
