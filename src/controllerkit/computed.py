"""Computed values: derived state with automatic dependency tracking.

A Computed wraps a function. When evaluated, it tracks which observables
the function reads and caches the result. When any dependency changes,
the cached value is invalidated. On next read, it re-evaluates.

Computed values are lazy: they only recompute when read. Invalidation is
not deferred by batches, so a read inside a transaction is always fresh.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from controllerkit._tracking import current_derivation, schedule, track

T = TypeVar("T")

_UNSET = object()


class Computed(Generic[T]):
    """A derived value that auto-tracks dependencies and caches the result."""

    __slots__ = ("_fn", "_value", "_dirty", "_dependencies", "_observers")

    lazy = True

    def __init__(self, fn: Callable[[], T]) -> None:
        self._fn = fn
        self._value = _UNSET
        self._dirty = True
        self._dependencies: set = set()
        self._observers: set = set()

    def get(self) -> T:
        """Read the computed value. Recomputes if dirty."""
        track(self)
        if self._dirty:
            self._recompute()
        return self._value

    def _recompute(self) -> None:
        """Re-evaluate the function, tracking dependencies."""
        self._clear_dependencies()

        token = current_derivation.set(self)
        try:
            self._value = self._fn()
        finally:
            current_derivation.reset(token)

        self._dirty = False

    def _clear_dependencies(self) -> None:
        for dep in self._dependencies:
            dep._remove_observer(self)
        self._dependencies.clear()

    def _run(self) -> None:
        """Called by the scheduler when a dependency changed.

        Marks dirty and propagates to our own observers. We don't recompute
        eagerly; that happens on next .get().
        """
        if not self._dirty:
            self._dirty = True
            for observer in list(self._observers):
                schedule(observer)

    def _remove_observer(self, observer) -> None:
        self._observers.discard(observer)

    def dispose(self) -> None:
        """Disconnect from all dependencies. The next get() starts over."""
        self._clear_dependencies()
        self._observers.clear()
        self._dirty = True
        self._value = _UNSET

    def __repr__(self) -> str:
        state = "dirty" if self._dirty else f"cached={self._value!r}"
        name = getattr(self._fn, "__name__", repr(self._fn))
        return f"Computed({name}, {state})"


def computed(fn: Callable[[], T]) -> Computed[T]:
    """Decorator/factory to create a Computed from a function.

    Usage:
        counter = Observable(0)

        @computed
        def doubled():
            return counter.get() * 2

        doubled.get()  # 0
        counter.set(5)
        doubled.get()  # 10
    """
    return Computed(fn)
