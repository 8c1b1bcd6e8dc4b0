"""Reactions: side effects triggered by observable state changes.

Unlike Computed (which is lazy and only evaluates on read), a Reaction
eagerly re-runs its side effect whenever its tracked dependencies change.

Two flavors:
- autorun(fn): runs fn immediately, re-runs when any observable it read changes.
- reaction(data_fn, effect_fn): tracks data_fn, calls effect_fn with the new value
  only when data_fn's result changes.
"""

from __future__ import annotations

import operator
from typing import Callable, TypeVar

from controllerkit._tracking import current_derivation

T = TypeVar("T")


class Reaction:
    """A reactive side effect that re-runs when its dependencies change."""

    __slots__ = ("_fn", "_dependencies", "_disposed", "_dispose_callbacks")

    lazy = False

    def __init__(self, fn: Callable[[], None]) -> None:
        self._fn = fn
        self._dependencies: set = set()
        self._disposed = False
        self._dispose_callbacks: list[Callable[[], None]] = []

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _clear_dependencies(self) -> None:
        for dep in self._dependencies:
            dep._remove_observer(self)
        self._dependencies.clear()

    def _run(self) -> None:
        """Re-evaluate the reaction function, re-tracking dependencies."""
        if self._disposed:
            return

        self._clear_dependencies()

        token = current_derivation.set(self)
        try:
            self._fn()
        finally:
            current_derivation.reset(token)

    def on_dispose(self, callback: Callable[[], None]) -> None:
        """Call callback once, when this reaction is disposed."""
        self._dispose_callbacks.append(callback)

    def dispose(self) -> None:
        """Stop this reaction. Disconnects from all dependencies."""
        if self._disposed:
            return
        self._disposed = True
        self._clear_dependencies()
        callbacks, self._dispose_callbacks = self._dispose_callbacks, []
        for callback in callbacks:
            callback()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"Reaction({getattr(self._fn, '__name__', '?')}, {state})"


class _DataReaction(Reaction):
    """Internal: reaction(data_fn, effect_fn) implementation.

    Tracks data_fn's dependencies. When they change, re-runs data_fn.
    If the result differs from last time, calls effect_fn with the new value.
    """

    __slots__ = ("_effect_fn", "_equals", "_last_value", "_initialized")

    def __init__(
        self,
        data_fn: Callable[[], T],
        effect_fn: Callable[[T], None],
        equals: Callable[[T, T], bool],
    ) -> None:
        super().__init__(data_fn)
        self._effect_fn = effect_fn
        self._equals = equals
        self._last_value = None
        self._initialized = False

    def _evaluate(self):
        self._clear_dependencies()
        token = current_derivation.set(self)
        try:
            return self._fn()
        finally:
            current_derivation.reset(token)

    def _run(self) -> None:
        if self._disposed:
            return

        new_value = self._evaluate()
        if not self._initialized or not self._equals(new_value, self._last_value):
            self._last_value = new_value
            self._initialized = True
            self._effect_fn(new_value)

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"_DataReaction({getattr(self._fn, '__name__', '?')}, {state})"


def autorun(fn: Callable[[], None]) -> Reaction:
    """Run fn immediately, then re-run whenever any observable it reads changes.

    Returns the Reaction (call .dispose() to stop).

    Usage:
        counter = Observable(0)
        log = []

        r = autorun(lambda: log.append(counter.get()))
        # log == [0]: ran immediately

        counter.set(1)
        # log == [0, 1]: re-ran because counter changed

        r.dispose()
        counter.set(2)
        # log == [0, 1]: stopped
    """
    r = Reaction(fn)
    r._run()  # Initial run to establish dependencies
    return r


def reaction(
    data_fn: Callable[[], T],
    effect_fn: Callable[[T], None],
    *,
    fire_immediately: bool = False,
    equals: Callable[[T, T], bool] | None = None,
) -> _DataReaction:
    """Track data_fn's observables; call effect_fn when the result changes.

    effect_fn only fires when data_fn's *return value* changes, as decided by
    ``equals`` (``==`` by default; pass ``operator.is_`` to compare identity).

    Returns the reaction (call .dispose() to stop).

    Usage:
        first = Observable("Alice")
        last = Observable("Smith")

        effects = []
        r = reaction(
            lambda: f"{first.get()} {last.get()}",
            lambda name: effects.append(name),
        )
        # effects == []: data_fn ran to establish deps, effect did not fire

        first.set("Bob")
        # effects == ["Bob Smith"]
    """
    r = _DataReaction(data_fn, effect_fn, equals or operator.eq)
    if fire_immediately:
        r._run()
    else:
        # Run data_fn to establish deps, but suppress the initial effect
        r._last_value = r._evaluate()
        r._initialized = True
    return r
