"""Observable values: state that tracks its readers.

When an Observable is read inside a Computed or Reaction evaluation, the
dependency is registered automatically. When it changes, all dependents are
scheduled.

ObservableDict tracks reads per key: a derivation that only reads
``d["a"]`` is not disturbed by a write to ``d["b"]``. Whole-container reads
(iteration, len, equality) track a separate contents atom that every write
notifies.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, MutableMapping
from typing import Generic, TypeVar

from controllerkit._tracking import begin_batch, current_derivation, end_batch, schedule, track

T = TypeVar("T")
KT = TypeVar("KT")
VT = TypeVar("VT")

_MISSING = object()


def _default_equals(old: object, new: object) -> bool:
    return old is new or old == new


class Atom:
    """A bare set of observers: the smallest thing a derivation can depend on."""

    __slots__ = ("_observers",)

    def __init__(self) -> None:
        self._observers: set = set()

    def report_observed(self) -> None:
        track(self)

    def report_changed(self) -> None:
        for observer in list(self._observers):
            schedule(observer)

    def _remove_observer(self, observer) -> None:
        self._observers.discard(observer)

    def __repr__(self) -> str:
        return f"Atom(observers={len(self._observers)})"


class Observable(Generic[T]):
    """A single observable value with automatic dependency tracking.

    ``equals(old, new)`` decides whether a write is a change. Pass
    ``operator.is_`` to notify on every new object, even an equal one.
    """

    __slots__ = ("_value", "_observers", "_equals")

    def __init__(self, value: T, *, equals: Callable[[T, T], bool] | None = None) -> None:
        self._value = value
        self._observers: set = set()
        self._equals = equals or _default_equals

    def get(self) -> T:
        """Read the value. If inside a derivation, registers the dependency."""
        track(self)
        return self._value

    def set(self, value: T) -> None:
        """Write a new value and notify observers if it changed."""
        if not self._equals(self._value, value):
            self._value = value
            self._notify()

    def _notify(self) -> None:
        """Schedule all observers for re-evaluation."""
        for observer in list(self._observers):
            schedule(observer)

    def _remove_observer(self, observer) -> None:
        """Remove an observer. Called during dependency cleanup."""
        self._observers.discard(observer)

    def __repr__(self) -> str:
        return f"Observable({self._value!r})"


class ObservableDict(MutableMapping[KT, VT]):
    """A dict whose keys are observed independently.

    Keys may be any hashable value. Writing the identical object to an
    existing key is not a change.
    """

    __slots__ = ("_data", "_key_atoms", "_contents")

    def __init__(self, data: Mapping[KT, VT] | None = None) -> None:
        self._data: dict[KT, VT] = dict(data) if data else {}
        self._key_atoms: dict[KT, Atom] = {}
        self._contents = Atom()

    def _track_key(self, key: KT) -> None:
        # Atoms are only allocated for keys something actually observes.
        if current_derivation.get() is None:
            return
        atom = self._key_atoms.get(key)
        if atom is None:
            atom = self._key_atoms[key] = Atom()
        atom.report_observed()

    def _track_contents(self) -> None:
        self._contents.report_observed()

    def _notify(self, keys) -> None:
        begin_batch()
        try:
            for key in keys:
                atom = self._key_atoms.get(key)
                if atom is not None:
                    atom.report_changed()
            self._contents.report_changed()
        finally:
            end_batch()

    # --- Read operations (track) ---

    def __getitem__(self, key: KT) -> VT:
        self._track_key(key)
        return self._data[key]

    def get(self, key: KT, default: VT | None = None) -> VT | None:
        self._track_key(key)
        return self._data.get(key, default)

    def __contains__(self, key: object) -> bool:
        self._track_key(key)
        return key in self._data

    def __len__(self) -> int:
        self._track_contents()
        return len(self._data)

    def __iter__(self) -> Iterator[KT]:
        self._track_contents()
        return iter(self._data)

    def keys(self):
        self._track_contents()
        return self._data.keys()

    def values(self):
        self._track_contents()
        return self._data.values()

    def items(self):
        self._track_contents()
        return self._data.items()

    def __bool__(self) -> bool:
        self._track_contents()
        return bool(self._data)

    def to_dict(self) -> dict[KT, VT]:
        """Shallow plain-dict snapshot of the current contents."""
        self._track_contents()
        return dict(self._data)

    # --- Write operations (notify) ---

    def __setitem__(self, key: KT, value: VT) -> None:
        old = self._data.get(key, _MISSING)
        if old is value:
            return
        self._data[key] = value
        self._notify((key,))

    def __delitem__(self, key: KT) -> None:
        del self._data[key]
        self._notify((key,))

    def pop(self, key: KT, *args) -> VT:
        present = key in self._data
        result = self._data.pop(key, *args)
        if present:
            self._notify((key,))
        return result

    def update(self, other=(), /, **kwargs) -> None:
        changed = dict(other)
        changed.update(kwargs)
        changed = {k: v for k, v in changed.items() if self._data.get(k, _MISSING) is not v}
        if changed:
            self._data.update(changed)
            self._notify(changed)

    def clear(self) -> None:
        if self._data:
            keys = list(self._data)
            self._data.clear()
            self._notify(keys)

    def setdefault(self, key: KT, default: VT | None = None) -> VT:
        if key not in self._data:
            self._data[key] = default
            self._notify((key,))
        return self._data[key]

    def __repr__(self) -> str:
        return f"ObservableDict({self._data!r})"
