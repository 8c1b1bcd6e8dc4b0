"""KeyedStore: a default snapshot plus a current mapping.

Update contract:

- ``set_many`` builds a new container (shallow union, partial wins).
- ``set_one`` writes one key into the existing container; identity is kept.
- ``reset`` builds a new container from the defaults, then copies the kept
  keys over from the pre-reset container. A kept key that was absent is
  still written, as ``None``.

The default snapshot is a shallow copy. Nested values are shared between
the caller's default object, the snapshot and every container derived from
it, so two stores built from one default share any lists or dicts inside it.
"""

from __future__ import annotations

import logging
import operator
from collections.abc import Callable, Iterable, Mapping, MutableMapping
from types import MappingProxyType
from typing import Generic, TypeVar

from controllerkit.observable import Observable, ObservableDict

logger = logging.getLogger("controllerkit.store")

KT = TypeVar("KT")
VT = TypeVar("VT")

UNSET = object()


class KeyedStore(Generic[KT, VT]):
    """Mapping container with merge, single-key set and reset-with-keep.

    ``container`` builds a mutable mapping from a mapping; every container
    the store hands out comes from it.
    """

    def __init__(
        self,
        default: Mapping[KT, VT],
        *,
        container: Callable[[Mapping[KT, VT]], MutableMapping[KT, VT]] = dict,
    ) -> None:
        self._default: Mapping[KT, VT] = MappingProxyType(dict(default))
        self._container = container
        self._replace(container(self._default))

    @property
    def default(self) -> Mapping[KT, VT]:
        """Read-only default snapshot."""
        return self._default

    def current(self) -> MutableMapping[KT, VT]:
        return self._current

    def _replace(self, value: MutableMapping[KT, VT]) -> None:
        self._current = value

    def set_many(self, partial: Mapping[KT, VT]) -> None:
        self._replace(self._container({**self.current(), **partial}))

    def set_one(self, key: KT, value: VT) -> None:
        self.current()[key] = value

    def reset(self, keep: Iterable[KT] = ()) -> None:
        previous = self.current()
        fresh = self._container(self._default)
        keep = list(keep)
        for key in keep:
            if key not in previous:
                logger.debug("reset keeps %r, absent before reset; storing None", key)
            fresh[key] = previous.get(key)
        logger.debug("reset to defaults, keeping %r", keep)
        self._replace(fresh)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.current()!r})"


class ObservableKeyedStore(KeyedStore[KT, VT]):
    """KeyedStore whose container reference and keys are observable.

    The reference sits in an Observable compared by identity, so merge and
    reset always notify reference observers. Containers are ObservableDicts,
    so a single-key set notifies observers of that key only.
    """

    def __init__(self, default: Mapping[KT, VT]) -> None:
        self._box: Observable[ObservableDict[KT, VT]] = Observable(None, equals=operator.is_)
        super().__init__(default, container=ObservableDict)

    def current(self) -> ObservableDict[KT, VT]:
        return self._box.get()

    def _replace(self, value: ObservableDict[KT, VT]) -> None:
        self._box.set(value)


def apply_update(
    merge: Callable[[Mapping[KT, VT]], None],
    set_key: Callable[[KT, VT], None],
    target: Mapping[KT, VT] | KT,
    value: VT | object = UNSET,
) -> None:
    """Route the two call forms of an update to the matching operation.

    ``update(mapping)`` merges; ``update(key, value)`` sets one key. The
    choice is made here, from the arguments given, never inside the store.
    """
    if value is not UNSET:
        set_key(target, value)
    elif isinstance(target, Mapping):
        merge(target)
    else:
        raise TypeError(
            f"expected a mapping, or a key and a value; got {type(target).__name__} alone"
        )
