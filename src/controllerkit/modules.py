"""Non-reactive modules with the controllers' update semantics.

StateModule and DataModule run the same KeyedStore as the reactive
controllers, over plain dicts and without any notification. BaseModule
composes the two behind the BaseController surface. Use them where nothing
observes the container.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Generic, TypeVar

from controllerkit.store import UNSET, KeyedStore, apply_update

KT = TypeVar("KT")
VT = TypeVar("VT")


class StateModule(Generic[KT, VT]):
    """Module with state only."""

    def __init__(self, default_state: Mapping[KT, VT]) -> None:
        self._store: KeyedStore[KT, VT] = KeyedStore(default_state)

    @property
    def state(self) -> dict[KT, VT]:
        return self._store.current()

    def set_state(self, state: Mapping[KT, VT] | KT, value: VT | object = UNSET) -> None:
        apply_update(self.merge_state, self.set_state_key, state, value)

    def merge_state(self, state: Mapping[KT, VT]) -> None:
        self._store.set_many(state)

    def set_state_key(self, key: KT, value: VT) -> None:
        self._store.set_one(key, value)

    def reset_state(self, *keep: KT) -> None:
        self._store.reset(keep)

    def __repr__(self) -> str:
        return f"StateModule({self._store.current()!r})"


class DataModule(Generic[KT, VT]):
    """Module with stored data only."""

    def __init__(self, default_data: Mapping[KT, VT]) -> None:
        self._store: KeyedStore[KT, VT] = KeyedStore(default_data)

    @property
    def data(self) -> dict[KT, VT]:
        return self._store.current()

    def set_data(self, data: Mapping[KT, VT] | KT, value: VT | object = UNSET) -> None:
        apply_update(self.merge_data, self.set_data_key, data, value)

    def merge_data(self, data: Mapping[KT, VT]) -> None:
        self._store.set_many(data)

    def set_data_key(self, key: KT, value: VT) -> None:
        self._store.set_one(key, value)

    def reset_data(self, *keep: KT) -> None:
        self._store.reset(keep)

    def __repr__(self) -> str:
        return f"DataModule({self._store.current()!r})"


S = TypeVar("S", bound=Mapping)
D = TypeVar("D", bound=Mapping)


class BaseModule(Generic[S, D]):
    """Module with state and stored data, each reset to its own default."""

    def __init__(self, default_state: S, default_data: D) -> None:
        self._state_module: StateModule[object, object] = StateModule(default_state)
        self._data_module: DataModule[object, object] = DataModule(default_data)

    @property
    def state(self) -> dict:
        return self._state_module.state

    @property
    def data(self) -> dict:
        return self._data_module.data

    def set_state(self, state: Mapping | object, value: object = UNSET) -> None:
        self._state_module.set_state(state, value)

    def merge_state(self, state: Mapping) -> None:
        self._state_module.merge_state(state)

    def set_state_key(self, key: object, value: object) -> None:
        self._state_module.set_state_key(key, value)

    def reset_state(self, *keep: object) -> None:
        self._state_module.reset_state(*keep)

    def set_data(self, data: Mapping | object, value: object = UNSET) -> None:
        self._data_module.set_data(data, value)

    def merge_data(self, data: Mapping) -> None:
        self._data_module.merge_data(data)

    def set_data_key(self, key: object, value: object) -> None:
        self._data_module.set_data_key(key, value)

    def reset_data(self, *keep: object) -> None:
        self._data_module.reset_data(*keep)

    def __repr__(self) -> str:
        return f"BaseModule(state={self.state!r}, data={self.data!r})"
