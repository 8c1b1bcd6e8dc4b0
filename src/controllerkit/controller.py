"""Reactive controllers: state and data containers behind computed views.

A BaseController owns one StateController and one DataController. Both are
thin names over ReactiveController, which wraps an ObservableKeyedStore:

- ``merge``/``reset`` replace the container. Observers comparing the
  container by identity see the change.
- ``set_key`` writes into the existing container. Only observers of that
  key (or of the whole contents) see the change.

Observers subscribe explicitly:

    controller = BaseController({"page": 1, "query": ""}, {"rows": []})
    sub = controller.subscribe_state(render, "page")
    controller.set_state("page", 2)   # render(2)
    sub.dispose()
"""

from __future__ import annotations

import logging
import operator
from collections.abc import Callable, Mapping
from typing import Generic, TypeVar

from controllerkit.action import action
from controllerkit.computed import Computed
from controllerkit.observable import ObservableDict
from controllerkit.reaction import _DataReaction, reaction
from controllerkit.store import UNSET, ObservableKeyedStore, apply_update

logger = logging.getLogger("controllerkit.controller")

KT = TypeVar("KT")
VT = TypeVar("VT")


class ReactiveController(Generic[KT, VT]):
    """One observable keyed container with a computed read view."""

    def __init__(self, default: Mapping[KT, VT]) -> None:
        self._store: ObservableKeyedStore[KT, VT] = ObservableKeyedStore(default)
        self._view: Computed[ObservableDict[KT, VT]] = Computed(self._store.current)
        self._subscriptions: list[_DataReaction] = []

    @property
    def value(self) -> ObservableDict[KT, VT]:
        return self._view.get()

    @property
    def default(self) -> Mapping[KT, VT]:
        return self._store.default

    @action
    def merge(self, partial: Mapping[KT, VT]) -> None:
        self._store.set_many(partial)

    @action
    def set_key(self, key: KT, value: VT) -> None:
        self._store.set_one(key, value)

    @action
    def reset(self, *keep: KT) -> None:
        self._store.reset(keep)

    def subscribe(
        self,
        listener: Callable[[object], None],
        key: KT | object = UNSET,
        *,
        fire_immediately: bool = False,
    ) -> _DataReaction:
        """Call listener when the container, or one key of it, changes.

        Without ``key``, listener(container) runs whenever the container is
        replaced (merge, reset). With ``key``, listener(value) runs whenever
        a different object lands under that key, whichever operation put it
        there. Absent keys read as None. Returns a handle; call
        ``.dispose()`` to stop.
        """
        if key is UNSET:
            data_fn = self._view.get
        else:
            def data_fn() -> VT | None:
                return self._view.get().get(key)

        handle = reaction(
            data_fn,
            listener,
            fire_immediately=fire_immediately,
            equals=operator.is_,
        )
        self._subscriptions.append(handle)
        handle.on_dispose(lambda: self._forget(handle))
        return handle

    def _forget(self, handle: _DataReaction) -> None:
        try:
            self._subscriptions.remove(handle)
        except ValueError:
            pass  # already removed

    def dispose(self) -> None:
        """Stop every subscription made through this controller."""
        for handle in list(self._subscriptions):
            handle.dispose()
        self._view.dispose()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._store.current()!r})"


class StateController(ReactiveController[KT, VT]):
    """Controller state: the values that drive what the UI shows."""

    @property
    def state(self) -> ObservableDict[KT, VT]:
        return self.value

    def set_state(self, state: Mapping[KT, VT] | KT, value: VT | object = UNSET) -> None:
        apply_update(self.merge_state, self.set_state_key, state, value)

    def merge_state(self, state: Mapping[KT, VT]) -> None:
        self.merge(state)

    def set_state_key(self, key: KT, value: VT) -> None:
        self.set_key(key, value)

    def reset_state(self, *keep: KT) -> None:
        self.reset(*keep)

    def subscribe_state(
        self,
        listener: Callable[[object], None],
        key: KT | object = UNSET,
        *,
        fire_immediately: bool = False,
    ) -> _DataReaction:
        return self.subscribe(listener, key, fire_immediately=fire_immediately)


class DataController(ReactiveController[KT, VT]):
    """Controller data: whatever the controller has loaded or stores."""

    @property
    def data(self) -> ObservableDict[KT, VT]:
        return self.value

    def set_data(self, data: Mapping[KT, VT] | KT, value: VT | object = UNSET) -> None:
        apply_update(self.merge_data, self.set_data_key, data, value)

    def merge_data(self, data: Mapping[KT, VT]) -> None:
        self.merge(data)

    def set_data_key(self, key: KT, value: VT) -> None:
        self.set_key(key, value)

    def reset_data(self, *keep: KT) -> None:
        self.reset(*keep)

    def subscribe_data(
        self,
        listener: Callable[[object], None],
        key: KT | object = UNSET,
        *,
        fire_immediately: bool = False,
    ) -> _DataReaction:
        return self.subscribe(listener, key, fire_immediately=fire_immediately)


S = TypeVar("S", bound=Mapping)
D = TypeVar("D", bound=Mapping)


class BaseController(Generic[S, D]):
    """Controller of dynamically updated state and data.

    Each container gets its own default; the two never share a store. The
    defaults are copied shallowly, so nested lists or dicts inside them are
    shared with the caller and with any other controller built from the
    same objects.

    Every mutator runs as an action: reactions fire once, after it returns.
    """

    def __init__(self, default_state: S, default_data: D) -> None:
        self._state_controller: StateController[object, object] = StateController(default_state)
        self._data_controller: DataController[object, object] = DataController(default_data)
        logger.debug(
            "%s created with %d state key(s), %d data key(s)",
            type(self).__name__,
            len(default_state),
            len(default_data),
        )

    @property
    def state(self) -> ObservableDict:
        """Current state."""
        return self._state_controller.state

    @property
    def data(self) -> ObservableDict:
        """Current data stored in the controller."""
        return self._data_controller.data

    @action
    def set_state(self, state: Mapping | object, value: object = UNSET) -> None:
        """Merge a mapping into the state, or set one key when value is given."""
        self._state_controller.set_state(state, value)

    @action
    def merge_state(self, state: Mapping) -> None:
        self._state_controller.merge_state(state)

    @action
    def set_state_key(self, key: object, value: object) -> None:
        self._state_controller.set_state_key(key, value)

    @action
    def reset_state(self, *keep: object) -> None:
        """Restore the default state, except for the keys in keep."""
        self._state_controller.reset_state(*keep)

    @action
    def set_data(self, data: Mapping | object, value: object = UNSET) -> None:
        """Merge a mapping into the data, or set one key when value is given."""
        self._data_controller.set_data(data, value)

    @action
    def merge_data(self, data: Mapping) -> None:
        self._data_controller.merge_data(data)

    @action
    def set_data_key(self, key: object, value: object) -> None:
        self._data_controller.set_data_key(key, value)

    @action
    def reset_data(self, *keep: object) -> None:
        """Restore the default data, except for the keys in keep."""
        self._data_controller.reset_data(*keep)

    def subscribe_state(
        self,
        listener: Callable[[object], None],
        key: object = UNSET,
        *,
        fire_immediately: bool = False,
    ) -> _DataReaction:
        return self._state_controller.subscribe_state(
            listener, key, fire_immediately=fire_immediately
        )

    def subscribe_data(
        self,
        listener: Callable[[object], None],
        key: object = UNSET,
        *,
        fire_immediately: bool = False,
    ) -> _DataReaction:
        return self._data_controller.subscribe_data(
            listener, key, fire_immediately=fire_immediately
        )

    def dispose(self) -> None:
        self._state_controller.dispose()
        self._data_controller.dispose()
        logger.debug("%s disposed", type(self).__name__)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(state={self._state_controller._store.current()!r}, "
            f"data={self._data_controller._store.current()!r})"
        )
