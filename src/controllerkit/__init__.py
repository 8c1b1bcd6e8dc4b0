"""controllerkit: reactive state/data controllers over a MobX-style core."""

from importlib.metadata import version as _version

__version__ = _version("controllerkit")

from controllerkit._tracking import get_pending_count
from controllerkit.observable import Atom, Observable, ObservableDict
from controllerkit.computed import Computed, computed
from controllerkit.reaction import Reaction, autorun, reaction
from controllerkit.action import action, transaction
from controllerkit.store import KeyedStore, ObservableKeyedStore
from controllerkit.controller import (
    BaseController,
    DataController,
    ReactiveController,
    StateController,
)
from controllerkit.modules import BaseModule, DataModule, StateModule

__all__ = [
    "Atom",
    "Observable",
    "ObservableDict",
    "Computed",
    "computed",
    "Reaction",
    "autorun",
    "reaction",
    "action",
    "transaction",
    "get_pending_count",
    "KeyedStore",
    "ObservableKeyedStore",
    "ReactiveController",
    "StateController",
    "DataController",
    "BaseController",
    "BaseModule",
    "StateModule",
    "DataModule",
]
