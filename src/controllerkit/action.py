"""Actions and transactions: batched, untracked state mutations.

Wrapping mutations in an @action or `with transaction()` defers reactions
until the outermost scope exits, so no reaction sees a half-applied update.
Reads inside the scope are untracked: an action called from within a
reaction does not make that reaction depend on what the action read.
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Callable, ParamSpec, TypeVar

from controllerkit._tracking import begin_batch, current_derivation, end_batch

P = ParamSpec("P")
R = TypeVar("R")


@contextmanager
def transaction():
    """Context manager for batching mutations.

    Usage:
        with transaction():
            controller.merge_state({"loading": True})
            controller.reset_data()
            # reactions fire here, after both calls
    """
    token = current_derivation.set(None)
    begin_batch()
    try:
        yield
    finally:
        try:
            end_batch()
        finally:
            current_derivation.reset(token)


def action(fn: Callable[P, R]) -> Callable[P, R]:
    """Decorator: run fn as a transaction.

    Reactions only fire after fn returns, not during.
    """

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        with transaction():
            return fn(*args, **kwargs)

    return wrapper
