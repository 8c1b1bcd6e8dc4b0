"""Dependency tracking engine for controllerkit.

Uses contextvars to track which atoms are read while a computed view or a
reaction evaluates, building the dependency graph automatically.

Batching: mutations inside an @action or `with transaction()` defer
reactions and flush them once at the end. Computed views are invalidated
immediately, so a read inside the batch never sees a stale container.
"""

from __future__ import annotations

import contextvars
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from controllerkit.computed import Computed
    from controllerkit.reaction import Reaction, _DataReaction

    Derivation = Computed | Reaction | _DataReaction

logger = logging.getLogger("controllerkit.tracking")

# The currently-evaluating derivation (computed or reaction).
# When set, any tracked read registers itself as a dependency.
current_derivation: contextvars.ContextVar[Derivation | None] = contextvars.ContextVar(
    "current_derivation", default=None
)

# Batch depth counter. When > 0, reactions are deferred.
_batch_depth: int = 0

# Reactions that were scheduled during a batch, awaiting flush.
_pending: set[Derivation] = set()


def track(atom) -> None:
    """Register the current derivation, if any, as an observer of atom."""
    derivation = current_derivation.get()
    if derivation is not None:
        atom._observers.add(derivation)
        derivation._dependencies.add(atom)


def begin_batch() -> None:
    """Enter a batching scope. Nested batches are supported."""
    global _batch_depth
    _batch_depth += 1


def end_batch() -> None:
    """Exit a batching scope. When the outermost scope exits, flush pending reactions."""
    global _batch_depth
    _batch_depth -= 1
    if _batch_depth == 0:
        _flush_pending()


def schedule(derivation: Derivation) -> None:
    """Schedule a derivation after one of its dependencies changed.

    Lazy derivations (computed views) are invalidated at once. Reactions are
    deferred while a batch is open and run immediately otherwise.
    """
    if _batch_depth > 0 and not derivation.lazy:
        _pending.add(derivation)
    else:
        derivation._run()


def _flush_pending() -> None:
    """Run all pending reactions. Handles reactions scheduled during flush.

    A failing reaction does not stop the others. The first exception is
    re-raised once every pending reaction has run; later ones are logged.
    """
    error: Exception | None = None
    while _pending:
        # Snapshot and clear: reactions may schedule new ones while running.
        batch = list(_pending)
        _pending.clear()
        for derivation in batch:
            try:
                derivation._run()
            except Exception as exc:
                if error is None:
                    error = exc
                else:
                    logger.exception("Reaction %r failed during flush", derivation)
    if error is not None:
        raise error


def get_pending_count() -> int:
    """Number of reactions waiting to run. Useful for testing."""
    return len(_pending)
