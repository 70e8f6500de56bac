"""Abstract base class for evaluation metrics."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, NamedTuple

from ..utils.display import format_tree

logger = logging.getLogger(__name__)


class BaseMetric(ABC):
    """Base class that every metric must inherit from.

    A metric is a small state machine. Its running state is an immutable
    NamedTuple holding the sufficient statistics seen so far, and the
    subclass supplies four pure functions over it:

      - init_state():                 the empty state
      - batch_state(preds, labels):   the state of one batch on its own
      - merge_states(a, b):           the state of both inputs together
      - compute_state(state):         the reported value

    ``update`` derives the batch state outside the lock, then merges and
    swaps the state reference under it, so concurrent updates never lose
    a batch and a failed update leaves the state untouched. ``compute``
    grabs the current reference under the same lock and works on that
    snapshot.
    """

    default_name = "metric"

    def __init__(self, name: str | None = None):
        self.name = name or self.default_name
        self._lock = threading.Lock()
        self._state = self.init_state()

    @abstractmethod
    def init_state(self) -> NamedTuple:
        """Return the state of a metric that has seen no data."""

    @abstractmethod
    def batch_state(self, preds, labels) -> NamedTuple:
        """Return the state describing a single batch.

        Must validate its inputs and raise before returning anything.
        """

    @abstractmethod
    def merge_states(self, a: NamedTuple, b: NamedTuple) -> NamedTuple:
        """Return the state of two disjoint sets of observations combined."""

    @abstractmethod
    def compute_state(self, state: NamedTuple) -> Any:
        """Derive the metric value from a state."""

    def state_params(self, state: NamedTuple) -> dict[str, Any]:
        """Auxiliary values worth reporting next to the metric value."""
        return state._asdict()

    def update_state(self, state: NamedTuple, preds, labels) -> NamedTuple:
        """Pure form of ``update``: the state after seeing one more batch."""
        return self.merge_states(state, self.batch_state(preds, labels))

    @property
    def state(self) -> NamedTuple:
        with self._lock:
            return self._state

    def update(self, preds, labels) -> None:
        """Accumulate a batch of predictions and labels."""
        self.merge(self.batch_state(preds, labels))

    def merge(self, batch: NamedTuple) -> None:
        """Fold a state produced by ``batch_state`` into the running state."""
        with self._lock:
            self._state = self.merge_states(self._state, batch)

    def compute(self) -> Any:
        """Compute the metric value from all accumulated data."""
        return self.compute_state(self.state)

    def params(self) -> dict[str, Any]:
        return self.state_params(self.state)

    def reset(self) -> None:
        """Reset internal state for a new evaluation run."""
        with self._lock:
            self._state = self.init_state()
        logger.debug(f"Reset metric '{self.name}'")

    def render(self, name: str | None = None) -> str:
        """Text tree of the value and params, taken from one state snapshot."""
        state = self.state
        return format_tree(name or self.name, self.compute_state(state), self.state_params(state))

    def __repr__(self) -> str:
        return self.render()
