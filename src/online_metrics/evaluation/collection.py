"""Ordered group of named metrics updated from the same batches."""

from __future__ import annotations

import logging
import re
from typing import Any, Iterator

from .base import BaseMetric
from ..errors import ConfigurationError
from ..utils.display import format_tree

logger = logging.getLogger(__name__)


class MetricCollection:
    """Track one or more metrics under unique names.

    Each metric is stored under ``prefix + name``, where ``name`` is the
    metric's own name unless a ``(name, metric)`` pair is given.

    Usage:
        metrics = MetricCollection(Accuracy(), MIoU(2), prefix="train_")
        metrics.update(preds, labels)             # every metric
        metrics.update(preds, labels, "train_accuracy")  # exact name
        metrics.update(preds, labels, re.compile("^train_"))  # regex match
        metrics.compute()  # {"train_accuracy": 0.75, "train_miou": 0.58}
    """

    def __init__(self, *metrics: BaseMetric | tuple[str, BaseMetric], prefix: str = ""):
        self.prefix = prefix
        self.metrics: dict[str, BaseMetric] = {}
        for entry in metrics:
            name, metric = entry if isinstance(entry, tuple) else (entry.name, entry)
            key = prefix + name
            if key in self.metrics:
                raise ConfigurationError(f"Duplicate metric name '{key}' in collection")
            self.metrics[key] = metric

    def select(self, target: str | re.Pattern | None = None) -> list[BaseMetric]:
        """Members addressed by ``target``: all, an exact name, or a regex."""
        if target is None:
            return list(self.metrics.values())
        if isinstance(target, re.Pattern):
            return [m for k, m in self.metrics.items() if target.search(k)]
        if target not in self.metrics:
            raise KeyError(f"No metric named '{target}'. Available: {list(self.metrics)}")
        return [self.metrics[target]]

    def update(self, preds, labels, target: str | re.Pattern | None = None) -> None:
        """Feed one batch to every selected member.

        Every member derives its batch state before any of them merges, so
        a batch rejected by one member leaves all of them untouched.
        """
        selected = self.select(target)
        if target is not None:
            logger.debug(f"Routing batch to {len(selected)} metric(s) matching {target!r}")
        batches = [metric.batch_state(preds, labels) for metric in selected]
        for metric, batch in zip(selected, batches):
            metric.merge(batch)

    def compute(self) -> dict[str, Any]:
        return {name: metric.compute() for name, metric in self.metrics.items()}

    def params(self) -> dict[str, dict[str, Any]]:
        return {name: metric.params() for name, metric in self.metrics.items()}

    def reset(self) -> None:
        for metric in self.metrics.values():
            metric.reset()

    def __getitem__(self, name: str) -> BaseMetric:
        return self.metrics[name]

    def __contains__(self, name: str) -> bool:
        return name in self.metrics

    def __iter__(self) -> Iterator[str]:
        return iter(self.metrics)

    def __len__(self) -> int:
        return len(self.metrics)

    def __repr__(self) -> str:
        children = [metric.render(name) for name, metric in self.metrics.items()]
        return format_tree(type(self).__name__, None, children=children)
