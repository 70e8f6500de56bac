"""Build metric collections from YAML configuration."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .collection import MetricCollection
from .metrics import METRIC_REGISTRY, ClassificationMetric
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class EvaluationConfig:
    """Evaluation settings.

    Example YAML:
        num_classes: 3
        prefix: "val_"
        metrics:
          - name: accuracy
          - name: precision
            average: micro
          - name: mae
            alias: abs_error
    """
    num_classes: int = 2
    prefix: str = ""
    batch_size: int = 32
    num_workers: int = 1
    metrics: list[dict] = field(default_factory=lambda: [{"name": "accuracy"}])

    @classmethod
    def from_dict(cls, d: dict) -> "EvaluationConfig":
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})

    @classmethod
    def from_yaml(cls, path: str | Path) -> "EvaluationConfig":
        with open(path) as f:
            return cls.from_dict(yaml.safe_load(f) or {})


def build_metric(entry: dict | str, num_classes: int):
    """Instantiate one registry entry.

    ``entry`` is either a registry name or a dict with a ``name`` key, an
    optional ``alias`` used as the metric name, and constructor kwargs.
    """
    entry = {"name": entry} if isinstance(entry, str) else dict(entry)
    if "name" not in entry:
        raise ConfigurationError(f"Metric entry without a 'name': {entry}")
    cls = METRIC_REGISTRY.get(entry.pop("name"))
    alias = entry.pop("alias", None)
    if alias is not None:
        entry["name"] = alias
    if issubclass(cls, ClassificationMetric) and "num_classes" in inspect.signature(cls).parameters:
        entry.setdefault("num_classes", num_classes)
    try:
        return cls(**entry)
    except TypeError as e:
        raise ConfigurationError(f"Invalid arguments for {cls.__name__}: {e}") from e


def build_collection(config: EvaluationConfig) -> MetricCollection:
    metrics = [build_metric(entry, config.num_classes) for entry in config.metrics]
    collection = MetricCollection(*metrics, prefix=config.prefix)
    logger.info(f"Built {len(collection)} metric(s): {list(collection)}")
    return collection
