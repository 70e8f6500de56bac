"""Incremental classification and regression metrics."""

from .errors import ConfigurationError, MetricError, ShapeMismatchError
from .evaluation import (
    MAE,
    METRIC_REGISTRY,
    MSE,
    Accuracy,
    AverageMeasure,
    BaseMetric,
    BinaryPrecision,
    BinaryRecall,
    ConfusionMatrix,
    EvaluationConfig,
    MetricCollection,
    MIoU,
    Precision,
    Recall,
    build_collection,
    canonicalize,
    flatten,
)

__version__ = "0.1.0"
