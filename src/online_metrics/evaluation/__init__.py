from .metrics import (
    METRIC_REGISTRY,
    Accuracy,
    BinaryPrecision,
    BinaryRecall,
    ClassificationMetric,
    ConfusionMatrix,
    MIoU,
    Precision,
    Recall,
)
# Import submodules so that @register decorators execute
from .regression import MAE, MSE, AverageMeasure
from .base import BaseMetric
from .collection import MetricCollection
from .config import EvaluationConfig, build_collection, build_metric
from .encoding import canonicalize, flatten
