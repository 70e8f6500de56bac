"""Classification metrics over canonicalized class ids."""

from __future__ import annotations

from typing import NamedTuple

import torch
from torch import Tensor

from .base import BaseMetric
from .encoding import canonicalize
from .functional import (
    EPS,
    aggregate,
    check_average,
    check_same_length,
    confusion_matrix,
    counts_from_confusion,
)
from ..errors import ConfigurationError
from ..utils.registry import Registry

METRIC_REGISTRY = Registry("metrics")


class AccuracyState(NamedTuple):
    correct: int
    total: int


class IoUState(NamedTuple):
    intersection: Tensor
    union: Tensor


class ConfusionState(NamedTuple):
    matrix: Tensor


class PrecisionState(NamedTuple):
    tp: Tensor
    fp: Tensor


class RecallState(NamedTuple):
    tp: Tensor
    fn: Tensor


class ClassificationMetric(BaseMetric):
    """Metric over discrete labels.

    Predictions and labels may use any encoding accepted by
    ``canonicalize``; both are reduced to 1-D class ids before counting.
    """

    def __init__(self, num_classes: int = 2, name: str | None = None):
        if not isinstance(num_classes, int) or num_classes <= 0:
            raise ConfigurationError(f"num_classes must be a positive int, got {num_classes!r}")
        self.num_classes = num_classes
        super().__init__(name)

    def class_ids(self, preds, labels) -> tuple[Tensor, Tensor]:
        pred_ids = canonicalize(preds, self.num_classes)
        true_ids = canonicalize(labels, self.num_classes)
        check_same_length(pred_ids, true_ids)
        return pred_ids, true_ids

    def batch_confusion(self, preds, labels) -> Tensor:
        return confusion_matrix(*self.class_ids(preds, labels), self.num_classes)

    def _zeros(self) -> Tensor:
        return torch.zeros(self.num_classes, dtype=torch.long)


@METRIC_REGISTRY.register("accuracy")
class Accuracy(ClassificationMetric):
    """Simple accuracy: correct / total."""

    default_name = "accuracy"

    def init_state(self) -> AccuracyState:
        return AccuracyState(correct=0, total=0)

    def batch_state(self, preds, labels) -> AccuracyState:
        pred_ids, true_ids = self.class_ids(preds, labels)
        return AccuracyState(correct=int((pred_ids == true_ids).sum()), total=true_ids.numel())

    def merge_states(self, a: AccuracyState, b: AccuracyState) -> AccuracyState:
        return AccuracyState(a.correct + b.correct, a.total + b.total)

    def compute_state(self, state: AccuracyState) -> float:
        return state.correct / max(state.total, 1)


@METRIC_REGISTRY.register("miou")
class MIoU(ClassificationMetric):
    """Mean Intersection over Union, mostly used for segmentation.

    IoU of class c is |pred == c AND true == c| / |pred == c OR true == c|,
    averaged over classes. A class that was never predicted nor present
    scores 1.0.
    """

    default_name = "miou"

    def init_state(self) -> IoUState:
        return IoUState(intersection=self._zeros(), union=self._zeros())

    def batch_state(self, preds, labels) -> IoUState:
        tp, _, fp, fn = counts_from_confusion(self.batch_confusion(preds, labels))
        return IoUState(intersection=tp, union=tp + fp + fn)

    def merge_states(self, a: IoUState, b: IoUState) -> IoUState:
        return IoUState(a.intersection + b.intersection, a.union + b.union)

    def compute_state(self, state: IoUState) -> float:
        iou = (state.intersection.double() + EPS) / (state.union.double() + EPS)
        return iou.mean().item()


@METRIC_REGISTRY.register("confusion_matrix")
class ConfusionMatrix(ClassificationMetric):
    """Confusion matrix over ``num_classes`` classes.

    Rows are predicted classes, columns are true classes:
    ``matrix[p, t]`` counts observations predicted ``p`` and labelled ``t``.
    """

    default_name = "confusion_matrix"

    def init_state(self) -> ConfusionState:
        return ConfusionState(matrix=torch.zeros(self.num_classes, self.num_classes, dtype=torch.long))

    def batch_state(self, preds, labels) -> ConfusionState:
        return ConfusionState(matrix=self.batch_confusion(preds, labels))

    def merge_states(self, a: ConfusionState, b: ConfusionState) -> ConfusionState:
        return ConfusionState(a.matrix + b.matrix)

    def compute_state(self, state: ConfusionState) -> Tensor:
        return state.matrix.clone()

    def state_params(self, state: ConfusionState) -> dict:
        tp, tn, fp, fn = counts_from_confusion(state.matrix)
        return {"tp": tp, "tn": tn, "fp": fp, "fn": fn}


@METRIC_REGISTRY.register("precision")
class Precision(ClassificationMetric):
    """Precision: tp / (tp + fp).

    Args:
        num_classes: Number of classes.
        average: "macro" averages per-class precision, "micro" pools the
            counts of every class, "none" (or None) returns the per-class
            vector.
    """

    default_name = "precision"

    def __init__(self, num_classes: int = 2, average: str | None = "macro", name: str | None = None):
        self.average = check_average(average)
        super().__init__(num_classes, name)

    def init_state(self) -> PrecisionState:
        return PrecisionState(tp=self._zeros(), fp=self._zeros())

    def batch_state(self, preds, labels) -> PrecisionState:
        tp, _, fp, _ = counts_from_confusion(self.batch_confusion(preds, labels))
        return PrecisionState(tp=tp, fp=fp)

    def merge_states(self, a: PrecisionState, b: PrecisionState) -> PrecisionState:
        return PrecisionState(a.tp + b.tp, a.fp + b.fp)

    def compute_state(self, state: PrecisionState):
        return aggregate(state.tp, state.fp, self.average)

    def state_params(self, state: PrecisionState) -> dict:
        return {"average": self.average, "tp": state.tp, "fp": state.fp}


@METRIC_REGISTRY.register("recall")
class Recall(ClassificationMetric):
    """Recall (sensitivity): tp / (tp + fn).

    Takes the same ``average`` policies as ``Precision``.
    """

    default_name = "recall"

    def __init__(self, num_classes: int = 2, average: str | None = "macro", name: str | None = None):
        self.average = check_average(average)
        super().__init__(num_classes, name)

    def init_state(self) -> RecallState:
        return RecallState(tp=self._zeros(), fn=self._zeros())

    def batch_state(self, preds, labels) -> RecallState:
        tp, _, _, fn = counts_from_confusion(self.batch_confusion(preds, labels))
        return RecallState(tp=tp, fn=fn)

    def merge_states(self, a: RecallState, b: RecallState) -> RecallState:
        return RecallState(a.tp + b.tp, a.fn + b.fn)

    def compute_state(self, state: RecallState):
        return aggregate(state.tp, state.fn, self.average)

    def state_params(self, state: RecallState) -> dict:
        return {"average": self.average, "tp": state.tp, "fn": state.fn}


@METRIC_REGISTRY.register("binary_precision")
class BinaryPrecision(Precision):
    """Precision of the positive class (id 1) in a binary task."""

    default_name = "binary_precision"

    def __init__(self, name: str | None = None):
        super().__init__(num_classes=2, average="none", name=name)

    def compute_state(self, state: PrecisionState) -> float:
        return super().compute_state(state)[1].item()

    def state_params(self, state: PrecisionState) -> dict:
        return {"tp": int(state.tp[1]), "fp": int(state.fp[1])}


@METRIC_REGISTRY.register("binary_recall")
class BinaryRecall(Recall):
    """Recall of the positive class (id 1) in a binary task."""

    default_name = "binary_recall"

    def __init__(self, name: str | None = None):
        super().__init__(num_classes=2, average="none", name=name)

    def compute_state(self, state: RecallState) -> float:
        return super().compute_state(state)[1].item()

    def state_params(self, state: RecallState) -> dict:
        return {"tp": int(state.tp[1]), "fn": int(state.fn[1])}
