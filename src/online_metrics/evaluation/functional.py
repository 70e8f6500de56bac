"""Stateless counting and reduction helpers shared by the metrics."""

import torch
from torch import Tensor

from ..errors import ConfigurationError, ShapeMismatchError

EPS = torch.finfo(torch.float64).eps

AVERAGES = ("macro", "micro", "none")


def check_average(average) -> str:
    """Normalize an averaging policy; ``None`` means per-class."""
    if average is None:
        return "none"
    if average not in AVERAGES:
        raise ConfigurationError(f"average must be one of {AVERAGES}, got {average!r}")
    return average


def check_same_length(preds: Tensor, labels: Tensor) -> None:
    if preds.numel() != labels.numel():
        raise ShapeMismatchError(
            f"Got {preds.numel()} predictions but {labels.numel()} labels"
        )


# --- mask counts ---

def true_positive(pred_mask: Tensor, true_mask: Tensor) -> int:
    return int((pred_mask.bool() & true_mask.bool()).sum())


def true_negative(pred_mask: Tensor, true_mask: Tensor) -> int:
    return int((~pred_mask.bool() & ~true_mask.bool()).sum())


def false_positive(pred_mask: Tensor, true_mask: Tensor) -> int:
    return int((pred_mask.bool() & ~true_mask.bool()).sum())


def false_negative(pred_mask: Tensor, true_mask: Tensor) -> int:
    return int((~pred_mask.bool() & true_mask.bool()).sum())


# --- confusion matrix ---

def confusion_matrix(pred_ids: Tensor, true_ids: Tensor, num_classes: int) -> Tensor:
    """Count matrix with predicted classes on rows and true classes on columns."""
    check_same_length(pred_ids, true_ids)
    pred_ids = pred_ids.reshape(-1).long()
    true_ids = true_ids.reshape(-1).long()
    for ids in (pred_ids, true_ids):
        if ids.numel() and (ids.min() < 0 or ids.max() >= num_classes):
            raise ConfigurationError(
                f"Class ids must lie in [0, {num_classes}), "
                f"got range [{int(ids.min())}, {int(ids.max())}]"
            )
    counts = torch.bincount(pred_ids * num_classes + true_ids, minlength=num_classes ** 2)
    return counts.reshape(num_classes, num_classes)


def counts_from_confusion(matrix: Tensor) -> tuple[Tensor, Tensor, Tensor, Tensor]:
    """Per-class (tp, tn, fp, fn) from a predicted-by-true confusion matrix."""
    tp = matrix.diagonal().clone()
    fp = matrix.sum(dim=1) - tp
    fn = matrix.sum(dim=0) - tp
    tn = matrix.sum() - tp - fp - fn
    return tp, tn, fp, fn


# --- reductions ---

def aggregate(tp: Tensor, other: Tensor, average="macro"):
    """Reduce per-class ``tp / (tp + other)`` with an averaging policy.

    ``other`` is the false-positive vector for precision and the
    false-negative vector for recall. Every ratio carries EPS in numerator
    and denominator so a class with no support scores exactly 1.0.

    Returns a float for "macro" and "micro", a float64 tensor for "none".
    """
    average = check_average(average)
    tp = tp.double()
    other = other.double()
    if average == "macro":
        return ((tp + EPS) / (tp + other + EPS)).mean().item()
    if average == "micro":
        return ((tp.mean() + EPS) / (tp.mean() + other.mean() + EPS)).item()
    return (tp + EPS) / (tp + other + EPS)


def weighted_average(avg: float, n: int, batch_avg: float, m: int) -> float:
    """Merge a running mean over ``n`` items with a batch mean over ``m`` items."""
    if n + m == 0:
        return avg
    return avg * (n / (n + m)) + batch_avg * (m / (n + m))
