"""Running averages of per-observation measures, e.g. MAE and MSE."""

from __future__ import annotations

from typing import Callable, NamedTuple

import torch
from torch import Tensor

from .base import BaseMetric
from .encoding import as_tensor
from .functional import check_same_length, weighted_average
from .metrics import METRIC_REGISTRY


class AverageState(NamedTuple):
    avg: float
    n: int


class AverageMeasure(BaseMetric):
    """Tracks the average of ``measure(preds, labels)`` over mini-batches.

    ``measure`` receives two flattened float64 tensors of equal length and
    returns either the elementwise values or their mean. Batches are
    weighted by their number of observations, so the result does not
    depend on how the data was split.
    """

    default_name = "average"

    def __init__(self, measure: Callable[[Tensor, Tensor], Tensor | float], name: str | None = None):
        self.measure = measure
        measure_name = getattr(measure, "__name__", None)
        if measure_name == "<lambda>":
            measure_name = None
        super().__init__(name or measure_name)

    def init_state(self) -> AverageState:
        return AverageState(avg=0.0, n=0)

    def batch_state(self, preds, labels) -> AverageState:
        preds = as_tensor(preds).reshape(-1).double()
        labels = as_tensor(labels).reshape(-1).double()
        check_same_length(preds, labels)
        if preds.numel() == 0:
            return self.init_state()
        batch_avg = torch.as_tensor(self.measure(preds, labels), dtype=torch.float64).mean()
        return AverageState(avg=batch_avg.item(), n=preds.numel())

    def merge_states(self, a: AverageState, b: AverageState) -> AverageState:
        return AverageState(avg=weighted_average(a.avg, a.n, b.avg, b.n), n=a.n + b.n)

    def compute_state(self, state: AverageState) -> float:
        return state.avg

    def state_params(self, state: AverageState) -> dict:
        return {"n": state.n}


def absolute_error(preds: Tensor, labels: Tensor) -> Tensor:
    return (labels - preds).abs()


def squared_error(preds: Tensor, labels: Tensor) -> Tensor:
    return (labels - preds) ** 2


@METRIC_REGISTRY.register("mae")
class MAE(AverageMeasure):
    """Mean absolute error, |y_hat - y|."""

    def __init__(self, name: str | None = None):
        super().__init__(absolute_error, name or "mae")


@METRIC_REGISTRY.register("mse")
class MSE(AverageMeasure):
    """Mean squared error, (y_hat - y)^2."""

    def __init__(self, name: str | None = None):
        super().__init__(squared_error, name or "mse")
