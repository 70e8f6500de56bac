"""Normalize prediction and label encodings to integer class ids.

Four encodings are accepted for either side of a batch:

  - soft:         one score in [0, 1] per observation, shape (N,) or (N, 1, ...)
  - hard:         integer (or bool) class ids of any shape
  - one-hot:      indicator vectors (floating, integer or bool) along the
                  class axis, (N, C, ...)
  - distribution: floating probabilities or logits along the class axis, (N, C, ...)

For inputs of rank >= 2 the class axis is dim 1, as in torch.
"""

import torch
from torch import Tensor

from ..errors import ConfigurationError

THRESHOLD = 0.5


def as_tensor(x) -> Tensor:
    """Accept tensors, numpy arrays and (nested) lists."""
    return x if isinstance(x, Tensor) else torch.as_tensor(x)


def flatten(x) -> Tensor:
    """Reshape to (class_axis, observations).

    1-D inputs become a 1 x N matrix. Higher-rank inputs, e.g.
    (batch, classes, height, width), have the class axis moved first and
    every other axis merged in order into one flat observation axis.
    """
    x = as_tensor(x)
    if x.dim() == 0:
        return x.reshape(1, 1)
    if x.dim() == 1:
        return x.reshape(1, -1)
    return x.movedim(1, 0).reshape(x.size(1), -1)


def is_one_hot(x: Tensor, num_classes: int) -> bool:
    """True for an integer or bool tensor whose class axis (dim 1) holds
    exactly one 1 per observation, e.g. the output of
    ``F.one_hot(ids, num_classes).movedim(-1, 1)``.
    """
    if x.dim() < 2 or x.size(1) != num_classes:
        return False
    return bool(((x == 0) | (x == 1)).all() and (x.long().sum(dim=1) == 1).all())


def canonicalize(x, num_classes: int) -> Tensor:
    """Convert any supported encoding into a 1-D int64 tensor of class ids.

    Integer and bool inputs are hard ids and are only flattened, unless
    they are one-hot along dim 1, in which case they are reduced like a
    floating one-hot tensor. Floating inputs are read along the class
    axis: a singleton axis is thresholded at 0.5 (binary only), an axis of length
    ``num_classes`` is reduced with argmax. Ties in argmax resolve to the
    first maximal index, i.e. the lowest class id.
    """
    if num_classes <= 0:
        raise ConfigurationError(f"num_classes must be positive, got {num_classes}")

    x = as_tensor(x)
    if not x.is_floating_point():
        if is_one_hot(x, num_classes):
            return flatten(x.long()).argmax(dim=0)
        return x.reshape(-1).long()

    flat = flatten(x)
    width = flat.size(0)
    if width == num_classes:
        return flat.argmax(dim=0)
    if width == 1:
        if num_classes != 2:
            raise ConfigurationError(
                f"Continuous scores imply 2 classes, got num_classes={num_classes}"
            )
        return (flat[0] >= THRESHOLD).long()
    raise ConfigurationError(
        f"Expected class axis of size 1 or {num_classes}, got {width}"
    )
