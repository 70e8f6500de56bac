"""Tests for counting primitives and reductions."""

import pytest
import torch

from online_metrics.errors import ConfigurationError, ShapeMismatchError
from online_metrics.evaluation.functional import (
    aggregate,
    check_average,
    confusion_matrix,
    counts_from_confusion,
    false_negative,
    false_positive,
    true_negative,
    true_positive,
    weighted_average,
)


def test_mask_counts():
    pred = torch.tensor([1, 1, 0, 0, 1])
    true = torch.tensor([1, 0, 1, 0, 1])
    assert true_positive(pred, true) == 2
    assert false_positive(pred, true) == 1
    assert false_negative(pred, true) == 1
    assert true_negative(pred, true) == 1


def test_confusion_matrix_rows_are_predictions():
    pred = torch.tensor([0, 1, 2, 2])
    true = torch.tensor([0, 1, 1, 2])
    expected = torch.tensor([
        [1, 0, 0],
        [0, 1, 0],
        [0, 1, 1],
    ])
    assert torch.equal(confusion_matrix(pred, true, 3), expected)


def test_confusion_matrix_empty_batch():
    empty = torch.tensor([], dtype=torch.long)
    assert torch.equal(confusion_matrix(empty, empty, 2), torch.zeros(2, 2, dtype=torch.long))


def test_confusion_matrix_rejects_out_of_range_ids():
    with pytest.raises(ConfigurationError):
        confusion_matrix(torch.tensor([0, 3]), torch.tensor([0, 1]), 3)
    with pytest.raises(ConfigurationError):
        confusion_matrix(torch.tensor([0, 1]), torch.tensor([-1, 1]), 3)


def test_confusion_matrix_length_mismatch():
    with pytest.raises(ShapeMismatchError):
        confusion_matrix(torch.tensor([0, 1, 1]), torch.tensor([0, 1]), 2)


def test_counts_from_confusion_match_masks():
    pred = torch.tensor([0, 1, 2, 2, 0, 1])
    true = torch.tensor([0, 1, 1, 2, 2, 0])
    tp, tn, fp, fn = counts_from_confusion(confusion_matrix(pred, true, 3))
    for c in range(3):
        assert tp[c] == true_positive(pred == c, true == c)
        assert tn[c] == true_negative(pred == c, true == c)
        assert fp[c] == false_positive(pred == c, true == c)
        assert fn[c] == false_negative(pred == c, true == c)


def test_aggregate_policies():
    tp = torch.tensor([1, 1, 1])
    fp = torch.tensor([0, 0, 1])
    assert aggregate(tp, fp, "macro") == pytest.approx((1 + 1 + 0.5) / 3)
    assert aggregate(tp, fp, "micro") == pytest.approx(0.75)
    per_class = aggregate(tp, fp, "none")
    assert per_class.dtype == torch.float64
    assert per_class.tolist() == pytest.approx([1.0, 1.0, 0.5])


def test_aggregate_empty_class_scores_one():
    tp = torch.tensor([0, 2])
    fp = torch.tensor([0, 0])
    assert aggregate(tp, fp, None).tolist() == [1.0, 1.0]


def test_check_average():
    assert check_average(None) == "none"
    assert check_average("micro") == "micro"
    with pytest.raises(ConfigurationError):
        check_average("weighted")


def test_weighted_average_uneven_batches():
    avg = weighted_average(0.0, 0, 1.0, 3)
    avg = weighted_average(avg, 3, 4.0, 1)
    assert avg == pytest.approx(1.75)


def test_weighted_average_no_observations():
    assert weighted_average(0.0, 0, 5.0, 0) == 0.0
