"""Tests for metric collections, registry-driven configs and tree rendering."""

import re

import pytest
import torch

from online_metrics.errors import ConfigurationError
from online_metrics.evaluation import (
    METRIC_REGISTRY,
    Accuracy,
    EvaluationConfig,
    MAE,
    MetricCollection,
    MIoU,
    Precision,
    build_collection,
    build_metric,
)
from online_metrics.utils.display import format_tree
from online_metrics.utils.registry import Registry


def test_collection_with_prefix():
    metrics = MetricCollection(Accuracy(), MIoU(2), prefix="train_")
    assert list(metrics) == ["train_accuracy", "train_miou"]

    metrics.update([0, 0, 1, 0], [0, 0, 1, 1])
    values = metrics.compute()
    assert values["train_accuracy"] == pytest.approx(0.75)
    assert values["train_miou"] == pytest.approx(0.5833333333333334)

    metrics.update([0, 0, 1, 1], [0, 0, 1, 1])
    values = metrics.compute()
    assert values["train_accuracy"] == pytest.approx(0.875)
    assert values["train_miou"] == pytest.approx(0.775)

    metrics.reset()
    assert metrics.compute() == {"train_accuracy": 0.0, "train_miou": 1.0}


def test_collection_routing():
    metrics = MetricCollection(("train_acc", Accuracy()), ("val_acc", Accuracy()))

    metrics.update([0, 1, 1, 0], [1, 1, 1, 0], "train_acc")
    metrics.update([1, 1, 1, 0], [1, 1, 1, 0], re.compile("val_"))

    assert metrics.compute() == {"train_acc": 0.75, "val_acc": 1.0}


def test_collection_unknown_target():
    metrics = MetricCollection(Accuracy())
    with pytest.raises(KeyError):
        metrics.update([0], [0], "val_accuracy")


def test_collection_duplicate_names():
    with pytest.raises(ConfigurationError):
        MetricCollection(Accuracy(), Accuracy())
    MetricCollection(Accuracy(), ("accuracy_2", Accuracy()))


def test_collection_members_are_independent():
    metrics = MetricCollection(Accuracy(), Precision(2))
    metrics.update(torch.tensor([0.9, 0.2]), torch.tensor([1, 1]))
    assert metrics["accuracy"].params() == {"correct": 1, "total": 2}
    assert metrics["precision"].params()["tp"].tolist() == [0, 1]
    assert "precision" in metrics
    assert len(metrics) == 2


def test_collection_repr():
    metrics = MetricCollection(Accuracy(), prefix="val_")
    metrics.update([1, 0], [1, 1])
    assert repr(metrics) == (
        "MetricCollection\n"
        "└── val_accuracy: 0.5000\n"
        "    ├── correct: 1\n"
        "    └── total: 2"
    )


def test_format_tree_values():
    text = format_tree("precision", torch.tensor([1.0, 0.5], dtype=torch.float64), {"tp": torch.tensor([2, 1])})
    assert text == "precision: [1.0, 0.5]\n└── tp: [2, 1]"


def test_registry_lookup_and_errors():
    assert METRIC_REGISTRY.get("miou") is MIoU
    assert "mae" in METRIC_REGISTRY
    with pytest.raises(ConfigurationError):
        METRIC_REGISTRY.get("f2")

    registry = Registry("test")
    registry.register("a")(Accuracy)
    with pytest.raises(ConfigurationError):
        registry.register("a")(MIoU)
    assert registry.list() == ["a"]


def test_build_metric():
    metric = build_metric({"name": "precision", "average": "micro", "alias": "p_micro"}, num_classes=4)
    assert isinstance(metric, Precision)
    assert metric.name == "p_micro"
    assert metric.num_classes == 4
    assert metric.average == "micro"

    assert isinstance(build_metric("mae", num_classes=4), MAE)
    assert build_metric("binary_recall", num_classes=4).num_classes == 2

    with pytest.raises(ConfigurationError):
        build_metric({"average": "micro"}, num_classes=2)
    with pytest.raises(ConfigurationError):
        build_metric({"name": "accuracy", "bogus": 1}, num_classes=2)


def test_config_from_yaml(tmp_path):
    path = tmp_path / "metrics.yaml"
    path.write_text(
        "num_classes: 3\n"
        "prefix: val_\n"
        "unused_key: 1\n"
        "metrics:\n"
        "  - name: accuracy\n"
        "  - name: recall\n"
        "    average: none\n"
        "  - name: confusion_matrix\n"
    )
    config = EvaluationConfig.from_yaml(path)
    assert config.num_classes == 3
    assert config.batch_size == 32

    metrics = build_collection(config)
    assert list(metrics) == ["val_accuracy", "val_recall", "val_confusion_matrix"]

    metrics.update(torch.tensor([0, 1, 2]), torch.tensor([0, 2, 2]))
    values = metrics.compute()
    assert values["val_accuracy"] == pytest.approx(2 / 3)
    assert values["val_recall"].tolist() == pytest.approx([1.0, 1.0, 0.5])
    assert values["val_confusion_matrix"].shape == (3, 3)


def test_default_config():
    metrics = build_collection(EvaluationConfig())
    assert list(metrics) == ["accuracy"]


def test_rejected_batch_leaves_every_member_untouched():
    metrics = MetricCollection(Accuracy(2), MIoU(2))
    metrics.update([0, 1], [0, 1])
    before = {name: metrics[name].state for name in metrics}

    # Accuracy does not check class bounds, MIoU does
    with pytest.raises(ConfigurationError):
        metrics.update([0, 2], [0, 1])

    for name in metrics:
        assert metrics[name].state is before[name]
    assert metrics["accuracy"].params() == {"correct": 2, "total": 2}
