"""Stream saved predictions through a metric collection.

Usage:
    # inputs.pt holds {"preds": Tensor, "labels": Tensor}, e.g. written with
    # torch.save({"preds": logits, "labels": targets}, "inputs.pt")
    python scripts/evaluate.py --config configs/classification.yaml --inputs inputs.pt

    # Override the batch size and update the metrics from 4 threads
    python scripts/evaluate.py --config configs/segmentation.yaml --inputs masks.pt --batch-size 8 --workers 4
"""

import argparse
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import torch
from torch.utils.data import DataLoader, TensorDataset
from tqdm import tqdm

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from online_metrics.evaluation import EvaluationConfig, build_collection
from online_metrics.utils import format_value

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Evaluate saved predictions")
    parser.add_argument("--config", type=str, required=True)
    parser.add_argument("--inputs", type=str, required=True, help="torch.save'd dict with 'preds' and 'labels'")
    parser.add_argument("--batch-size", type=int, default=None, help="Overrides batch_size from the config")
    parser.add_argument("--workers", type=int, default=None, help="Threads updating the metrics concurrently")
    args = parser.parse_args()

    config = EvaluationConfig.from_yaml(args.config)
    if args.batch_size is not None:
        config.batch_size = args.batch_size
    if args.workers is not None:
        config.num_workers = args.workers

    inputs = torch.load(args.inputs, weights_only=True)
    preds, labels = inputs["preds"], inputs["labels"]
    logger.info(f"Loaded {len(labels)} observations from {args.inputs}")

    metrics = build_collection(config)
    loader = DataLoader(TensorDataset(preds, labels), batch_size=config.batch_size, shuffle=False)

    pbar = tqdm(loader, desc="Evaluating")
    if config.num_workers > 1:
        with ThreadPoolExecutor(max_workers=config.num_workers) as pool:
            futures = [pool.submit(metrics.update, p, y) for p, y in pbar]
            for future in futures:
                future.result()
    else:
        for p, y in pbar:
            metrics.update(p, y)

    print("\nEvaluation Results:")
    for name, value in metrics.compute().items():
        logger.info(f"{name}: {format_value(value)}")
    print(metrics)


if __name__ == "__main__":
    main()
