"""Evaluation metrics computed on network predictions."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping

import numpy as np

from ..core.errors import check_same_shape
from ..core.types import Array


def default_metrics(criterion: str) -> List[str]:
    if criterion == "mse":
        return ["mae", "rmse", "r2"]
    if criterion == "bce":
        return ["accuracy"]
    raise ValueError(f"Unknown criterion: {criterion}")


def compute_metric(name: str, predictions: Array, targets: Array) -> float:
    check_same_shape(predictions, targets)
    key = name.lower()
    if key == "mae":
        return float(np.mean(np.abs(predictions - targets)))
    if key == "rmse":
        return float(np.sqrt(np.mean((predictions - targets) ** 2)))
    if key == "r2":
        mean = np.mean(targets, axis=0, keepdims=True)
        ss_res = float(np.sum((targets - predictions) ** 2))
        ss_tot = float(np.sum((targets - mean) ** 2))
        return 1.0 if ss_tot == 0 else float(1 - ss_res / ss_tot)
    if key == "accuracy":
        # predictions are sigmoid outputs, one column per binary label
        return float(np.mean((predictions >= 0.5) == (targets >= 0.5)))
    raise KeyError(f"Unknown metric: {name}")


def compute_metrics(names: Iterable[str], predictions: Array, targets: Array) -> Mapping[str, float]:
    results: Dict[str, float] = {}
    for name in names:
        results[name.lower()] = compute_metric(name, predictions, targets)
    return results


__all__ = ["default_metrics", "compute_metric", "compute_metrics"]
