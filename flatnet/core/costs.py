"""Cost functions and the registry used by criteria and config files."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable

import numpy as np

from .errors import check_same_shape
from .types import Array

CostFn = Callable[[Array, Array], float]
CostGradFn = Callable[[Array, Array], Array]

# Outputs are clipped to (eps, 1 - eps) before taking logs.
CROSS_ENTROPY_EPS = 1e-12


@dataclass(frozen=True)
class CostFunction:
    """Scalar cost together with its gradient wrt the network outputs."""

    name: str
    cost: CostFn
    grad: CostGradFn

    def __call__(self, outputs: Array, targets: Array) -> tuple[float, Array]:
        return self.cost(outputs, targets), self.grad(outputs, targets)


class CostRegistry:
    """Central registry for cost functions."""

    def __init__(self) -> None:
        self._registry: Dict[str, CostFunction] = {}

    def register(self, name: str, cost: CostFn, grad: CostGradFn) -> CostFunction:
        entry = CostFunction(name, cost, grad)
        self._registry[name] = entry
        return entry

    def get(self, name: str) -> CostFunction:
        if name not in self._registry:
            available = ", ".join(sorted(self._registry))
            raise KeyError(f"Unknown cost {name!r}. Available costs: {available}")
        return self._registry[name]

    def names(self) -> Iterable[str]:
        return sorted(self._registry)


REGISTRY = CostRegistry()


def _rows(outputs: Array) -> int:
    return max(1, outputs.shape[0]) if outputs.ndim else 1


def _mse(outputs: Array, targets: Array) -> float:
    check_same_shape(outputs, targets)
    diff = outputs - targets
    return float(np.sum(np.square(diff)) / _rows(outputs))


def _mse_grad(outputs: Array, targets: Array) -> Array:
    check_same_shape(outputs, targets)
    return 2.0 * (outputs - targets) / _rows(outputs)


def _clip(outputs: Array) -> Array:
    return np.clip(outputs, CROSS_ENTROPY_EPS, 1.0 - CROSS_ENTROPY_EPS)


def _cross_entropy(outputs: Array, targets: Array) -> float:
    check_same_shape(outputs, targets)
    probs = _clip(outputs)
    loss = targets * np.log(probs) + (1.0 - targets) * np.log(1.0 - probs)
    return float(-np.sum(loss) / _rows(outputs))


def _cross_entropy_grad(outputs: Array, targets: Array) -> Array:
    check_same_shape(outputs, targets)
    probs = _clip(outputs)
    return (probs - targets) / (probs * (1.0 - probs)) / _rows(outputs)


MEAN_SQUARED_ERROR = REGISTRY.register("mse", _mse, _mse_grad)
CROSS_ENTROPY = REGISTRY.register("cross_entropy", _cross_entropy, _cross_entropy_grad)

__all__ = [
    "CostFunction",
    "CostRegistry",
    "REGISTRY",
    "MEAN_SQUARED_ERROR",
    "CROSS_ENTROPY",
    "CROSS_ENTROPY_EPS",
]
