"""Gradient descent optimizers working on flat parameter vectors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from ..core.types import Array
from .base import Optimizable, emit_epoch, emit_step


def _check_common(alpha: float, iters: int) -> None:
    if not alpha > 0.0:
        raise ValueError(f"Learning rate must be positive, got {alpha}")
    if iters < 1:
        raise ValueError(f"Iteration count must be at least 1, got {iters}")


@dataclass
class GradientDesc:
    """Full-batch gradient descent with a fixed step size."""

    alpha: float = 0.3
    iters: int = 100
    callbacks: Sequence[object] = field(default_factory=tuple, repr=False)

    def __post_init__(self) -> None:
        _check_common(self.alpha, self.iters)

    def optimize(
        self, model: Optimizable, start: Array, inputs: Array, targets: Array
    ) -> Array:
        params = np.array(start, dtype=np.float64, copy=True)
        for step in range(self.iters):
            cost, grad = model.compute_grad(params, inputs, targets)
            params = params - self.alpha * grad
            emit_step(self.callbacks, step, {"loss": float(cost)})
        return params


@dataclass
class StochasticGD:
    """Per-sample gradient descent with momentum.

    Each iteration visits every input row once in a shuffled order. The
    loop stops early once the summed epoch cost changes by less than
    ``tol``.
    """

    alpha: float = 0.1
    mu: float = 0.1
    iters: int = 20
    seed: int | None = None
    tol: float = 1e-20
    callbacks: Sequence[object] = field(default_factory=tuple, repr=False)

    def __post_init__(self) -> None:
        _check_common(self.alpha, self.iters)
        if not 0.0 <= self.mu < 1.0:
            raise ValueError(f"Momentum must be in [0, 1), got {self.mu}")

    def optimize(
        self, model: Optimizable, start: Array, inputs: Array, targets: Array
    ) -> Array:
        inputs = np.asarray(inputs, dtype=np.float64)
        targets = np.asarray(targets, dtype=np.float64)
        if inputs.shape[0] != targets.shape[0]:
            raise ValueError(
                f"Inputs have {inputs.shape[0]} rows but targets have {targets.shape[0]}"
            )
        rng = np.random.default_rng(self.seed)
        params = np.array(start, dtype=np.float64, copy=True)
        velocity = np.zeros_like(params)
        previous = 0.0
        for epoch in range(self.iters):
            epoch_cost = 0.0
            for row in rng.permutation(inputs.shape[0]):
                cost, grad = model.compute_grad(
                    params, inputs[row : row + 1], targets[row : row + 1]
                )
                velocity = self.mu * velocity + self.alpha * grad
                params = params - velocity
                epoch_cost += cost
            emit_epoch(self.callbacks, epoch, {"loss": float(epoch_cost)})
            if abs(previous - epoch_cost) < self.tol:
                break
            previous = epoch_cost
        return params


__all__ = ["GradientDesc", "StochasticGD"]
