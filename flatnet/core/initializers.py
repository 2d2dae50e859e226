"""Explicit weight initializers.

Layers provide their own defaults when they are added to a network; the
helpers here are opt-in alternatives that produce a whole flat buffer.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .types import Array


def xavier_bound(fan_in: int, fan_out: int) -> float:
    return float(np.sqrt(6.0 / (fan_in + fan_out)))


def xavier_uniform(
    layer_sizes: Sequence[int],
    rng: np.random.Generator | None = None,
    *,
    bias: bool = True,
) -> Array:
    """Glorot-uniform weights for an MLP built from ``layer_sizes``.

    Each pair ``(n_in, n_out)`` contributes ``(n_in + bias) * n_out`` values
    drawn from ``U[-eps, eps]`` with ``eps = sqrt(6 / (n_in + bias + n_out))``,
    matching the layout of :meth:`BaseNeuralNet.mlp`.
    """

    if len(layer_sizes) < 2:
        raise ValueError("xavier_uniform needs at least an input and an output size")
    rng = rng or np.random.default_rng()
    chunks = []
    for n_in, n_out in zip(layer_sizes[:-1], layer_sizes[1:]):
        fan_in = int(n_in) + (1 if bias else 0)
        eps = xavier_bound(fan_in, int(n_out))
        chunks.append(rng.uniform(-eps, eps, size=fan_in * int(n_out)))
    return np.concatenate(chunks).astype(np.float64)


__all__ = ["xavier_bound", "xavier_uniform"]
