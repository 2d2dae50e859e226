"""Small deterministic datasets for demos, presets and tests."""

from __future__ import annotations

from typing import Callable, Dict

import numpy as np

from ..core.types import Batch


def xor(repeat: int = 1) -> Batch:
    """The four XOR points, optionally tiled ``repeat`` times."""

    inputs = np.array([[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]])
    targets = np.array([[0.0], [1.0], [1.0], [0.0]])
    return Batch(inputs=np.tile(inputs, (repeat, 1)), targets=np.tile(targets, (repeat, 1)))


def sine(freq: float = 1.0, n_points: int = 64, noise: float = 0.0, seed: int = 0) -> Batch:
    rng = np.random.default_rng(seed)
    x = np.linspace(-1.0, 1.0, n_points, dtype=np.float64).reshape(-1, 1)
    y = np.sin(freq * np.pi * x)
    if noise:
        y = y + noise * rng.standard_normal(size=y.shape)
    return Batch(inputs=x, targets=y)


def blobs(n: int = 128, d: int = 2, separation: float = 2.0, seed: int = 0) -> Batch:
    """Two Gaussian blobs with 0/1 targets, shuffled."""

    rng = np.random.default_rng(seed)
    half = n // 2
    x0 = rng.normal(0.0, 1.0, size=(half, d))
    x1 = rng.normal(separation, 1.0, size=(n - half, d))
    inputs = np.vstack([x0, x1])
    targets = np.concatenate([np.zeros(half), np.ones(n - half)]).reshape(-1, 1)
    idx = rng.permutation(n)
    return Batch(inputs=inputs[idx], targets=targets[idx])


_LOADERS: Dict[str, Callable[..., Batch]] = {"xor": xor, "sine": sine, "blobs": blobs}


def load(name: str, **options) -> Batch:
    try:
        loader = _LOADERS[name]
    except KeyError as exc:
        available = ", ".join(sorted(_LOADERS))
        raise KeyError(f"Unknown dataset {name!r}. Available datasets: {available}") from exc
    return loader(**options)


__all__ = ["xor", "sine", "blobs", "load"]
