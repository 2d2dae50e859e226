"""Contracts between networks and optimization algorithms."""

from __future__ import annotations

from typing import Mapping, Protocol, Sequence

from ..core.types import Array


class Optimizable(Protocol):
    """Anything that can report cost and gradient for candidate parameters."""

    def compute_grad(self, params: Array, inputs: Array, targets: Array) -> tuple[float, Array]:
        """Return ``(cost, gradient)`` with ``gradient.shape == params.shape``."""


class OptimAlgorithm(Protocol):
    """Protocol implemented by gradient-based optimizers."""

    def optimize(
        self, model: Optimizable, start: Array, inputs: Array, targets: Array
    ) -> Array:
        """Return optimized parameters; ``start`` is left untouched."""


def _emit(hook: str, callbacks: Sequence[object], index: int, metrics: Mapping[str, float]) -> None:
    for callback in callbacks:
        method = getattr(callback, hook, None) or getattr(callback, "on_step", None)
        if method is not None:
            method(index, metrics)
        elif callable(callback):
            callback(index, metrics)


def emit_step(callbacks: Sequence[object], step: int, metrics: Mapping[str, float]) -> None:
    _emit("on_step", callbacks, step, metrics)


def emit_epoch(callbacks: Sequence[object], epoch: int, metrics: Mapping[str, float]) -> None:
    """Send per-epoch metrics; callbacks without ``on_epoch`` get ``on_step``."""

    _emit("on_epoch", callbacks, epoch, metrics)


__all__ = ["Optimizable", "OptimAlgorithm", "emit_epoch", "emit_step"]
