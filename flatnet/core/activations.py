"""Activation utilities for flatnet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable

import numpy as np

from .types import Array

ElementwiseFn = Callable[[Array], Array]


def sigmoid(x: Array) -> Array:
    """Return the logistic sigmoid of ``x``."""

    return 0.5 * (1.0 + np.tanh(0.5 * np.asarray(x, dtype=np.float64)))


def sigmoid_grad(x: Array) -> Array:
    return sigmoid_grad_from_output(sigmoid(x))


def sigmoid_grad_from_output(y: Array) -> Array:
    return y * (1.0 - y)


def linear(x: Array) -> Array:
    """Identity activation."""

    return np.array(x, dtype=np.float64, copy=True)


def linear_grad(x: Array) -> Array:
    return np.ones_like(x, dtype=np.float64)


def tanh(x: Array) -> Array:
    return np.tanh(x)


def tanh_grad(x: Array) -> Array:
    return tanh_grad_from_output(np.tanh(x))


def tanh_grad_from_output(y: Array) -> Array:
    return 1.0 - np.asarray(y) ** 2


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def relu_grad(x: Array) -> Array:
    return (np.asarray(x) > 0).astype(np.float64)


# relu(x) > 0 exactly when x > 0
relu_grad_from_output = relu_grad


def exp(x: Array) -> Array:
    return np.exp(x)


@dataclass(frozen=True)
class Activation:
    """An element-wise activation function paired with its derivative.

    ``func_grad`` is evaluated at the pre-activation input, so layers can
    recompute it from the activation trace alone. ``func_grad_from_output``
    gives the same derivative from ``func(x)`` instead.
    """

    name: str
    func: ElementwiseFn
    func_grad: ElementwiseFn
    func_grad_from_output: ElementwiseFn

    def __call__(self, x: Array) -> Array:
        return self.func(x)

    def apply(self, x: Array) -> Array:
        return self.func(np.asarray(x, dtype=np.float64))

    def apply_grad(self, x: Array) -> Array:
        return self.func_grad(np.asarray(x, dtype=np.float64))

    def apply_grad_from_output(self, y: Array) -> Array:
        return self.func_grad_from_output(np.asarray(y, dtype=np.float64))


SIGMOID = Activation("sigmoid", sigmoid, sigmoid_grad, sigmoid_grad_from_output)
LINEAR = Activation("linear", linear, linear_grad, linear_grad)
TANH = Activation("tanh", tanh, tanh_grad, tanh_grad_from_output)
RELU = Activation("relu", relu, relu_grad, relu_grad_from_output)
EXP = Activation("exp", exp, exp, linear)

_REGISTRY: Dict[str, Activation] = {
    act.name: act for act in (SIGMOID, LINEAR, TANH, RELU, EXP)
}
# Alias used by config files
_REGISTRY["identity"] = LINEAR


def get_activation(name: str) -> Activation:
    key = name.lower()
    if key not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown activation {name!r}. Available activations: {available}")
    return _REGISTRY[key]


def names() -> Iterable[str]:
    return sorted(_REGISTRY)


__all__ = [
    "Activation",
    "SIGMOID",
    "LINEAR",
    "TANH",
    "RELU",
    "EXP",
    "get_activation",
    "names",
    "sigmoid",
    "relu",
]
