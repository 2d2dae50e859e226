"""Layer contract and the reference layer implementations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np

from .activations import Activation
from .errors import ShapeMismatch
from .types import Array, ParamShape


@runtime_checkable
class NetLayer(Protocol):
    """Protocol implemented by every layer of a :class:`BaseNeuralNet`.

    ``params`` is always a read-only ``param_shape()`` view into the
    network's flat parameter buffer; layers must not keep it beyond a call.
    """

    has_bias: bool

    def num_params(self) -> int:
        """Number of values this layer owns in the flat buffer."""

    def param_shape(self) -> ParamShape:
        """``(rows, cols)`` used to view the layer's slice."""

    def default_params(self, rng: np.random.Generator | None = None) -> Array:
        """Initial values, a 1-D array of length ``num_params()``."""

    def forward(self, inputs: Array, params: Array) -> Array:
        """Layer output for ``inputs``."""

    def back_params(self, out_grad: Array, inputs: Array, params: Array) -> Array:
        """Gradient of the cost wrt ``params``."""

    def back_input(self, out_grad: Array, inputs: Array, params: Array) -> Array:
        """Gradient of the cost wrt ``inputs``."""


def _with_bias(inputs: Array) -> Array:
    ones = np.ones((inputs.shape[0], 1), dtype=np.float64)
    return np.hstack([ones, inputs])


@dataclass(frozen=True)
class Linear:
    """Fully connected layer; row 0 of the parameters is the bias row."""

    input_size: int
    output_size: int
    has_bias: bool = True

    def __post_init__(self) -> None:
        if self.input_size < 1 or self.output_size < 1:
            raise ValueError(
                f"Linear layer sizes must be positive, got ({self.input_size}, {self.output_size})"
            )

    @classmethod
    def with_bias(cls, input_size: int, output_size: int) -> "Linear":
        return cls(input_size, output_size, has_bias=True)

    @classmethod
    def without_bias(cls, input_size: int, output_size: int) -> "Linear":
        return cls(input_size, output_size, has_bias=False)

    def num_params(self) -> int:
        rows, cols = self.param_shape()
        return rows * cols

    def param_shape(self) -> ParamShape:
        rows = self.input_size + 1 if self.has_bias else self.input_size
        return rows, self.output_size

    def default_params(self, rng: np.random.Generator | None = None) -> Array:
        rng = rng or np.random.default_rng()
        scale = np.sqrt(1.0 / self.input_size)
        return rng.normal(0.0, scale, size=self.num_params())

    def _check_input(self, inputs: Array) -> None:
        if inputs.ndim != 2 or inputs.shape[1] != self.input_size:
            raise ShapeMismatch(
                f"Linear layer expects {self.input_size} input columns, got shape {inputs.shape}"
            )

    def forward(self, inputs: Array, params: Array) -> Array:
        self._check_input(inputs)
        if self.has_bias:
            return _with_bias(inputs) @ params
        return inputs @ params

    def back_params(self, out_grad: Array, inputs: Array, params: Array) -> Array:
        self._check_input(inputs)
        if self.has_bias:
            return _with_bias(inputs).T @ out_grad
        return inputs.T @ out_grad

    def back_input(self, out_grad: Array, inputs: Array, params: Array) -> Array:
        weights = params[1:] if self.has_bias else params
        return out_grad @ weights.T


@dataclass(frozen=True)
class ActivationLayer:
    """Parameter-free layer applying an activation element-wise."""

    activation: Activation
    has_bias: bool = False

    def num_params(self) -> int:
        return 0

    def param_shape(self) -> ParamShape:
        return 0, 0

    def default_params(self, rng: np.random.Generator | None = None) -> Array:
        return np.zeros(0, dtype=np.float64)

    def forward(self, inputs: Array, params: Array) -> Array:
        return self.activation.apply(inputs)

    def back_params(self, out_grad: Array, inputs: Array, params: Array) -> Array:
        return np.zeros((0, 0), dtype=np.float64)

    def back_input(self, out_grad: Array, inputs: Array, params: Array) -> Array:
        return out_grad * self.activation.apply_grad(inputs)


__all__ = ["NetLayer", "Linear", "ActivationLayer"]
