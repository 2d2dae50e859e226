"""Forward and backward propagation over a stack of layers.

The network owns its layers and one flat parameter vector. Every
propagation call takes the parameter vector explicitly so an optimizer can
evaluate candidate weights without touching the stored ones.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .activations import Activation
from .criterion import BCECriterion, Criterion
from .errors import GradientCoverageError, ShapeMismatch
from .layers import ActivationLayer, Linear, NetLayer
from .params import ParameterLayout
from .types import ActivationTrace, Array


class BaseNeuralNet:
    """Layer stack sharing one flat parameter buffer.

    ``debug=True`` pre-fills gradient buffers with NaN and raises
    :class:`~flatnet.core.errors.GradientCoverageError` unless the backward
    pass writes every entry exactly once.
    """

    def __init__(self, criterion: Criterion | None = None, *, debug: bool = False) -> None:
        self.criterion = criterion or BCECriterion()
        self.debug = debug
        self._layers: List[NetLayer] = []
        self._weights: Array = np.zeros(0, dtype=np.float64)
        self._layout = ParameterLayout()

    @classmethod
    def mlp(
        cls,
        layer_sizes: Sequence[int],
        criterion: Criterion | None = None,
        activation: Activation | None = None,
        rng: np.random.Generator | None = None,
        **kwargs,
    ) -> "BaseNeuralNet":
        """Linear layer (with bias) plus activation for each adjacent size pair."""

        if len(layer_sizes) < 2:
            raise ValueError("An MLP needs at least an input and an output size")
        net = cls(criterion, **kwargs)
        activation = activation or net.criterion.activation
        rng = rng or np.random.default_rng()
        for n_in, n_out in zip(layer_sizes[:-1], layer_sizes[1:]):
            net.add_layer(Linear.with_bias(int(n_in), int(n_out)), rng=rng)
            net.add_layer(ActivationLayer(activation))
        return net

    # ------------------------------------------------------------------
    # Structure

    @property
    def layers(self) -> tuple:
        return tuple(self._layers)

    @property
    def layout(self) -> ParameterLayout:
        return self._layout

    @property
    def weights(self) -> Array:
        return self._weights

    @weights.setter
    def weights(self, value: Array) -> None:
        self._weights = np.array(self._layout.check(value), dtype=np.float64, copy=True)

    def num_params(self) -> int:
        return self._layout.total

    def add_layer(
        self, layer: NetLayer, rng: np.random.Generator | None = None
    ) -> "BaseNeuralNet":
        params = np.asarray(layer.default_params(rng), dtype=np.float64).reshape(-1)
        if params.shape[0] != layer.num_params():
            raise ShapeMismatch(
                f"{type(layer).__name__} produced {params.shape[0]} default parameters, "
                f"expected {layer.num_params()}"
            )
        layout = ParameterLayout.from_layers([*self._layers, layer])
        self._layers.append(layer)
        self._layout = layout
        self._weights = np.concatenate([self._weights, params])
        return self

    def get_layer_weights(self, weights: Array, idx: int) -> Array:
        return self._layout.view(weights, idx)

    def get_net_weights(self, idx: int) -> Array:
        return self._layout.view(self._weights, idx)

    def get_non_bias_weights(self, weights: Array, idx: int) -> Array:
        return self._layout.non_bias_view(weights, idx)

    # ------------------------------------------------------------------
    # Propagation

    def forward_prop(self, inputs: Array, weights: Array | None = None) -> Array:
        """Network output for ``inputs``; no activations are retained."""

        outputs = np.asarray(inputs, dtype=np.float64)
        flat = self._layout.check(self._weights if weights is None else weights)
        if not self._layers:
            return outputs.copy()
        views = self._layout.views(flat)
        for layer, params in zip(self._layers, views):
            outputs = layer.forward(outputs, params)
        return outputs

    def forward_trace(self, inputs: Array, weights: Array) -> ActivationTrace:
        views = self._layout.views(weights)
        trace = ActivationTrace([np.asarray(inputs, dtype=np.float64)])
        for layer, params in zip(self._layers, views):
            trace.push(layer.forward(trace.output, params))
        return trace

    def compute_grad(self, weights: Array, inputs: Array, targets: Array) -> tuple[float, Array]:
        """Cost and flat gradient of the criterion at ``weights``."""

        flat = self._layout.check(weights)
        inputs = np.asarray(inputs, dtype=np.float64)
        targets = np.asarray(targets, dtype=np.float64)
        if not self._layers:
            return self.criterion.cost(inputs, targets), np.zeros(0, dtype=np.float64)

        views = self._layout.views(flat)
        trace = self.forward_trace(inputs, flat)
        output = trace.output

        cost = self.criterion.cost(output, targets)
        out_grad = self.criterion.cost_grad(output, targets)

        if self.debug:
            gradient = np.full(flat.shape, np.nan, dtype=np.float64)
            written = np.zeros(flat.shape, dtype=bool)
        else:
            gradient = np.zeros(flat.shape, dtype=np.float64)

        for idx in reversed(range(len(self._layers))):
            layer = self._layers[idx]
            slot = self._layout.slots[idx]
            params = views[idx]
            layer_input = trace[idx]
            grad_params = np.asarray(layer.back_params(out_grad, layer_input, params))
            if grad_params.shape != (slot.rows, slot.cols):
                raise ShapeMismatch(
                    f"Layer {idx} returned a parameter gradient of shape {grad_params.shape}, "
                    f"expected {(slot.rows, slot.cols)}"
                )
            out_grad = layer.back_input(out_grad, layer_input, params)
            if self.debug:
                if written[slot.as_slice()].any():
                    raise GradientCoverageError(
                        f"Layer {idx} overwrites gradient entries already written by a later layer"
                    )
                written[slot.as_slice()] = True
            gradient[slot.as_slice()] = grad_params.reshape(-1)

        if self.debug and not written.all():
            missing = int((~written).sum())
            raise GradientCoverageError(f"Backward pass left {missing} gradient entries unwritten")
        return float(cost), gradient

    # ------------------------------------------------------------------
    # Regularization (opt-in)

    def regularization_terms(self, weights: Array) -> tuple[float, Array]:
        """Penalty and its flat gradient, summed over non-bias weights."""

        flat = self._layout.check(weights)
        gradient = np.zeros(flat.shape, dtype=np.float64)
        if not self.criterion.is_regularized():
            return 0.0, gradient
        cost = 0.0
        for idx, slot in enumerate(self._layout):
            if slot.size == 0:
                continue
            reg_view = self._layout.non_bias_view(flat, idx)
            cost += self.criterion.reg_cost(reg_view)
            reg_grad = self.criterion.reg_cost_grad(reg_view)
            layer_grad = gradient[slot.as_slice()].reshape(slot.rows, slot.cols)
            if slot.has_bias:
                layer_grad[1:] = reg_grad
            else:
                layer_grad[:] = reg_grad
        return float(cost), gradient

    def compute_regularized_grad(
        self, weights: Array, inputs: Array, targets: Array
    ) -> tuple[float, Array]:
        cost, gradient = self.compute_grad(weights, inputs, targets)
        if not self.criterion.is_regularized():
            return cost, gradient
        reg_cost, reg_grad = self.regularization_terms(weights)
        return cost + reg_cost, gradient + reg_grad

    def regularized(self) -> "RegularizedObjective":
        return RegularizedObjective(self)


class RegularizedObjective:
    """Optimizable adapter adding the criterion's penalty to every step."""

    def __init__(self, net: BaseNeuralNet) -> None:
        self.net = net

    def compute_grad(self, weights: Array, inputs: Array, targets: Array) -> tuple[float, Array]:
        return self.net.compute_regularized_grad(weights, inputs, targets)


__all__ = ["BaseNeuralNet", "RegularizedObjective"]
