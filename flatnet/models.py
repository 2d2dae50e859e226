"""Supervised model combining a network with an optimization algorithm."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .core.activations import SIGMOID, Activation
from .core.criterion import BCECriterion, Criterion
from .core.layers import NetLayer
from .core.network import BaseNeuralNet
from .core.types import Array
from .optim.base import OptimAlgorithm
from .optim.grad_desc import StochasticGD


class NeuralNet:
    """Feed-forward network trained by an external optimizer.

    Training hands the network to ``algorithm`` through the
    :class:`~flatnet.optim.base.Optimizable` contract and stores the
    parameter vector it returns. The criterion's regularization is added
    only through that explicit step (see :meth:`train`).
    """

    def __init__(
        self,
        criterion: Criterion | None = None,
        algorithm: OptimAlgorithm | None = None,
        *,
        debug: bool = False,
    ) -> None:
        self.base = BaseNeuralNet(criterion, debug=debug)
        self.algorithm = algorithm or StochasticGD()

    @classmethod
    def mlp(
        cls,
        layer_sizes: Sequence[int],
        criterion: Criterion | None = None,
        algorithm: OptimAlgorithm | None = None,
        activation: Activation | None = None,
        rng: np.random.Generator | None = None,
        *,
        debug: bool = False,
    ) -> "NeuralNet":
        model = cls(criterion, algorithm, debug=debug)
        model.base = BaseNeuralNet.mlp(
            layer_sizes, model.base.criterion, activation, rng, debug=debug
        )
        return model

    @classmethod
    def default(
        cls, layer_sizes: Sequence[int], rng: np.random.Generator | None = None
    ) -> "NeuralNet":
        """Sigmoid MLP trained with binary cross-entropy and stochastic GD."""

        return cls.mlp(layer_sizes, BCECriterion(), StochasticGD(), SIGMOID, rng)

    @property
    def criterion(self) -> Criterion:
        return self.base.criterion

    @property
    def weights(self) -> Array:
        return self.base.weights

    @weights.setter
    def weights(self, value: Array) -> None:
        self.base.weights = value

    def add_layer(self, layer: NetLayer, rng: np.random.Generator | None = None) -> "NeuralNet":
        self.base.add_layer(layer, rng=rng)
        return self

    def get_net_weights(self, idx: int) -> Array:
        return self.base.get_net_weights(idx)

    def predict(self, inputs: Array) -> Array:
        return self.base.forward_prop(inputs)

    def train(self, inputs: Array, targets: Array, *, regularized: bool | None = None) -> Array:
        """Optimize the weights on ``inputs``/``targets`` and store the result.

        ``regularized`` defaults to whether the criterion carries a penalty;
        pass ``False`` to train on the bare cost even then.
        """

        if regularized is None:
            regularized = self.criterion.is_regularized()
        objective = self.base.regularized() if regularized else self.base
        optimal = self.algorithm.optimize(objective, self.base.weights, inputs, targets)
        self.base.weights = optimal
        return self.base.weights


__all__ = ["NeuralNet"]
