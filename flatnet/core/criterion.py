"""Criteria pair an output activation with a cost function.

A criterion fixes its activation and cost at class level, so the two can
never be swapped independently. Instances only choose a
:class:`~flatnet.core.regularization.Regularization`.

Regularization is exposed here but never applied by the propagation
engine itself: the criterion cannot tell which rows of a layer are
biases. See :meth:`flatnet.core.network.BaseNeuralNet.regularization_terms`.
"""

from __future__ import annotations

from typing import ClassVar, Dict, Iterable, Type

import numpy as np

from . import activations, costs
from .activations import Activation
from .costs import CostFunction
from .regularization import Regularization
from .types import Array


class Criterion:
    """Base criterion; subclasses set ``activation`` and ``cost_function``."""

    name: ClassVar[str] = "criterion"
    activation: ClassVar[Activation]
    cost_function: ClassVar[CostFunction]

    def __init__(self, regularization: Regularization | None = None) -> None:
        self._regularization = regularization or Regularization.none()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(regularization={self._regularization!r})"

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self._regularization == other._regularization  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self._regularization))

    def activate(self, mat: Array) -> Array:
        return self.activation.apply(mat)

    def grad_activ(self, mat: Array) -> Array:
        return self.activation.apply_grad(mat)

    def cost(self, outputs: Array, targets: Array) -> float:
        return self.cost_function.cost(
            np.asarray(outputs, dtype=np.float64), np.asarray(targets, dtype=np.float64)
        )

    def cost_grad(self, outputs: Array, targets: Array) -> Array:
        return self.cost_function.grad(
            np.asarray(outputs, dtype=np.float64), np.asarray(targets, dtype=np.float64)
        )

    def regularization(self) -> Regularization:
        return self._regularization

    def is_regularized(self) -> bool:
        return not self._regularization.is_none

    def reg_cost(self, reg_weights: Array) -> float:
        return self._regularization.reg_cost(reg_weights)

    def reg_cost_grad(self, reg_weights: Array) -> Array:
        return self._regularization.reg_grad(reg_weights)


class BCECriterion(Criterion):
    """Binary cross-entropy on sigmoid outputs."""

    name = "bce"
    activation = activations.SIGMOID
    cost_function = costs.CROSS_ENTROPY


class MSECriterion(Criterion):
    """Mean squared error on linear outputs."""

    name = "mse"
    activation = activations.LINEAR
    cost_function = costs.MEAN_SQUARED_ERROR


class CriterionRegistry:
    """Map config names to criterion classes."""

    def __init__(self) -> None:
        self._registry: Dict[str, Type[Criterion]] = {}

    def register(self, cls: Type[Criterion]) -> Type[Criterion]:
        self._registry[cls.name] = cls
        return cls

    def resolve(self, name: str, regularization: Regularization | None = None) -> Criterion:
        key = name.lower()
        if key not in self._registry:
            available = ", ".join(sorted(self._registry))
            raise KeyError(f"Unknown criterion {name!r}. Available criteria: {available}")
        return self._registry[key](regularization)

    def names(self) -> Iterable[str]:
        return sorted(self._registry)


CRITERIA = CriterionRegistry()
CRITERIA.register(BCECriterion)
CRITERIA.register(MSECriterion)

__all__ = ["Criterion", "BCECriterion", "MSECriterion", "CriterionRegistry", "CRITERIA"]
