"""Core numerical primitives for flatnet."""

from . import activations, costs, criterion, errors, initializers, layers, network, params, types
from .criterion import BCECriterion, Criterion, MSECriterion
from .layers import ActivationLayer, Linear, NetLayer
from .network import BaseNeuralNet
from .params import ParameterLayout, strip_bias_row
from .regularization import Regularization

__all__ = [
    "activations",
    "costs",
    "criterion",
    "errors",
    "initializers",
    "layers",
    "network",
    "params",
    "types",
    "BaseNeuralNet",
    "BCECriterion",
    "Criterion",
    "MSECriterion",
    "ActivationLayer",
    "Linear",
    "NetLayer",
    "ParameterLayout",
    "Regularization",
    "strip_bias_row",
]
