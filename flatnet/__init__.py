"""flatnet public API."""

from .core import activations, types  # noqa: F401
from .core.criterion import BCECriterion, Criterion, MSECriterion
from .core.errors import (
    BufferLengthMismatch,
    EmptyParameterRows,
    FlatNetError,
    IndexOutOfRange,
    ShapeMismatch,
)
from .core.initializers import xavier_uniform
from .core.layers import ActivationLayer, Linear, NetLayer
from .core.network import BaseNeuralNet
from .core.regularization import Regularization
from .models import NeuralNet
from .optim import GradientDesc, OptimAlgorithm, Optimizable, StochasticGD
from .training.pipelines import load_preset, presets, run_pipeline

__all__ = [
    "ActivationLayer",
    "BaseNeuralNet",
    "BCECriterion",
    "BufferLengthMismatch",
    "Criterion",
    "EmptyParameterRows",
    "FlatNetError",
    "GradientDesc",
    "IndexOutOfRange",
    "Linear",
    "MSECriterion",
    "NetLayer",
    "NeuralNet",
    "OptimAlgorithm",
    "Optimizable",
    "Regularization",
    "ShapeMismatch",
    "StochasticGD",
    "activations",
    "load_preset",
    "presets",
    "run_pipeline",
    "types",
    "xavier_uniform",
]
