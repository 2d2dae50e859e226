"""Optimization algorithms and the contract they consume."""

from .base import OptimAlgorithm, Optimizable
from .grad_desc import GradientDesc, StochasticGD

__all__ = ["Optimizable", "OptimAlgorithm", "GradientDesc", "StochasticGD"]
