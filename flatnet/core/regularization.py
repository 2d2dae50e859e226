"""Weight penalties that a criterion may carry."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .types import Array

_KINDS = ("none", "l1", "l2")


@dataclass(frozen=True)
class Regularization:
    """One of ``none``, ``l1(lam)`` or ``l2(lam)``.

    Penalties are scaled by the number of rows ``m`` of the weight view:
    L1 costs ``lam * sum|w| / 2m`` and L2 costs ``lam * sum(w**2) / 2m``.
    """

    kind: str = "none"
    lam: float = 0.0

    def __post_init__(self) -> None:
        if self.kind not in _KINDS:
            raise ValueError(f"Unknown regularization kind: {self.kind!r}")
        if not math.isfinite(self.lam) or self.lam < 0.0:
            raise ValueError(f"Regularization strength must be finite and >= 0, got {self.lam}")
        if self.kind == "none" and self.lam != 0.0:
            raise ValueError("Regularization 'none' does not take a strength")

    @classmethod
    def none(cls) -> "Regularization":
        return cls("none", 0.0)

    @classmethod
    def l1(cls, lam: float) -> "Regularization":
        return cls("l1", float(lam))

    @classmethod
    def l2(cls, lam: float) -> "Regularization":
        return cls("l2", float(lam))

    @classmethod
    def from_config(cls, cfg) -> "Regularization":
        """Build from ``None``, ``"none"`` or ``{"kind": ..., "lambda": ...}``."""

        if cfg is None:
            return cls.none()
        if isinstance(cfg, str):
            if cfg.lower() != "none":
                raise ValueError(f"Regularization {cfg!r} requires a lambda value")
            return cls.none()
        kind = str(cfg.get("kind", "none")).lower()
        if kind == "none":
            return cls.none()
        if "lambda" not in cfg:
            raise KeyError(f"Regularization {kind!r} requires `lambda`")
        return cls(kind, float(cfg["lambda"]))

    @property
    def is_none(self) -> bool:
        return self.kind == "none"

    def reg_cost(self, weights: Array) -> float:
        if self.is_none or weights.size == 0:
            return 0.0
        m2 = 2.0 * weights.shape[0]
        if self.kind == "l1":
            return float(self.lam * np.sum(np.abs(weights)) / m2)
        return float(self.lam * np.sum(np.square(weights)) / m2)

    def reg_grad(self, weights: Array) -> Array:
        if self.is_none or weights.size == 0:
            return np.zeros(weights.shape, dtype=np.float64)
        m = float(weights.shape[0])
        if self.kind == "l1":
            return self.lam * np.sign(weights) / (2.0 * m)
        return self.lam * np.asarray(weights, dtype=np.float64) / m


__all__ = ["Regularization"]
