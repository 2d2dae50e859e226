"""Core typing contracts for flatnet."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

Array = np.ndarray
ParamShape = Tuple[int, int]


@dataclass(frozen=True)
class Batch:
    """A single set of inputs and matching targets."""

    inputs: Array
    targets: Array


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`flatnet.training.pipelines.run_pipeline`."""

    steps: int
    final_loss: float
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    checkpoint_path: str = ""


@dataclass
class ActivationTrace:
    """Per-layer activations of one forward pass.

    ``activations[0]`` is the raw input and ``activations[i + 1]`` is the
    output of layer ``i``.
    """

    activations: List[Array] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.activations)

    def __getitem__(self, idx: int) -> Array:
        return self.activations[idx]

    def push(self, value: Array) -> None:
        self.activations.append(value)

    @property
    def output(self) -> Array:
        return self.activations[-1]
