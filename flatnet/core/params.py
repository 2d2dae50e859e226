"""Addressing of per-layer views inside one flat parameter buffer.

All trainable values of a network live in a single 1-D array laid out in
layer order. :class:`ParameterLayout` keeps the ``(offset, rows, cols)``
of every layer so a view is a constant-time reshape of a slice. Views share
memory with the buffer and are marked read-only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

import numpy as np

from .errors import BufferLengthMismatch, EmptyParameterRows, IndexOutOfRange, ShapeMismatch
from .types import Array


@dataclass(frozen=True)
class LayerSlot:
    """Location of one layer inside the flat buffer."""

    offset: int
    rows: int
    cols: int
    size: int
    has_bias: bool = False

    @property
    def stop(self) -> int:
        return self.offset + self.size

    def as_slice(self) -> slice:
        return slice(self.offset, self.stop)


@dataclass(frozen=True)
class ParameterLayout:
    slots: Tuple[LayerSlot, ...] = ()

    @classmethod
    def from_layers(cls, layers: Sequence[object]) -> "ParameterLayout":
        slots: List[LayerSlot] = []
        offset = 0
        for idx, layer in enumerate(layers):
            size = int(layer.num_params())
            rows, cols = (int(v) for v in layer.param_shape())
            if rows * cols != size:
                raise ShapeMismatch(
                    f"Layer {idx} declares shape ({rows}, {cols}) but owns {size} parameters"
                )
            slots.append(
                LayerSlot(offset, rows, cols, size, bool(getattr(layer, "has_bias", False)))
            )
            offset += size
        return cls(tuple(slots))

    def __len__(self) -> int:
        return len(self.slots)

    def __iter__(self) -> Iterator[LayerSlot]:
        return iter(self.slots)

    @property
    def total(self) -> int:
        return self.slots[-1].stop if self.slots else 0

    def check(self, weights: Array) -> Array:
        """Return ``weights`` as a 1-D float array, failing if it does not fit."""

        flat = np.asarray(weights, dtype=np.float64)
        if flat.ndim != 1:
            raise ShapeMismatch(f"Parameter buffer must be 1-D, got shape {flat.shape}")
        if flat.shape[0] != self.total:
            raise BufferLengthMismatch(self.total, flat.shape[0])
        return flat

    def slot(self, idx: int) -> LayerSlot:
        if not 0 <= idx < len(self.slots):
            raise IndexOutOfRange(idx, len(self.slots))
        return self.slots[idx]

    def slice(self, idx: int) -> slice:
        return self.slot(idx).as_slice()

    def view(self, weights: Array, idx: int) -> Array:
        """Read-only ``(rows, cols)`` view of layer ``idx``'s parameters."""

        slot = self.slot(idx)
        flat = self.check(weights)
        return _view(flat, slot)

    def views(self, weights: Array) -> List[Array]:
        flat = self.check(weights)
        return [_view(flat, slot) for slot in self.slots]

    def non_bias_view(self, weights: Array, idx: int) -> Array:
        view = self.view(weights, idx)
        if view.shape[0] == 0:
            raise EmptyParameterRows(f"Layer {idx} has no parameter rows")
        if self.slots[idx].has_bias:
            return strip_bias_row(view)
        return view


def _view(flat: Array, slot: LayerSlot) -> Array:
    view = flat[slot.offset : slot.stop].reshape(slot.rows, slot.cols)
    view.flags.writeable = False
    return view


def strip_bias_row(view: Array) -> Array:
    """Drop the first (bias) row of a layer view."""

    if view.ndim != 2 or view.shape[0] == 0:
        raise EmptyParameterRows(
            f"Cannot strip the bias row from a view of shape {view.shape}"
        )
    return view[1:]


__all__ = ["LayerSlot", "ParameterLayout", "strip_bias_row"]
