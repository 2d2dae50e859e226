"""Exceptions raised by the propagation core."""

from __future__ import annotations


class FlatNetError(Exception):
    """Base class for every error raised by flatnet."""


class ShapeMismatch(FlatNetError, ValueError):
    """Two matrices (or a declared shape and a buffer) disagree."""


class BufferLengthMismatch(FlatNetError, ValueError):
    """The flat parameter vector does not match the layer stack."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Parameter buffer has {actual} values but the layers require {expected}"
        )
        self.expected = expected
        self.actual = actual


class IndexOutOfRange(FlatNetError, IndexError):
    """A layer index outside the stack was requested."""

    def __init__(self, index: int, num_layers: int) -> None:
        super().__init__(f"Layer index {index} out of range for {num_layers} layers")
        self.index = index
        self.num_layers = num_layers


class EmptyParameterRows(FlatNetError, ValueError):
    """The bias row cannot be stripped from a view without rows."""


class GradientCoverageError(FlatNetError, RuntimeError):
    """Debug mode found gradient entries written twice or never written."""


def check_same_shape(outputs, targets) -> None:
    if outputs.shape != targets.shape:
        raise ShapeMismatch(
            f"Outputs have shape {outputs.shape} but targets have shape {targets.shape}"
        )


__all__ = [
    "FlatNetError",
    "ShapeMismatch",
    "BufferLengthMismatch",
    "IndexOutOfRange",
    "EmptyParameterRows",
    "GradientCoverageError",
    "check_same_shape",
]
