"""Datasets bundled with flatnet."""

from .synthetic import blobs, load, sine, xor

__all__ = ["blobs", "load", "sine", "xor"]
