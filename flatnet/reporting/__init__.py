"""Reporting utilities for flatnet."""

from .artifacts import load_checkpoint, save_checkpoint, write_manifest
from .metrics import CsvSink, JsonlSink, MetricsCapture
from .plots import PlotAdapter
from .summary import write_summary

__all__ = [
    "write_manifest",
    "save_checkpoint",
    "load_checkpoint",
    "JsonlSink",
    "CsvSink",
    "MetricsCapture",
    "PlotAdapter",
    "write_summary",
]
