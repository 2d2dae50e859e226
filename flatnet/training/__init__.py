"""Training pipelines and evaluation metrics."""

from .pipelines import load_config, load_preset, presets, run_pipeline

__all__ = ["load_config", "load_preset", "presets", "run_pipeline"]
