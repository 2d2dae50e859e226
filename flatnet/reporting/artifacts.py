"""Run artifact helpers: manifests and weight checkpoints."""

from __future__ import annotations

import json
import platform
import subprocess
import time
from pathlib import Path
from typing import Mapping

import numpy as np

from ..core.types import Array


def git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
        return out.decode().strip()
    except (OSError, subprocess.CalledProcessError):
        return "unknown"


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    network: Mapping[str, object],
) -> str:
    """Write a manifest JSON file capturing what was trained and where."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest = {
        "git_sha": git_sha(),
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": config,
        "network": dict(network),
        "environment": {
            "python": platform.python_version(),
            "numpy": np.__version__,
        },
    }
    path.write_text(json.dumps(manifest, indent=2))
    return str(path)


def save_checkpoint(path: str | Path, weights: Array) -> str:
    """Store the flat weight vector as a compressed ``.npz`` archive."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as handle:
        np.savez_compressed(handle, weights=np.asarray(weights, dtype=np.float64))
    return str(path)


def load_checkpoint(path: str | Path) -> Array:
    with np.load(Path(path)) as archive:
        if "weights" not in archive:
            raise KeyError(f"Checkpoint {path} has no `weights` array")
        return archive["weights"].astype(np.float64)


__all__ = ["git_sha", "write_manifest", "save_checkpoint", "load_checkpoint"]
