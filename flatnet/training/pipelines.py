"""Config-driven training runs for flatnet."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import numpy as np
import yaml

from ..core.activations import get_activation
from ..core.criterion import CRITERIA
from ..core.initializers import xavier_uniform
from ..core.regularization import Regularization
from ..core.types import RunResult
from ..data import synthetic
from ..models import NeuralNet
from ..optim.grad_desc import GradientDesc, StochasticGD
from ..reporting.artifacts import save_checkpoint, write_manifest
from ..reporting.metrics import CsvSink, JsonlSink, MetricsCapture
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .metrics import compute_metrics, default_metrics

REQUIRED_SECTIONS = ("data", "model", "train")

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-sgd": {
        "data": {"name": "xor", "options": {"repeat": 1}},
        "model": {"layers": [2, 4, 1], "activation": "sigmoid", "criterion": "bce"},
        "train": {
            "optimizer": "sgd",
            "alpha": 0.5,
            "mu": 0.5,
            "iters": 400,
            "seed": 0,
            "run_dir": "runs/xor-sgd",
            "enable_plots": False,
        },
    },
    "sine-mse-gd": {
        "data": {"name": "sine", "options": {"freq": 1.0, "n_points": 64, "seed": 0}},
        "model": {
            "layers": [1, 16, 1],
            "activation": "tanh",
            "criterion": "mse",
            "init": "xavier",
        },
        "train": {
            "optimizer": "gd",
            "alpha": 0.05,
            "iters": 300,
            "seed": 1,
            "run_dir": "runs/sine-mse-gd",
            "enable_plots": False,
        },
    },
    "blobs-bce-l2": {
        "data": {"name": "blobs", "options": {"n": 128, "d": 2, "seed": 0}},
        "model": {
            "layers": [2, 8, 1],
            "activation": "sigmoid",
            "criterion": "bce",
            "regularization": {"kind": "l2", "lambda": 0.01},
        },
        "train": {
            "optimizer": "sgd",
            "alpha": 0.1,
            "mu": 0.1,
            "iters": 30,
            "seed": 2,
            "run_dir": "runs/blobs-bce-l2",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"


def read_config_file(path: str | Path) -> Mapping[str, object]:
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(path.read_text()) or {}
    elif suffix == ".json":
        data = json.loads(path.read_text() or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")
    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def validate_config(config: Mapping[str, object], *, source: str = "config") -> None:
    missing = [name for name in REQUIRED_SECTIONS if name not in config]
    if missing:
        raise KeyError(f"{source} is missing required sections: {', '.join(missing)}")


def load_config(path: str | Path) -> Mapping[str, object]:
    data = read_config_file(path)
    validate_config(data, source=Path(path).name)
    return data


def _file_presets(directory: Path | None = None) -> Dict[str, Mapping[str, object]]:
    directory = directory or _PRESET_DIR
    found: Dict[str, Mapping[str, object]] = {}
    if directory.exists():
        for file in sorted(directory.iterdir()):
            if file.suffix.lower() in {".yaml", ".yml", ".json"}:
                found[file.stem] = load_config(file)
    return found


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = deepcopy(_PRESETS)
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    available = presets()
    if name not in available:
        raise KeyError(f"Unknown preset: {name}")
    return deepcopy(available[name])


def build_model(
    model_cfg: Mapping[str, object],
    train_cfg: Mapping[str, object],
    callbacks: Sequence[object] = (),
) -> NeuralNet:
    layers = [int(size) for size in model_cfg.get("layers", [])]  # type: ignore[union-attr]
    if len(layers) < 2:
        raise ValueError("model.layers needs at least an input and an output size")
    seed = int(train_cfg.get("seed", 0))
    rng = np.random.default_rng(seed)

    regularization = Regularization.from_config(model_cfg.get("regularization"))
    criterion = CRITERIA.resolve(str(model_cfg.get("criterion", "bce")), regularization)
    activation = get_activation(str(model_cfg.get("activation", criterion.activation.name)))
    algorithm = build_optimizer(train_cfg, callbacks)

    model = NeuralNet.mlp(layers, criterion, algorithm, activation, rng)
    init = str(model_cfg.get("init", "default"))
    if init == "xavier":
        model.weights = xavier_uniform(layers, rng)
    elif init != "default":
        raise ValueError(f"Unknown init scheme: {init}")
    return model


def build_optimizer(train_cfg: Mapping[str, object], callbacks: Sequence[object] = ()):
    name = str(train_cfg.get("optimizer", "sgd")).lower()
    seed = int(train_cfg.get("seed", 0))
    if name == "sgd":
        return StochasticGD(
            alpha=float(train_cfg.get("alpha", 0.1)),
            mu=float(train_cfg.get("mu", 0.1)),
            iters=int(train_cfg.get("iters", 20)),
            seed=seed,
            callbacks=tuple(callbacks),
        )
    if name == "gd":
        return GradientDesc(
            alpha=float(train_cfg.get("alpha", 0.3)),
            iters=int(train_cfg.get("iters", 100)),
            callbacks=tuple(callbacks),
        )
    raise ValueError(f"Unknown optimizer: {name}")


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Train one network as described by ``config`` and write its artifacts."""

    validate_config(config)
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    batch = synthetic.load(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))
    layers = [int(size) for size in model_cfg.get("layers", [])]
    if layers and layers[0] != batch.inputs.shape[1]:
        raise ValueError(
            f"Configured input size {layers[0]} but data has {batch.inputs.shape[1]} columns"
        )
    if layers and layers[-1] != batch.targets.shape[1]:
        raise ValueError(
            f"Configured output size {layers[-1]} but targets have {batch.targets.shape[1]} columns"
        )

    seed = int(train_cfg.get("seed", 0))
    run_dir = _resolve_run_dir(train_cfg, str(data_cfg["name"]))
    run_dir.mkdir(parents=True, exist_ok=True)

    jsonl = JsonlSink(run_dir / "metrics.jsonl", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv")
    capture = MetricsCapture()
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))

    model = build_model(model_cfg, train_cfg, callbacks=[jsonl, csv_sink, capture, plots])
    criterion = model.criterion
    regularized = train_cfg.get("regularized")

    _print_startup_summary(
        dataset_name=str(data_cfg["name"]),
        layers=layers,
        criterion=type(criterion).__name__,
        regularization=criterion.regularization(),
        optimizer=type(model.algorithm).__name__,
        param_count=model.base.num_params(),
    )

    model.train(
        batch.inputs,
        batch.targets,
        regularized=None if regularized is None else bool(regularized),
    )
    plots.close()

    predictions = model.predict(batch.inputs)
    final_loss = criterion.cost(predictions, batch.targets)
    metric_names = train_cfg.get("metrics") or default_metrics(criterion.name)
    if isinstance(metric_names, str):
        metric_names = [m.strip() for m in metric_names.split(",") if m.strip()]
    final_metrics = {"loss": final_loss}
    final_metrics.update(compute_metrics(metric_names, predictions, batch.targets))
    (run_dir / "metrics_final.json").write_text(json.dumps(final_metrics, indent=2))

    checkpoint = save_checkpoint(run_dir / "last.ckpt", model.weights)
    safe_config = json.loads(json.dumps(config))
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        network={
            "layers": layers,
            "criterion": criterion.name,
            "num_params": model.base.num_params(),
            "num_layers": len(model.base.layers),
        },
    )
    summary = write_summary(
        jsonl.path, run_dir / "summary.json", tail=int(train_cfg.get("summary_tail", 32))
    )
    return RunResult(
        steps=len(capture.history),
        final_loss=float(final_loss),
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary,
        checkpoint_path=checkpoint,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _print_startup_summary(
    *,
    dataset_name: str,
    layers: List[int],
    criterion: str,
    regularization: Regularization,
    optimizer: str,
    param_count: int,
) -> None:
    print("=== flatnet run ===")
    print(f"Dataset        : {dataset_name}")
    print(f"Layers         : {layers}")
    print(f"Criterion      : {criterion}")
    print(f"Regularization : {regularization.kind} ({regularization.lam})")
    print(f"Optimizer      : {optimizer}")
    print(f"Parameters     : {param_count}")
    print("===================")


__all__ = [
    "build_model",
    "build_optimizer",
    "load_config",
    "load_preset",
    "presets",
    "read_config_file",
    "run_pipeline",
]
