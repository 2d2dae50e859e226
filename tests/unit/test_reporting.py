import json

import numpy as np
import pytest

from flatnet.data import synthetic
from flatnet.reporting.artifacts import load_checkpoint, save_checkpoint
from flatnet.reporting.metrics import CsvSink, JsonlSink
from flatnet.reporting.plots import PlotAdapter
from flatnet.reporting.summary import compute_auc, summarize
from flatnet.training.metrics import compute_metrics, default_metrics


def test_jsonl_and_csv_sinks(tmp_path):
    jsonl = JsonlSink(tmp_path / "m.jsonl", seed=3, sha="abc")
    csv_sink = CsvSink(tmp_path / "m.csv")
    for step, loss in enumerate([1.0, 0.5]):
        jsonl.on_step(step, {"loss": loss})
        csv_sink(step, {"loss": loss})
    lines = (tmp_path / "m.jsonl").read_text().splitlines()
    assert [json.loads(line)["loss"] for line in lines] == [1.0, 0.5]
    assert json.loads(lines[0])["sha"] == "abc"
    assert (tmp_path / "m.csv").read_text().splitlines() == ["loss,step", "1.0,0", "0.5,1"]


def test_summary_statistics():
    records = [{"step": i, "loss": v, "seed": 0} for i, v in enumerate([3.0, 2.0, 1.0])]
    summary = summarize(records, tail=2)
    loss = summary["metrics"]["loss"]
    assert set(summary["metrics"]) == {"loss"}
    assert loss["first"] == 3.0 and loss["last"] == 1.0 and loss["mean"] == 2.0
    assert loss["tail_auc"] == pytest.approx(1.5)
    assert compute_auc([1.0]) == 0.0


def test_checkpoint_round_trip(tmp_path):
    weights = np.linspace(-1.0, 1.0, 7)
    path = save_checkpoint(tmp_path / "last.ckpt", weights)
    np.testing.assert_array_equal(load_checkpoint(path), weights)


def test_plot_adapter_headless(tmp_path):
    adapter = PlotAdapter(tmp_path, enable_plots=True)
    adapter.on_step(0, {"loss": 1.0})
    adapter.on_step(1, {"loss": 0.5})
    assert adapter.close() == tmp_path / "loss.png"
    assert (tmp_path / "loss.png").exists()
    assert PlotAdapter(tmp_path / "off").close() is None


def test_metrics_on_predictions():
    preds = np.array([[0.9], [0.2], [0.6], [0.4]])
    targets = np.array([[1.0], [0.0], [0.0], [0.0]])
    assert compute_metrics(default_metrics("bce"), preds, targets) == {"accuracy": 0.75}
    reg = compute_metrics(["mae", "r2"], targets, targets)
    assert reg == {"mae": 0.0, "r2": 1.0}
    with pytest.raises(KeyError):
        compute_metrics(["auc"], preds, targets)


def test_synthetic_datasets():
    batch = synthetic.xor(repeat=3)
    assert batch.inputs.shape == (12, 2) and batch.targets.shape == (12, 1)
    blobs = synthetic.blobs(n=10, d=3)
    assert blobs.inputs.shape == (10, 3)
    assert sorted(np.unique(blobs.targets)) == [0.0, 1.0]
    with pytest.raises(KeyError, match="Available datasets"):
        synthetic.load("mnist")


def test_sinks_accept_epoch_records(tmp_path):
    jsonl = JsonlSink(tmp_path / "m.jsonl", sha="abc")
    csv_sink = CsvSink(tmp_path / "m.csv")
    for epoch, loss in enumerate([2.0, 1.5]):
        jsonl.on_epoch(epoch, {"loss": loss})
        csv_sink.on_epoch(epoch, {"loss": loss})
    records = [json.loads(line) for line in (tmp_path / "m.jsonl").read_text().splitlines()]
    assert [(r["step"], r["loss"]) for r in records] == [(0, 2.0), (1, 1.5)]
    assert (tmp_path / "m.csv").read_text().splitlines() == ["loss,step", "2.0,0", "1.5,1"]
