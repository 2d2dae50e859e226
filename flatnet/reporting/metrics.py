"""Metric sinks that receive optimizer progress."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Mapping

from .artifacts import git_sha


def _numeric(metrics: Mapping[str, float]) -> dict:
    return {k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))}


class JsonlSink:
    """Append-only JSONL writer, one record per optimizer step."""

    def __init__(
        self,
        path: str | Path,
        *,
        run: str = "train",
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.run = run
        self.seed = seed
        self.sha = sha or git_sha()

    def _write(self, step: int, metrics: Mapping[str, float]) -> None:
        record = {"step": int(step), "run": self.run, "seed": self.seed, "sha": self.sha}
        record.update(_numeric(metrics))
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    def on_step(self, step: int, metrics: Mapping[str, float]) -> None:
        self._write(step, metrics)

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        self._write(epoch, metrics)

    __call__ = on_step


class CsvSink:
    """Write step metrics to CSV; the header comes from the first row."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self._fieldnames: list[str] | None = None

    def _write(self, step: int, metrics: Mapping[str, float]) -> None:
        row = {"step": int(step), **_numeric(metrics)}
        if self._fieldnames is None:
            self._fieldnames = sorted(row)
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=self._fieldnames, extrasaction="ignore")
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)

    def on_step(self, step: int, metrics: Mapping[str, float]) -> None:
        self._write(step, metrics)

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        self._write(epoch, metrics)

    __call__ = on_step


class MetricsCapture:
    """Keep step metrics in memory."""

    def __init__(self) -> None:
        self.history: list[tuple[int, Mapping[str, float]]] = []

    def on_step(self, step: int, metrics: Mapping[str, float]) -> None:
        self.history.append((int(step), _numeric(metrics)))

    on_epoch = on_step

    @property
    def last(self) -> Mapping[str, float]:
        return self.history[-1][1] if self.history else {}

    __call__ = on_step


__all__ = ["JsonlSink", "CsvSink", "MetricsCapture"]
