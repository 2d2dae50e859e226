"""Headless-safe loss plotting."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Tuple


class PlotAdapter:
    """Collect per-step loss and optionally write ``loss.png``."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Tuple[int, float]] = []

    def on_step(self, step: int, metrics: Mapping[str, float]) -> None:
        if self.enable_plots and "loss" in metrics:
            self._history.append((int(step), float(metrics["loss"])))

    on_epoch = on_step

    __call__ = on_step

    def close(self) -> Path | None:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        self.run_dir.mkdir(parents=True, exist_ok=True)
        steps, losses = zip(*self._history)
        fig, ax = plt.subplots()
        ax.plot(steps, losses)
        ax.set_xlabel("Iteration")
        ax.set_ylabel("Cost")
        ax.set_title("Training cost")
        plot_path = self.run_dir / "loss.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path


__all__ = ["PlotAdapter"]
