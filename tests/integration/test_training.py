from __future__ import annotations

import numpy as np
import pytest

from flatnet.core import activations
from flatnet.core.criterion import BCECriterion, MSECriterion
from flatnet.core.layers import Linear
from flatnet.data import synthetic
from flatnet.models import NeuralNet
from flatnet.optim import GradientDesc, StochasticGD
from flatnet.reporting.metrics import MetricsCapture


def test_gradient_descent_reduces_regression_cost():
    batch = synthetic.sine(freq=1.0, n_points=32)
    capture = MetricsCapture()
    model = NeuralNet.mlp(
        [1, 8, 1],
        MSECriterion(),
        GradientDesc(alpha=0.05, iters=200, callbacks=[capture]),
        activations.TANH,
        np.random.default_rng(0),
    )
    start = model.weights.copy()
    before = model.criterion.cost(model.predict(batch.inputs), batch.targets)
    model.train(batch.inputs, batch.targets)
    after = model.criterion.cost(model.predict(batch.inputs), batch.targets)
    assert after < before
    assert len(capture.history) == 200
    assert capture.history[-1][1]["loss"] < capture.history[0][1]["loss"]
    assert not np.array_equal(start, model.weights)


def test_stochastic_gd_learns_blobs():
    batch = synthetic.blobs(n=64, d=2, separation=3.0, seed=0)
    model = NeuralNet.mlp(
        [2, 4, 1],
        BCECriterion(),
        StochasticGD(alpha=0.1, mu=0.2, iters=30, seed=0),
        rng=np.random.default_rng(1),
    )
    before = model.criterion.cost(model.predict(batch.inputs), batch.targets)
    model.train(batch.inputs, batch.targets)
    predictions = model.predict(batch.inputs)
    after = model.criterion.cost(predictions, batch.targets)
    assert after < before
    accuracy = np.mean((predictions >= 0.5) == (batch.targets >= 0.5))
    assert accuracy > 0.75


def test_optimizers_never_mutate_start():
    model = NeuralNet.mlp([2, 3, 1], BCECriterion(), rng=np.random.default_rng(0))
    batch = synthetic.xor()
    start = model.weights.copy()
    for algorithm in (GradientDesc(iters=3), StochasticGD(iters=3, seed=0)):
        result = algorithm.optimize(model.base, start, batch.inputs, batch.targets)
        assert result.shape == start.shape
        assert not np.shares_memory(result, start)
    np.testing.assert_array_equal(model.weights, start)


def test_stochastic_gd_is_deterministic_with_seed():
    batch = synthetic.xor(repeat=2)
    runs = []
    for _ in range(2):
        model = NeuralNet.mlp(
            [2, 3, 1],
            BCECriterion(),
            StochasticGD(alpha=0.3, mu=0.3, iters=10, seed=42),
            rng=np.random.default_rng(7),
        )
        runs.append(model.train(batch.inputs, batch.targets))
    np.testing.assert_array_equal(runs[0], runs[1])


@pytest.mark.parametrize(
    "factory",
    [
        lambda: GradientDesc(alpha=0.0),
        lambda: GradientDesc(iters=0),
        lambda: StochasticGD(mu=1.0),
        lambda: StochasticGD(alpha=-0.1),
    ],
)
def test_invalid_hyper_parameters(factory):
    with pytest.raises(ValueError):
        factory()


def test_stochastic_gd_requires_matching_rows():
    model = NeuralNet.mlp([2, 1], BCECriterion(), rng=np.random.default_rng(0))
    with pytest.raises(ValueError):
        StochasticGD(iters=1).optimize(model.base, model.weights, np.ones((3, 2)), np.ones((2, 1)))


def test_neural_net_builders():
    model = NeuralNet.default([3, 4, 2], rng=np.random.default_rng(0))
    assert isinstance(model.criterion, BCECriterion)
    assert isinstance(model.algorithm, StochasticGD)
    assert model.get_net_weights(0).shape == (4, 4)

    manual = NeuralNet(MSECriterion(), GradientDesc(iters=1))
    manual.add_layer(Linear.with_bias(3, 4)).add_layer(Linear.with_bias(4, 5))
    assert len(manual.base.layers) == 2
    assert manual.weights.shape == (4 * 4 + 5 * 5,)
    assert manual.predict(np.ones((2, 3))).shape == (2, 5)


class _HookRecorder:
    def __init__(self):
        self.calls = []

    def on_step(self, step, metrics):
        self.calls.append(("step", step, metrics["loss"]))

    def on_epoch(self, epoch, metrics):
        self.calls.append(("epoch", epoch, metrics["loss"]))


def test_optimizer_progress_hooks():
    batch = synthetic.xor()
    model = NeuralNet.mlp([2, 3, 1], BCECriterion(), rng=np.random.default_rng(0))
    full, per_row = _HookRecorder(), _HookRecorder()
    plain = []
    GradientDesc(iters=2, callbacks=[full]).optimize(
        model.base, model.weights, batch.inputs, batch.targets
    )
    StochasticGD(iters=3, seed=0, callbacks=[per_row, lambda i, m: plain.append(i)]).optimize(
        model.base, model.weights, batch.inputs, batch.targets
    )
    assert [(kind, idx) for kind, idx, _ in full.calls] == [("step", 0), ("step", 1)]
    assert [(kind, idx) for kind, idx, _ in per_row.calls] == [
        ("epoch", 0),
        ("epoch", 1),
        ("epoch", 2),
    ]
    assert plain == [0, 1, 2]


def test_mlp_passes_debug_flag():
    model = NeuralNet.mlp([2, 3, 1], BCECriterion(), rng=np.random.default_rng(0), debug=True)
    assert model.base.debug
    assert not NeuralNet.mlp([2, 1], rng=np.random.default_rng(0)).base.debug
    batch = synthetic.xor()
    _, grad = model.base.compute_grad(model.weights, batch.inputs, batch.targets)
    assert not np.isnan(grad).any()
