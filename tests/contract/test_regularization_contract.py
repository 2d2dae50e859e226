"""Regularization is defined on criteria but only applied when asked for."""

import numpy as np
import pytest

from flatnet.core.criterion import BCECriterion, MSECriterion
from flatnet.core.layers import Linear
from flatnet.core.network import BaseNeuralNet, RegularizedObjective
from flatnet.core.regularization import Regularization
from flatnet.models import NeuralNet


def _pair(reg):
    plain = BaseNeuralNet.mlp([3, 4, 2], BCECriterion(), rng=np.random.default_rng(0))
    penalised = BaseNeuralNet.mlp([3, 4, 2], BCECriterion(reg), rng=np.random.default_rng(0))
    return plain, penalised


def _data():
    rng = np.random.default_rng(1)
    return rng.normal(size=(5, 3)), (rng.uniform(size=(5, 2)) > 0.5).astype(np.float64)


def test_defined_but_unapplied_regularization_leaves_compute_grad_unchanged():
    plain, penalised = _pair(Regularization.l2(0.7))
    inputs, targets = _data()
    cost_a, grad_a = plain.compute_grad(plain.weights, inputs, targets)
    cost_b, grad_b = penalised.compute_grad(penalised.weights, inputs, targets)
    assert cost_a == cost_b
    np.testing.assert_array_equal(grad_a, grad_b)


def test_no_regularization_makes_the_explicit_step_a_no_op():
    plain, _ = _pair(Regularization.l2(0.7))
    inputs, targets = _data()
    assert plain.regularization_terms(plain.weights)[0] == 0.0
    base = plain.compute_grad(plain.weights, inputs, targets)
    explicit = plain.compute_regularized_grad(plain.weights, inputs, targets)
    assert base[0] == explicit[0]
    np.testing.assert_array_equal(base[1], explicit[1])


@pytest.mark.parametrize("reg", [Regularization.l1(0.3), Regularization.l2(0.3)])
def test_applied_regularization_adds_penalty_outside_bias_rows(reg):
    _, net = _pair(reg)
    inputs, targets = _data()
    cost, grad = net.compute_grad(net.weights, inputs, targets)
    reg_cost, reg_grad = net.regularization_terms(net.weights)
    total_cost, total_grad = net.compute_regularized_grad(net.weights, inputs, targets)
    assert reg_cost > 0.0
    assert total_cost == pytest.approx(cost + reg_cost)
    np.testing.assert_allclose(total_grad, grad + reg_grad)
    for idx, slot in enumerate(net.layout):
        if slot.size == 0:
            continue
        layer_grad = reg_grad[slot.as_slice()].reshape(slot.rows, slot.cols)
        np.testing.assert_array_equal(layer_grad[0], 0.0)
        np.testing.assert_allclose(
            layer_grad[1:], reg.reg_grad(net.get_non_bias_weights(net.weights, idx))
        )


def test_l2_penalty_on_single_weight():
    net = BaseNeuralNet(MSECriterion(Regularization.l2(0.5)))
    net.add_layer(Linear.with_bias(1, 1))
    net.weights = np.array([5.0, 2.0])
    reg_cost, reg_grad = net.regularization_terms(net.weights)
    # bias excluded: only w = 2 is penalised, with m = 1 row
    assert reg_cost == pytest.approx(0.5 * 4.0 / 2.0)
    np.testing.assert_allclose(reg_grad, [0.0, 1.0])


def test_regularized_objective_gradient_matches_finite_differences():
    _, net = _pair(Regularization.l2(0.4))
    objective = net.regularized()
    assert isinstance(objective, RegularizedObjective)
    inputs, targets = _data()
    weights = net.weights
    _, grad = objective.compute_grad(weights, inputs, targets)
    eps = 1e-6
    numeric = np.zeros_like(weights)
    for idx in range(weights.shape[0]):
        plus = weights.copy()
        minus = weights.copy()
        plus[idx] += eps
        minus[idx] -= eps
        numeric[idx] = (
            objective.compute_grad(plus, inputs, targets)[0]
            - objective.compute_grad(minus, inputs, targets)[0]
        ) / (2 * eps)
    np.testing.assert_allclose(grad, numeric, rtol=1e-4, atol=1e-7)


class _RecordingOptimizer:
    def __init__(self):
        self.models = []

    def optimize(self, model, start, inputs, targets):
        self.models.append(model)
        return np.array(start, copy=True)


def test_neural_net_opts_into_regularization_only_when_present():
    recorder = _RecordingOptimizer()
    inputs, targets = _data()

    model = NeuralNet.mlp([3, 4, 2], BCECriterion(Regularization.l1(0.1)), recorder)
    model.train(inputs, targets)
    model.train(inputs, targets, regularized=False)

    plain = NeuralNet.mlp([3, 4, 2], BCECriterion(), recorder)
    plain.train(inputs, targets)

    assert isinstance(recorder.models[0], RegularizedObjective)
    assert recorder.models[1] is model.base
    assert recorder.models[2] is plain.base
