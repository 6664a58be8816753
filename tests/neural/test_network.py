"""Unit tests for filing_forecast.neural.network (NeuralNetwork)."""

import numpy as np
import pytest
from scipy.special import expit

from filing_forecast.exceptions import DimensionMismatchError
from filing_forecast.neural.network import NeuralNetwork


class TestConstruction:

    def test_weight_shapes_include_bias(self):
        net = NeuralNetwork([3, 4, 2], random_state=0)
        assert [w.shape for w in net.weights] == [(4, 4), (2, 5)]
        assert net.n_inputs == 3
        assert net.n_outputs == 2

    def test_same_seed_same_weights(self):
        a = NeuralNetwork([2, 2, 1], random_state=5)
        b = NeuralNetwork([2, 2, 1], random_state=5)
        for wa, wb in zip(a.weights, b.weights):
            np.testing.assert_array_equal(wa, wb)

    def test_weights_are_copies(self):
        net = NeuralNetwork([2, 1], random_state=0)
        net.weights[0][:] = 99.0
        assert not np.any(net.weights[0] == 99.0)

    @pytest.mark.parametrize("topology", [[3], [], [2, 0, 1]])
    def test_invalid_topology(self, topology):
        with pytest.raises(ValueError):
            NeuralNetwork(topology)


class TestExecute:

    def test_outputs_in_unit_interval(self):
        net = NeuralNetwork([4, 6, 3], random_state=1)
        out = net.execute([0.1, -2.0, 3.0, 0.5])
        assert len(out) == 3
        assert all(0.0 < y < 1.0 for y in out)

    def test_execute_is_pure(self):
        net = NeuralNetwork([2, 3, 1], random_state=2)
        before = net.weights
        first = net.execute([0.3, 0.7])
        second = net.execute([0.3, 0.7])
        assert first == second
        for w0, w1 in zip(before, net.weights):
            np.testing.assert_array_equal(w0, w1)

    def test_single_layer_matches_manual_sigmoid(self):
        net = NeuralNetwork([2, 1], random_state=3)
        w = net.weights[0]
        expected = expit(w[0, 0] * 0.2 + w[0, 1] * 0.4 + w[0, 2])
        assert net.execute([0.2, 0.4])[0] == pytest.approx(expected)

    def test_wrong_input_length(self):
        net = NeuralNetwork([2, 1], random_state=0)
        with pytest.raises(DimensionMismatchError):
            net.execute([1.0, 2.0, 3.0])


class TestBackpropagate:

    def test_single_step_reduces_error(self):
        net = NeuralNetwork([2, 2, 1], random_state=0)
        before = net.squared_error([0.3, 0.7], [0.9])
        reported = net.backpropagate([0.3, 0.7], [0.9], 0.3)
        after = net.squared_error([0.3, 0.7], [0.9])
        assert reported == pytest.approx(before)
        assert after < before

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
    @pytest.mark.parametrize("rate", [0.1, 0.3, 1.0])
    def test_error_decreases_monotonically(self, seed, rate):
        net = NeuralNetwork([2, 2, 1], random_state=seed)
        errors = [net.backpropagate([0.3, 0.7], [0.9], rate) for _ in range(300)]
        for previous, current in zip(errors, errors[1:]):
            assert current <= previous
        assert errors[-1] < errors[0]

    def test_repeated_steps_converge(self):
        net = NeuralNetwork([2, 3, 1], random_state=4)
        for _ in range(2000):
            net.backpropagate([0.3, 0.7], [0.9], 1.0)
        assert net.execute([0.3, 0.7])[0] == pytest.approx(0.9, abs=0.02)

    def test_update_uses_pre_update_weights(self):
        net = NeuralNetwork([2, 2, 1], random_state=6)
        w1, w2 = net.weights
        x, t, rate = np.array([0.3, 0.7]), 0.9, 0.5

        h = expit(w1[:, :-1] @ x + w1[:, -1])
        y = expit(w2[:, :-1] @ h + w2[:, -1])
        delta_out = y * (1 - y) * (t - y)
        delta_hidden = h * (1 - h) * (w2[:, :-1].T @ delta_out)
        expected_w2 = w2 + rate * np.outer(delta_out, np.append(h, 1.0))
        expected_w1 = w1 + rate * np.outer(delta_hidden, np.append(x, 1.0))

        net.backpropagate(x, [t], rate)

        np.testing.assert_allclose(net.weights[0], expected_w1)
        np.testing.assert_allclose(net.weights[1], expected_w2)

    def test_mismatched_target_leaves_weights_unchanged(self):
        net = NeuralNetwork([2, 2, 1], random_state=0)
        before = net.weights
        with pytest.raises(DimensionMismatchError):
            net.backpropagate([0.3, 0.7], [0.9, 0.1], 0.3)
        with pytest.raises(DimensionMismatchError):
            net.backpropagate([0.3], [0.9], 0.3)
        for w0, w1 in zip(before, net.weights):
            np.testing.assert_array_equal(w0, w1)
