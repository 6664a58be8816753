"""
network.py

Fully-connected feed-forward network with sigmoid nodes, trained one sample
at a time by backpropagation.

Each layer is stored as a weight matrix of shape (nodes, inputs + 1); the
last column holds the bias, applied to an implicit constant input of 1.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy.special import expit

from ..exceptions import DimensionMismatchError


class NeuralNetwork:
    """
    Sigmoid multi-layer perceptron.

    Args:
        topology: Node counts per layer, input layer first, e.g. (2, 2, 1)
        random_state: Seed for weight initialization
        init_scale: Weights start uniform on [-init_scale, init_scale]
    """

    def __init__(
        self,
        topology: Sequence[int],
        random_state: Optional[int] = None,
        init_scale: float = 0.5
    ):
        topology = tuple(int(n) for n in topology)
        if len(topology) < 2:
            raise ValueError(f"Topology needs an input and an output layer, got {topology}")
        if any(n < 1 for n in topology):
            raise ValueError(f"Every layer needs at least one node, got {topology}")

        self._topology = topology
        rng = np.random.default_rng(random_state)
        self._weights: List[np.ndarray] = [
            rng.uniform(-init_scale, init_scale, size=(n_out, n_in + 1))
            for n_in, n_out in zip(topology[:-1], topology[1:])
        ]

    @property
    def topology(self) -> Tuple[int, ...]:
        return self._topology

    @property
    def n_inputs(self) -> int:
        return self._topology[0]

    @property
    def n_outputs(self) -> int:
        return self._topology[-1]

    @property
    def weights(self) -> List[np.ndarray]:
        """Copies of the per-layer weight matrices (bias in the last column)."""
        return [w.copy() for w in self._weights]

    def execute(self, inputs: Sequence[float]) -> List[float]:
        """Forward pass. Pure: weights are not touched."""
        return self._forward(self._as_input(inputs))[-1].tolist()

    def backpropagate(
        self,
        inputs: Sequence[float],
        target: Sequence[float],
        rate: float
    ) -> float:
        """
        One stochastic gradient step towards `target`.

        Deltas for every layer are computed from the current weights before
        any weight changes.

        Returns:
            Squared error of the forward pass taken before the update
        """
        x = self._as_input(inputs)
        t = np.asarray(target, dtype=float)
        if t.shape != (self.n_outputs,):
            raise DimensionMismatchError(self.n_outputs, t.size, "target")

        activations = self._forward(x)

        out = activations[-1]
        deltas = [None] * len(self._weights)
        deltas[-1] = out * (1.0 - out) * (t - out)
        for layer in range(len(self._weights) - 2, -1, -1):
            downstream = self._weights[layer + 1][:, :-1]
            act = activations[layer + 1]
            deltas[layer] = act * (1.0 - act) * (downstream.T @ deltas[layer + 1])

        for layer, delta in enumerate(deltas):
            upstream = np.append(activations[layer], 1.0)
            self._weights[layer] += rate * np.outer(delta, upstream)

        return float(np.sum((t - out) ** 2))

    def squared_error(self, inputs: Sequence[float], target: Sequence[float]) -> float:
        t = np.asarray(target, dtype=float)
        if t.shape != (self.n_outputs,):
            raise DimensionMismatchError(self.n_outputs, t.size, "target")
        out = self._forward(self._as_input(inputs))[-1]
        return float(np.sum((t - out) ** 2))

    def _forward(self, x: np.ndarray) -> List[np.ndarray]:
        activations = [x]
        for w in self._weights:
            activations.append(expit(w[:, :-1] @ activations[-1] + w[:, -1]))
        return activations

    def _as_input(self, inputs: Sequence[float]) -> np.ndarray:
        x = np.asarray(inputs, dtype=float)
        if x.shape != (self.n_inputs,):
            raise DimensionMismatchError(self.n_inputs, x.size, "input")
        return x

    def __repr__(self) -> str:
        return f"NeuralNetwork(topology={list(self._topology)})"
