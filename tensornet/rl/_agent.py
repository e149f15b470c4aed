"""
Actor-critic style agent built on two independent networks.

The agent only uses the public network contract (add_layer, forward,
train_batch); it does not depend on which layers the networks contain.
"""
from collections import deque
from typing import Optional

import numpy as np

from ..common.logger import get_logger
from ..exceptions import InvalidArgumentError
from ..neural_networks import DenseLayer, NeuralNetwork
from ..neural_networks.layers import is_integer
from ..tensor import Tensor

logger = get_logger(__name__)


class Experience:
    """One (state, action, reward, next_state, done) transition."""

    __slots__ = ('state', 'action', 'reward', 'next_state', 'done')

    def __init__(self, state, action, reward, next_state, done):
        self.state = state
        self.action = action
        self.reward = reward
        self.next_state = next_state
        self.done = done

    def __repr__(self):
        return (f"Experience(action={self.action}, reward={self.reward}, "
                f"done={self.done})")


class ExperienceBuffer:
    """
    Bounded FIFO of experiences; the oldest entry is evicted on overflow.

    Example:
        >>> buffer = ExperienceBuffer(capacity=1000)
        >>> buffer.push(state, action, reward, next_state, done)
        >>> batch = buffer.sample(32, rng)
    """

    def __init__(self, capacity: int):
        if not is_integer(capacity) or capacity < 1:
            raise InvalidArgumentError(f"capacity must be a positive integer, got {capacity!r}")
        self.capacity = capacity
        self._buffer = deque(maxlen=capacity)

    def push(self, state, action, reward, next_state, done) -> None:
        """Store a copy of the transition."""
        self._buffer.append(Experience(
            np.array(state, dtype=np.float64).ravel(),
            int(action),
            float(reward),
            np.array(next_state, dtype=np.float64).ravel(),
            bool(done),
        ))

    def sample(self, batch_size: int, rng: np.random.Generator):
        """Draw batch_size distinct experiences uniformly at random."""
        if batch_size > len(self._buffer):
            raise InvalidArgumentError(
                f"Cannot sample {batch_size} experiences from {len(self._buffer)}")
        indices = rng.choice(len(self._buffer), size=batch_size, replace=False)
        return [self._buffer[i] for i in indices]

    def __len__(self) -> int:
        return len(self._buffer)

    def __iter__(self):
        return iter(self._buffer)


class ReinforcementLearningAgent:
    """
    Epsilon-greedy agent with a policy network (one sigmoid score per action)
    and a value network (scalar state value), fed from an experience buffer.
    """

    def __init__(self, state_size: int, action_size: int, discount_factor: float = 0.99,
                 learning_rate: float = 0.001, buffer_size: int = 10000,
                 batch_size: int = 32, hidden_size: int = 64,
                 random_state=None):
        """
        Args:
            state_size: Length of the state vector
            action_size: Number of discrete actions
            discount_factor: Reward discount gamma in [0, 1]
            learning_rate: Adam learning rate for both networks
            buffer_size: Experience buffer capacity
            batch_size: Experiences per training step
            hidden_size: Units in each of the two hidden layers
            random_state: Seed or generator for initialization and sampling
        """
        if not 0.0 <= discount_factor <= 1.0:
            raise InvalidArgumentError(
                f"discount_factor must be in [0, 1], got {discount_factor}")
        if not is_integer(batch_size) or batch_size < 1:
            raise InvalidArgumentError(f"batch_size must be a positive integer, got {batch_size!r}")

        self.state_size = state_size
        self.action_size = action_size
        self.discount_factor = discount_factor
        self.learning_rate = learning_rate
        self.batch_size = batch_size
        self.rng_ = np.random.default_rng(random_state)
        self.buffer = ExperienceBuffer(buffer_size)

        self.policy_network = self._build_network(hidden_size, action_size, 'sigmoid')
        self.value_network = self._build_network(hidden_size, 1, None)

    def _build_network(self, hidden_size, output_size, output_activation):
        network = NeuralNetwork(loss='mse', optimizer='adam', random_state=self.rng_,
                                lr=self.learning_rate)
        network.add_layer(DenseLayer(self.state_size, hidden_size, 'relu', rng=self.rng_))
        network.add_layer(DenseLayer(hidden_size, hidden_size, 'relu', rng=self.rng_))
        network.add_layer(DenseLayer(hidden_size, output_size, output_activation, rng=self.rng_))
        return network

    def _state_tensor(self, state):
        state = np.asarray(state, dtype=np.float64).ravel()
        if state.shape[0] != self.state_size:
            raise InvalidArgumentError(
                f"Expected state of length {self.state_size}, got {state.shape[0]}")
        return Tensor.from_vector(state)

    def get_action_probabilities(self, state):
        """Policy network output for a state, one score per action."""
        return self.policy_network.forward(self._state_tensor(state)).flatten()

    def get_state_value(self, state):
        """Value network output for a state, as a length-1 array."""
        return self.value_network.forward(self._state_tensor(state)).flatten()

    def select_action(self, state, epsilon: float) -> int:
        """
        Epsilon-greedy action selection.

        Args:
            state: State vector
            epsilon: Probability of picking a uniformly random action

        Returns:
            Index of the chosen action
        """
        if self.rng_.random() < epsilon:
            # Exploration: random action
            return int(self.rng_.integers(self.action_size))
        # Exploitation: policy network action
        return int(np.argmax(self.get_action_probabilities(state)))

    def store_experience(self, state, action, reward, next_state, done) -> None:
        if not 0 <= action < self.action_size:
            raise InvalidArgumentError(
                f"action must be in [0, {self.action_size}), got {action}")
        self.buffer.push(state, action, reward, next_state, done)

    def train(self) -> Optional[dict]:
        """
        One training step on a random batch of stored experiences.

        The value network is fitted to TD targets r + gamma * V(s'); the policy
        network's score for the taken action is pushed up or down by the
        advantage TD target - V(s), clipped to [0, 1].

        Returns:
            dict with 'value_loss' and 'policy_loss', or None while the
            buffer holds fewer than batch_size experiences
        """
        if len(self.buffer) < self.batch_size:
            return None

        batch = self.buffer.sample(self.batch_size, self.rng_)

        states, value_targets, policy_targets = [], [], []
        for exp in batch:
            next_value = 0.0 if exp.done else float(self.get_state_value(exp.next_state)[0])
            td_target = exp.reward + self.discount_factor * next_value
            advantage = td_target - float(self.get_state_value(exp.state)[0])

            probs = self.get_action_probabilities(exp.state)
            probs[exp.action] = np.clip(probs[exp.action] + advantage, 0.0, 1.0)

            states.append(self._state_tensor(exp.state))
            value_targets.append(Tensor.from_vector([td_target]))
            policy_targets.append(Tensor.from_vector(probs))

        value_loss = self.value_network.train_batch(states, value_targets)
        policy_loss = self.policy_network.train_batch(states, policy_targets)
        logger.debug("Agent step: value_loss=%.6f policy_loss=%.6f", value_loss, policy_loss)
        return {'value_loss': value_loss, 'policy_loss': policy_loss}
