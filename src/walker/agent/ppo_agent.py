"""Proximal Policy Optimization agent.

The agent owns a critic network (state -> value estimate), an actor network
(state -> action means) and a log standard deviation shared by every action
dimension. Actions are drawn from a diagonal Gaussian around the actor
output; after each episode the agent estimates returns and advantages and
runs clipped-surrogate gradient steps over sampled batches.
"""

import logging
import math
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import NamedTuple

import numpy as np

from walker.agent.matrix import Matrix
from walker.agent.network import NeuralNetwork
from walker.agent.serialization import read_weight_lines, save_network
from walker.agent.trajectory import Batch, Trajectory
from walker.config import WalkerConfig
from walker.exceptions import AgentBusyError, InvalidArchitectureError

logger = logging.getLogger(__name__)


class AgentState(Enum):
    """What the agent is doing right now."""

    IDLE = "idle"
    SAMPLING = "sampling"
    TRAINING = "training"


class ActionSample(NamedTuple):
    """Result of sampling one action.

    Attributes:
        action: Sampled action column vector
        log_probability: Per-dimension log density of the action
        mean: Actor output the action was drawn around
        std: Standard deviation used for the draw
    """

    action: Matrix
    log_probability: Matrix
    mean: Matrix
    std: Matrix


class PPOAgent:
    """PPO agent with hand-rolled critic and actor networks.

    Attributes:
        state_size: Width of the state vector
        action_size: Width of the action vector
        config: Active configuration
        critic: Value network (state_size -> 1)
        actor: Action mean network (state_size -> action_size)
        log_standard_deviation: Log std shared by all action dimensions
        rng: Random source for initialisation, sampling and batching
    """

    def __init__(
        self,
        state_size: int,
        action_size: int,
        config: WalkerConfig | None = None,
        rng: np.random.Generator | None = None,
    ):
        """Initialize the agent.

        Args:
            state_size: Width of the state vector
            action_size: Width of the action vector
            config: Configuration (uses defaults if None)
            rng: Random source (seeded from config.training.seed if None)

        Raises:
            InvalidArchitectureError: If an architecture does not fit the
                state and action sizes.
        """
        self.config = config or WalkerConfig()
        self.rng = rng if rng is not None else np.random.default_rng(
            self.config.training.seed
        )
        self.state_size = state_size
        self.action_size = action_size

        self.critic = NeuralNetwork.from_architecture(
            self.config.network.critic_architecture, state_size, 1, self.rng
        )
        self.actor = NeuralNetwork.from_architecture(
            self.config.network.actor_architecture, state_size, action_size, self.rng
        )
        self.log_standard_deviation = self.config.agent.log_standard_deviation
        self.state = AgentState.IDLE

    @contextmanager
    def _activity(self, activity: AgentState) -> Iterator[None]:
        if self.state is not AgentState.IDLE:
            raise AgentBusyError(
                f"Cannot start {activity.value}: agent is already {self.state.value}"
            )
        self.state = activity
        try:
            yield
        finally:
            self.state = AgentState.IDLE

    @property
    def standard_deviation(self) -> float:
        return math.exp(self.log_standard_deviation)

    def standard_deviations(self) -> Matrix:
        """Column vector holding the current std for every action dimension."""
        return Matrix.from_values([self.standard_deviation] * self.action_size)

    def sample_actions(self, state: Matrix) -> ActionSample:
        """Draw an action for a state from the current policy.

        Weights are not modified.

        Args:
            state: State column vector of height state_size

        Returns:
            ActionSample with the action, its log probabilities, the mean
            and the standard deviation used.
        """
        with self._activity(AgentState.SAMPLING):
            mean = self.actor.feed_forward(state)
            std = self.standard_deviations()
            action = Matrix.sample_normal(mean, std, self.rng)
            log_probability = Matrix.log_normal_densities(mean, std, action)
        return ActionSample(action, log_probability, mean, std)

    def get_value_estimate(self, state: Matrix) -> float:
        """Critic output for one state column vector."""
        return self.critic.feed_forward(state).get_value(0, 0)

    # Advantage estimation

    def calculate_value_estimates(self, trajectory: Trajectory) -> None:
        """Fill trajectory.values with the current critic estimate of every state."""
        trajectory.values = [self.get_value_estimate(state) for state in trajectory.states]

    def generalized_advantage_estimate(self, trajectory: Trajectory) -> None:
        """Fill advantages and returns with GAE, iterating in reverse.

        The value past the last timestep is taken as zero. Returns are set
        equal to the advantages.
        """
        gamma = self.config.agent.gamma
        gae_lambda = self.config.agent.gae_lambda

        advantages = [0.0] * len(trajectory)
        next_value = 0.0
        next_gae = 0.0
        for t in reversed(range(len(trajectory))):
            value = trajectory.values[t]
            delta = trajectory.rewards[t] + gamma * next_value - value
            next_gae = delta + gamma * gae_lambda * next_gae
            advantages[t] = next_gae
            next_value = value

        trajectory.advantages = advantages
        trajectory.returns = list(advantages)

    def monte_carlo_returns(self, trajectory: Trajectory) -> None:
        """Fill returns with discounted reward sums, iterating in reverse."""
        gamma = self.config.agent.gamma

        returns = [0.0] * len(trajectory)
        discounted = 0.0
        for t in reversed(range(len(trajectory))):
            discounted = trajectory.rewards[t] + gamma * discounted
            returns[t] = discounted

        trajectory.returns = returns

    def monte_carlo_advantages(self, trajectory: Trajectory) -> None:
        """Fill advantages with returns minus values."""
        trajectory.advantages = [
            ret - value for ret, value in zip(trajectory.returns, trajectory.values)
        ]

    @staticmethod
    def standardize_advantages(trajectory: Trajectory) -> None:
        """Shift advantages to zero mean and scale to unit population std.

        Left unchanged when the trajectory is empty or all advantages are equal.
        """
        if not trajectory.advantages:
            return
        advantages = np.asarray(trajectory.advantages)
        std = float(advantages.std())
        if std == 0.0:
            return
        trajectory.advantages = ((advantages - advantages.mean()) / std).tolist()

    def compute_advantages(self, trajectory: Trajectory) -> None:
        """Refresh value estimates, returns and advantages for a trajectory."""
        self.calculate_value_estimates(trajectory)
        if self.config.agent.use_gae:
            self.generalized_advantage_estimate(trajectory)
        else:
            self.monte_carlo_returns(trajectory)
            self.monte_carlo_advantages(trajectory)
        if self.config.agent.normalize_advantages:
            self.standardize_advantages(trajectory)

    # Batching

    def create_batches(self, trajectory: Trajectory) -> list[Batch]:
        """Sample floor(N / batch_size) batches without replacement.

        Remainder timesteps are left out of this pass.
        """
        batch_size = self.config.agent.batch_size
        remaining = list(range(len(trajectory)))

        batches = []
        for _ in range(len(trajectory) // batch_size):
            batch = Batch(batch_size)
            for _ in range(batch_size):
                position = int(self.rng.integers(len(remaining)))
                batch.add(trajectory, remaining.pop(position))
            batches.append(batch)
        return batches

    @staticmethod
    def update_batches(batches: list[Batch], trajectory: Trajectory) -> None:
        """Copy the trajectory's current estimates into every batch."""
        for batch in batches:
            batch.refresh(trajectory)

    # Training

    def train(self, trajectory: Trajectory) -> dict[str, float]:
        """Run PPO updates over one trajectory.

        For each epoch fresh batches are drawn. Before every batch the
        critic values, returns and advantages of the whole trajectory are
        recomputed and copied into the batches, then one gradient step is
        taken on that batch. Afterwards the log standard deviation decays.

        Args:
            trajectory: Collected rollout

        Returns:
            Dictionary of training metrics including:
            - value_loss: Mean squared critic error
            - clip_fraction: Fraction of ratios outside the clip range
            - approx_kl: Approximate KL divergence
            - num_batches: Number of gradient steps taken
            - log_standard_deviation: Log std after decay
            - standard_deviation: Std after decay
        """
        value_losses: list[float] = []
        clip_fractions: list[float] = []
        approx_kls: list[float] = []

        with self._activity(AgentState.TRAINING):
            epochs = self.config.agent.epochs
            for epoch in range(epochs):
                batches = self.create_batches(trajectory)
                if not batches:
                    logger.debug(
                        "Trajectory of %d timesteps is shorter than one batch of %d, "
                        "skipping epoch %d",
                        len(trajectory),
                        self.config.agent.batch_size,
                        epoch + 1,
                    )

                for j, batch in enumerate(batches):
                    self.compute_advantages(trajectory)
                    self.update_batches(batches, trajectory)

                    value_loss, clip_fraction, approx_kl = self._train_batch(batch)
                    value_losses.append(value_loss)
                    clip_fractions.append(clip_fraction)
                    approx_kls.append(approx_kl)

                    logger.debug(
                        "Epoch %d/%d | Batch %d/%d | Value loss %.6f",
                        epoch + 1,
                        epochs,
                        j + 1,
                        len(batches),
                        value_loss,
                    )

            previous = self.standard_deviation
            self.log_standard_deviation -= self.config.agent.log_standard_deviation_decay
            logger.info(
                "New standard deviation: %.6f, previously %.6f",
                self.standard_deviation,
                previous,
            )

        return {
            "value_loss": float(np.mean(value_losses)) if value_losses else 0.0,
            "clip_fraction": float(np.mean(clip_fractions)) if clip_fractions else 0.0,
            "approx_kl": float(np.mean(approx_kls)) if approx_kls else 0.0,
            "num_batches": len(value_losses),
            "log_standard_deviation": self.log_standard_deviation,
            "standard_deviation": self.standard_deviation,
        }

    def _train_batch(self, batch: Batch) -> tuple[float, float, float]:
        """Accumulate gradients over a batch, then step both optimisers.

        Returns:
            Tuple of (mean squared critic error, clip fraction, approx KL)
        """
        self.critic.zero()
        self.actor.zero()

        epsilon = self.config.agent.clip_epsilon
        upper, lower = 1.0 + epsilon, 1.0 - epsilon
        size = batch.batch_size

        std = self.standard_deviations()
        variance = Matrix.hadamard_product(std, std)

        squared_errors = 0.0
        clipped = 0
        kl_sum = 0.0
        for i in range(size):
            # Critic: d/dV (V - R)^2
            error = self.get_value_estimate(batch.states[i]) - batch.returns[i]
            squared_errors += error**2
            critic_gradient = Matrix.from_values([2.0 * error / size])

            mean = self.actor.feed_forward(batch.states[i])
            log_probability = Matrix.log_normal_densities(mean, std, batch.actions[i])
            old_log_probability = batch.log_probabilities[i]
            advantage = batch.advantages[i]

            # Clipped surrogate, differentiated with respect to the policy
            log_ratio = log_probability - old_log_probability
            ratio = Matrix.exponential(log_ratio)
            clipped_ratio = Matrix.clip(ratio, upper, lower)
            ratio_advantage = ratio * advantage
            clipped_advantage = clipped_ratio * advantage

            unclipped_term = Matrix.compare(ratio_advantage, clipped_advantage) * advantage
            clipped_term = Matrix.compare_not_equal(clipped_advantage, ratio_advantage) * advantage
            in_range = Matrix.compare_in_range(ratio, upper, lower)

            surrogate = -(unclipped_term + Matrix.hadamard_product(clipped_term, in_range))
            surrogate = Matrix.hadamard_division(
                surrogate, Matrix.exponential(old_log_probability)
            )

            # Gaussian density, differentiated with respect to the mean
            density_gradient = Matrix.hadamard_product(
                Matrix.exponential(log_probability),
                Matrix.hadamard_division(batch.actions[i] - mean, variance),
            )
            mean_gradient = Matrix.hadamard_product(density_gradient, surrogate) / size

            self.critic.feed_back(critic_gradient)
            self.actor.feed_back(mean_gradient)

            ratios = ratio.to_numpy()
            clipped += int(np.count_nonzero(np.abs(ratios - 1.0) > epsilon))
            kl_sum += float(np.mean((ratios - 1.0) - log_ratio.to_numpy()))

        self.critic.optimise(self.config.adam)
        self.actor.optimise(self.config.adam)

        return (
            squared_errors / size,
            clipped / (size * self.action_size),
            kl_sum / size,
        )

    # Configuration and persistence

    def apply_config(self, config: WalkerConfig) -> None:
        """Swap in new hyperparameters between training calls.

        Raises:
            AgentBusyError: If the agent is sampling or training.
            InvalidArchitectureError: If the new configuration changes an
                architecture or a state or action size.
        """
        if self.state is not AgentState.IDLE:
            raise AgentBusyError(f"Cannot reconfigure while {self.state.value}")

        network = config.network
        if network.critic_architecture != self.critic.architecture:
            raise InvalidArchitectureError(
                "critic architecture cannot change on a live agent"
            )
        if network.actor_architecture != self.actor.architecture:
            raise InvalidArchitectureError(
                "actor architecture cannot change on a live agent"
            )
        current = self.config.network
        if (network.state_size, network.action_size) != (
            current.state_size,
            current.action_size,
        ):
            raise InvalidArchitectureError(
                "state and action sizes cannot change on a live agent"
            )
        self.config = config

    def save(self, critic_path: str | Path, actor_path: str | Path) -> None:
        """Write critic and actor weights to text files."""
        save_network(self.critic, critic_path)
        save_network(self.actor, actor_path)
        logger.info("Saved weights to %s and %s", critic_path, actor_path)

    def load(self, critic_path: str | Path, actor_path: str | Path) -> None:
        """Load critic and actor weights.

        Both files are read and validated before either network changes.

        Raises:
            FileNotFoundError: If either file doesn't exist
            ArchitectureMismatchError: If a saved descriptor differs
            WeightFormatError: If a file is malformed
        """
        critic_lines = read_weight_lines(critic_path)
        actor_lines = read_weight_lines(actor_path)

        critic_weights = self.critic.parse_weights(critic_lines)
        actor_weights = self.actor.parse_weights(actor_lines)

        self.critic.set_weights(critic_weights)
        self.actor.set_weights(actor_weights)
        logger.info("Loaded weights from %s and %s", critic_path, actor_path)
