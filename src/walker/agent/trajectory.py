"""Rollout containers for PPO training.

A Trajectory records one episode timestep by timestep. A Batch is a
fixed-size sample of trajectory entries drawn for one gradient step.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from walker.agent.matrix import Matrix


@dataclass
class Trajectory:
    """Per-timestep record of one episode.

    Rollout sequences (states through rewards, plus indexes) grow together
    through record(). Values, returns and advantages are filled by the
    agent's post-hoc estimation pass and are empty during collection.

    Attributes:
        states: Observed state column vectors
        actions: Sampled action column vectors
        means: Actor mean outputs at sampling time
        stds: Standard deviations at sampling time
        log_probabilities: Per-dimension log densities of the sampled actions
        rewards: Scalar reward received after each action
        values: Critic value estimates
        returns: Discounted returns
        advantages: Advantage estimates
        indexes: Timestep index of each entry
    """

    states: list[Matrix] = field(default_factory=list)
    actions: list[Matrix] = field(default_factory=list)
    means: list[Matrix] = field(default_factory=list)
    stds: list[Matrix] = field(default_factory=list)
    log_probabilities: list[Matrix] = field(default_factory=list)
    rewards: list[float] = field(default_factory=list)
    values: list[float] = field(default_factory=list)
    returns: list[float] = field(default_factory=list)
    advantages: list[float] = field(default_factory=list)
    indexes: list[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.states)

    def record(
        self,
        state: Matrix,
        action: Matrix,
        mean: Matrix,
        std: Matrix,
        log_probability: Matrix,
        reward: float,
    ) -> None:
        """Append one timestep to every rollout sequence."""
        self.indexes.append(len(self.states))
        self.states.append(state)
        self.actions.append(action)
        self.means.append(mean)
        self.stds.append(std)
        self.log_probabilities.append(log_probability)
        self.rewards.append(float(reward))

    def clear_estimates(self) -> None:
        self.values.clear()
        self.returns.clear()
        self.advantages.clear()

    def copy(self) -> Trajectory:
        """Shallow copy: new lists holding the same entries."""
        return Trajectory(
            states=list(self.states),
            actions=list(self.actions),
            means=list(self.means),
            stds=list(self.stds),
            log_probabilities=list(self.log_probabilities),
            rewards=list(self.rewards),
            values=list(self.values),
            returns=list(self.returns),
            advantages=list(self.advantages),
            indexes=list(self.indexes),
        )

    @property
    def total_reward(self) -> float:
        return sum(self.rewards)

    @property
    def mean_reward(self) -> float:
        return self.total_reward / len(self.rewards) if self.rewards else 0.0


@dataclass
class Batch:
    """Fixed-size sample of trajectory entries.

    Attributes:
        batch_size: Number of entries
        indexes: Source trajectory index of each entry
        index: Last source index drawn into this batch, -1 while empty
    """

    batch_size: int
    states: list[Matrix] = field(default_factory=list)
    actions: list[Matrix] = field(default_factory=list)
    means: list[Matrix] = field(default_factory=list)
    stds: list[Matrix] = field(default_factory=list)
    log_probabilities: list[Matrix] = field(default_factory=list)
    rewards: list[float] = field(default_factory=list)
    values: list[float] = field(default_factory=list)
    returns: list[float] = field(default_factory=list)
    advantages: list[float] = field(default_factory=list)
    indexes: list[int] = field(default_factory=list)
    index: int = -1

    def __len__(self) -> int:
        return len(self.states)

    def add(self, trajectory: Trajectory, source_index: int) -> None:
        """Copy one trajectory entry into the batch."""
        if len(self) >= self.batch_size:
            raise ValueError(f"Batch is full ({self.batch_size} entries)")
        self.states.append(trajectory.states[source_index])
        self.actions.append(trajectory.actions[source_index])
        self.means.append(trajectory.means[source_index])
        self.stds.append(trajectory.stds[source_index])
        self.log_probabilities.append(trajectory.log_probabilities[source_index])
        self.rewards.append(trajectory.rewards[source_index])
        self.indexes.append(source_index)
        self.index = source_index

    def refresh(self, trajectory: Trajectory) -> None:
        """Pull current values, returns and advantages from the source trajectory."""
        self.values = [trajectory.values[i] for i in self.indexes]
        self.returns = [trajectory.returns[i] for i in self.indexes]
        self.advantages = [trajectory.advantages[i] for i in self.indexes]
