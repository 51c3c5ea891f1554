"""Agent module for PPO reinforcement learning.

This module contains the matrix kernel, the feed-forward network
abstraction and the PPO agent that trains on top of them.
"""

from walker.agent.architecture import (
    ActivationKind,
    parse_architecture,
    validate_architecture,
)
from walker.agent.layers import ActivationLayer, DenseLayer
from walker.agent.matrix import Matrix
from walker.agent.network import NeuralNetwork
from walker.agent.ppo_agent import ActionSample, AgentState, PPOAgent
from walker.agent.serialization import (
    WeightFileInfo,
    load_network,
    read_weight_file_info,
    save_network,
)
from walker.agent.trajectory import Batch, Trajectory

__all__ = [
    "ActionSample",
    "ActivationKind",
    "ActivationLayer",
    "AgentState",
    "Batch",
    "DenseLayer",
    "Matrix",
    "NeuralNetwork",
    "PPOAgent",
    "Trajectory",
    "WeightFileInfo",
    "load_network",
    "parse_architecture",
    "read_weight_file_info",
    "save_network",
    "validate_architecture",
]
