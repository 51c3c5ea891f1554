"""Walker: a from-scratch PPO training engine for continuous control."""

__version__ = "0.1.0"
