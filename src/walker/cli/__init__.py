"""Command-line tools for the walker training engine.

Usage:
    python -m walker.cli --help
    python -m walker.cli config generate config/walker.yaml
    python -m walker.cli train run --env Pendulum-v1 --config config/pendulum.yaml
"""

from walker.cli.main import app

__all__ = ["app"]
