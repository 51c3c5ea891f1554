"""Entry point for running the CLI as a module.

Usage:
    python -m walker.cli --help
"""

from walker.cli.main import app

if __name__ == "__main__":
    app()
