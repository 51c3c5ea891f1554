"""Plain-text export of per-episode average rewards.

The file holds the number of entries on the first line and the
space-separated rewards on the second.
"""

from pathlib import Path

from walker.exceptions import WalkerError


def save_reward_history(path: str | Path, rewards: list[float]) -> Path:
    """Write a reward history file, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"{len(rewards)}\n{' '.join(repr(float(r)) for r in rewards)}\n")
    return path


def load_reward_history(path: str | Path) -> list[float]:
    """Read a reward history file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        WalkerError: If the count line does not match the values
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Reward history not found: {path}")

    lines = path.read_text().splitlines()
    try:
        count = int(lines[0])
        rewards = [float(v) for v in lines[1].split()] if len(lines) > 1 else []
    except (IndexError, ValueError) as e:
        raise WalkerError(f"Malformed reward history {path}: {e}") from e

    if len(rewards) != count:
        raise WalkerError(
            f"Malformed reward history {path}: header says {count} entries, "
            f"found {len(rewards)}"
        )
    return rewards
