"""Abstract base class for metrics writers."""

from abc import ABC, abstractmethod


class MetricsWriter(ABC):
    """Destination for scalar training metrics.

    Tags are slash-separated, e.g. "episode/reward" or "train/value_loss".
    """

    @abstractmethod
    def write_scalar(self, tag: str, value: float, step: int) -> None:
        """Write a single scalar metric.

        Args:
            tag: Metric tag
            value: Scalar value to log
            step: Episode or train call number the value belongs to
        """
        ...

    def write_scalars(
        self, main_tag: str, tag_scalar_dict: dict[str, float], step: int
    ) -> None:
        """Write a group of scalars under main_tag."""
        for sub_tag, value in tag_scalar_dict.items():
            self.write_scalar(f"{main_tag}/{sub_tag}", value, step)

    @abstractmethod
    def flush(self) -> None:
        """Persist any buffered data."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Flush and release resources."""
        ...
