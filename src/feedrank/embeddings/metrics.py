"""Metrics collection for embedding lookups."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass
class EmbeddingMetrics:
    """Metrics for embedding provider access.

    Attributes:
        ids_requested: Article ids looked up.
        embeddings_found: Vectors returned by the provider.
        batches_sent: Provider batch calls issued.
        batch_errors: Provider batch calls that raised.
        timeouts: Requests whose lookups exceeded the time budget.
        fetch_duration_ms: Duration of the latest fetch.
    """

    ids_requested: int = 0
    embeddings_found: int = 0
    batches_sent: int = 0
    batch_errors: int = 0
    timeouts: int = 0
    fetch_duration_ms: float = 0.0

    _instance: ClassVar["EmbeddingMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "EmbeddingMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_fetch(self, requested: int, found: int, batches: int) -> None:
        """Record one fetch.

        Args:
            requested: Ids requested.
            found: Vectors returned.
            batches: Batches issued.
        """
        self.ids_requested += requested
        self.embeddings_found += found
        self.batches_sent += batches

    def record_batch_error(self) -> None:
        """Record a failed batch call."""
        self.batch_errors += 1

    def record_timeout(self) -> None:
        """Record a fetch that hit its time budget."""
        self.timeouts += 1

    def record_duration(self, duration_ms: float) -> None:
        """Record fetch duration.

        Args:
            duration_ms: Duration in milliseconds.
        """
        self.fetch_duration_ms = duration_ms

    @property
    def hit_rate(self) -> float:
        """Share of requested ids that had an embedding."""
        if self.ids_requested == 0:
            return 0.0
        return self.embeddings_found / self.ids_requested

    def to_dict(self) -> dict[str, float | int]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "ids_requested": self.ids_requested,
            "embeddings_found": self.embeddings_found,
            "batches_sent": self.batches_sent,
            "batch_errors": self.batch_errors,
            "timeouts": self.timeouts,
            "fetch_duration_ms": self.fetch_duration_ms,
            "hit_rate": self.hit_rate,
        }
