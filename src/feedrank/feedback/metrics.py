"""Metrics collection for the feedback write paths."""

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class FeedbackMetrics:
    """Metrics for vote, save, impression and seed events.

    Attributes:
        votes_recorded: Votes accepted, by value.
        votes_rejected: Votes rejected for invalid input.
        saves_recorded: Saves accepted.
        unsaves_recorded: Saves removed.
        impressions_recorded: Impression increments.
        seeds_recorded: Seed interactions stored.
        backfills_completed: Weight replays completed.
    """

    votes_recorded: dict[int, int] = field(default_factory=dict)
    votes_rejected: int = 0
    saves_recorded: int = 0
    unsaves_recorded: int = 0
    impressions_recorded: int = 0
    seeds_recorded: int = 0
    backfills_completed: int = 0

    _instance: ClassVar["FeedbackMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "FeedbackMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_vote(self, value: int) -> None:
        """Record an accepted vote.

        Args:
            value: Vote value.
        """
        self.votes_recorded[value] = self.votes_recorded.get(value, 0) + 1

    def record_vote_rejected(self) -> None:
        """Record a rejected vote."""
        self.votes_rejected += 1

    def record_save(self) -> None:
        """Record a save."""
        self.saves_recorded += 1

    def record_unsave(self) -> None:
        """Record an unsave."""
        self.unsaves_recorded += 1

    def record_impressions(self, count: int) -> None:
        """Record impression increments.

        Args:
            count: Number of articles viewed.
        """
        self.impressions_recorded += count

    def record_seed(self) -> None:
        """Record a seed interaction."""
        self.seeds_recorded += 1

    def record_backfill(self) -> None:
        """Record a completed weight replay."""
        self.backfills_completed += 1

    def to_dict(self) -> dict[str, object]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "votes_recorded": dict(self.votes_recorded),
            "votes_rejected": self.votes_rejected,
            "saves_recorded": self.saves_recorded,
            "unsaves_recorded": self.unsaves_recorded,
            "impressions_recorded": self.impressions_recorded,
            "seeds_recorded": self.seeds_recorded,
            "backfills_completed": self.backfills_completed,
        }
