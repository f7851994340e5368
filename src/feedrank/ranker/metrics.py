"""Metrics collection for the ranker module."""

from collections import deque
from dataclasses import dataclass, field
from typing import ClassVar


# Raw scores kept for percentiles; older scores are dropped first.
SCORE_WINDOW_SIZE = 10_000


@dataclass
class RankerMetrics:
    """Metrics for ranking requests.

    Attributes:
        requests_by_phase: Ranking requests per phase.
        candidates_in: Candidates received by the latest request.
        candidates_out: Articles in the latest reranked feed.
        suppressed_by_reason: Suppressed candidates per reason, cumulative.
        score_values: Most recent raw scores for percentile calculation.
        content_scored: Candidates that received a non-zero content term.
        filter_duration_ms: Time spent on suppression in the latest request.
        scoring_duration_ms: Time spent scoring in the latest request.
        rerank_duration_ms: Time spent reranking in the latest request.
        normalize_duration_ms: Time spent normalizing in the latest request.
    """

    requests_by_phase: dict[str, int] = field(default_factory=dict)
    candidates_in: int = 0
    candidates_out: int = 0
    suppressed_by_reason: dict[str, int] = field(default_factory=dict)
    score_values: deque[float] = field(
        default_factory=lambda: deque(maxlen=SCORE_WINDOW_SIZE)
    )
    content_scored: int = 0
    filter_duration_ms: float = 0.0
    scoring_duration_ms: float = 0.0
    rerank_duration_ms: float = 0.0
    normalize_duration_ms: float = 0.0

    _instance: ClassVar["RankerMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "RankerMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_request(self, phase: str) -> None:
        """Record a ranking request.

        Args:
            phase: Phase the request was ranked under.
        """
        self.requests_by_phase[phase] = self.requests_by_phase.get(phase, 0) + 1

    def record_candidates_in(self, count: int) -> None:
        """Record input candidate count."""
        self.candidates_in = count

    def record_candidates_out(self, count: int) -> None:
        """Record reranked feed length."""
        self.candidates_out = count

    def record_suppressed(self, counts: dict[str, int]) -> None:
        """Add suppressed candidate counts.

        Args:
            counts: reason -> number of candidates.
        """
        for reason, count in counts.items():
            self.suppressed_by_reason[reason] = (
                self.suppressed_by_reason.get(reason, 0) + count
            )

    def record_score(self, score: float) -> None:
        """Record a raw score for percentile calculation."""
        self.score_values.append(score)

    def record_content_scored(self, count: int) -> None:
        """Add candidates that received a content term."""
        self.content_scored += count

    def record_durations(
        self,
        filter_ms: float,
        scoring_ms: float,
        rerank_ms: float,
        normalize_ms: float,
    ) -> None:
        """Record stage durations of the latest request."""
        self.filter_duration_ms = filter_ms
        self.scoring_duration_ms = scoring_ms
        self.rerank_duration_ms = rerank_ms
        self.normalize_duration_ms = normalize_ms

    def get_score_percentiles(self) -> dict[str, float]:
        """Calculate score percentiles (p50/p90/p99).

        Returns:
            Dictionary with p50, p90, p99 values.
        """
        if not self.score_values:
            return {"p50": 0.0, "p90": 0.0, "p99": 0.0}

        sorted_scores = sorted(self.score_values)
        n = len(sorted_scores)

        def percentile(p: float) -> float:
            idx = int(p * n / 100)
            return sorted_scores[min(idx, n - 1)]

        return {
            "p50": percentile(50),
            "p90": percentile(90),
            "p99": percentile(99),
        }

    def to_dict(self) -> dict[str, object]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "requests_by_phase": self.requests_by_phase,
            "candidates_in": self.candidates_in,
            "candidates_out": self.candidates_out,
            "suppressed_by_reason": self.suppressed_by_reason,
            "content_scored": self.content_scored,
            "filter_duration_ms": self.filter_duration_ms,
            "scoring_duration_ms": self.scoring_duration_ms,
            "rerank_duration_ms": self.rerank_duration_ms,
            "normalize_duration_ms": self.normalize_duration_ms,
            "score_percentiles": self.get_score_percentiles(),
        }
