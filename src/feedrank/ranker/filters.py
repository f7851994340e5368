"""Candidate suppression applied before scoring."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from feedrank.config.schemas import SuppressionConfig
from feedrank.data_model import Article
from feedrank.ranker.models import UserSignals


class SuppressionReason(str, Enum):
    """Why a candidate was removed from a feed."""

    CATEGORY_FILTER = "category_filter"
    SOURCE_MUTED = "source_muted"
    DOWNVOTED = "downvoted"
    SEEN_WITHOUT_INTERACTION = "seen_without_interaction"


@dataclass
class FilterResult:
    """Outcome of candidate suppression.

    Attributes:
        kept: Candidates to score, in input order.
        suppressed: article_id -> reason for each removed candidate.
        duplicates: Repeated candidate ids that were dropped.
    """

    kept: list[Article] = field(default_factory=list)
    suppressed: dict[str, SuppressionReason] = field(default_factory=dict)
    duplicates: int = 0

    def count_by_reason(self) -> dict[str, int]:
        """Number of removed candidates per reason."""
        counts: dict[str, int] = {}
        for reason in self.suppressed.values():
            counts[reason.value] = counts.get(reason.value, 0) + 1
        return counts


def suppression_reason(
    article: Article,
    signals: UserSignals,
    now: datetime,
    config: SuppressionConfig,
    category_id: str | None = None,
) -> SuppressionReason | None:
    """Decide whether one candidate is hidden from the user.

    Args:
        article: Candidate article.
        signals: Reader snapshot.
        now: Reference time for the impression window.
        config: Suppression thresholds.
        category_id: Optional category the feed is restricted to.

    Returns:
        The reason to suppress, or None to keep the article.
    """
    if category_id is not None and article.category_id != category_id:
        return SuppressionReason.CATEGORY_FILTER

    if article.source_id in signals.muted_source_ids:
        return SuppressionReason.SOURCE_MUTED

    vote = signals.user_vote(article.article_id)
    if vote is not None and vote < 0:
        return SuppressionReason.DOWNVOTED

    if article.article_id in signals.interacted_ids:
        return None

    if signals.recently_seen(
        article.article_id,
        now,
        threshold=config.impression_threshold,
        window=timedelta(hours=config.impression_window_hours),
    ):
        return SuppressionReason.SEEN_WITHOUT_INTERACTION
    return None


def filter_candidates(
    candidates: Sequence[Article],
    signals: UserSignals,
    now: datetime,
    config: SuppressionConfig | None = None,
    category_id: str | None = None,
) -> FilterResult:
    """Remove candidates that must not reach the feed.

    Duplicate ids keep their first occurrence.

    Args:
        candidates: Candidate articles.
        signals: Reader snapshot.
        now: Reference time.
        config: Suppression thresholds.
        category_id: Optional category restriction.

    Returns:
        FilterResult with kept candidates and suppression reasons.
    """
    config = config or SuppressionConfig()
    result = FilterResult()
    seen: set[str] = set()

    for article in candidates:
        if article.article_id in seen:
            result.duplicates += 1
            continue
        seen.add(article.article_id)

        reason = suppression_reason(article, signals, now, config, category_id)
        if reason is None:
            result.kept.append(article)
        else:
            result.suppressed[article.article_id] = reason

    return result
