"""Data models for feed ranking."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Annotated

from pydantic import Field

from feedrank.data_model import Article, StrictBaseModel
from feedrank.feedback.models import (
    Impression,
    Save,
    SeedInteraction,
    SourcePreference,
    Vote,
)
from feedrank.feedback.settings import DEFAULT_SETTINGS, UserAlgorithmSettings
from feedrank.ranker.phase import FeedPhase
from feedrank.weights.models import ScoringWeights


class ScoredArticle(StrictBaseModel):
    """An article with its ranking scores.

    Attributes:
        article: The ranked article.
        raw_score: Scoring engine output.
        adjusted_score: Display score on the normalized scale.
        user_vote: The requesting user's current vote, if any.
    """

    article: Article
    raw_score: float
    adjusted_score: int = 0
    user_vote: int | None = None

    @property
    def article_id(self) -> str:
        """Identifier of the wrapped article."""
        return self.article.article_id


class RankedFeed(StrictBaseModel):
    """One page of a ranked feed.

    Attributes:
        articles: Ranked articles on this page.
        total: Number of articles in the full reranked feed.
        has_more: Whether another page follows.
        phase: Phase the feed was ranked under.
        offset: Index of the first article on this page.
        limit: Requested page size.
    """

    articles: list[ScoredArticle] = Field(default_factory=list)
    total: Annotated[int, Field(ge=0)] = 0
    has_more: bool = False
    phase: FeedPhase
    offset: Annotated[int, Field(ge=0)] = 0
    limit: Annotated[int, Field(ge=0)] = 0

    @property
    def article_ids(self) -> list[str]:
        """Ids on this page, in rank order."""
        return [a.article_id for a in self.articles]


@dataclass(frozen=True)
class UserSignals:
    """Request-scoped snapshot of everything known about the reader.

    Attributes:
        user_id: Reader, or None for anonymous requests.
        votes: article_id -> latest vote value (0 for retracted votes).
        saved_ids: Articles the reader saved.
        impressions: article_id -> impression counters.
        weights: Interest weights.
        settings: Sanitized algorithm settings.
        seed: First interaction recorded at signup, if any.
        interacted_categories: Categories of voted or saved articles.
        muted_source_ids: Sources the reader switched off.
    """

    user_id: str | None = None
    votes: Mapping[str, int] = field(default_factory=dict)
    saved_ids: frozenset[str] = frozenset()
    impressions: Mapping[str, Impression] = field(default_factory=dict)
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    settings: UserAlgorithmSettings = DEFAULT_SETTINGS
    seed: SeedInteraction | None = None
    interacted_categories: frozenset[str] = frozenset()
    muted_source_ids: frozenset[str] = frozenset()

    @property
    def is_authenticated(self) -> bool:
        """Whether the snapshot belongs to a signed-in user."""
        return self.user_id is not None

    @property
    def vote_count(self) -> int:
        """Number of non-zero votes."""
        return sum(1 for value in self.votes.values() if value != 0)

    @property
    def liked_ids(self) -> frozenset[str]:
        """Upvoted or saved articles."""
        upvoted = {a for a, value in self.votes.items() if value > 0}
        return frozenset(upvoted | self.saved_ids)

    @property
    def disliked_ids(self) -> frozenset[str]:
        """Downvoted articles."""
        return frozenset(a for a, value in self.votes.items() if value < 0)

    @property
    def interacted_ids(self) -> frozenset[str]:
        """Articles with a non-zero vote or a save."""
        voted = {a for a, value in self.votes.items() if value != 0}
        return frozenset(voted | self.saved_ids)

    def user_vote(self, article_id: str) -> int | None:
        """Current vote on an article, None when never voted."""
        return self.votes.get(article_id)

    def recently_seen(
        self,
        article_id: str,
        now: datetime,
        threshold: int,
        window: timedelta,
    ) -> bool:
        """Whether the article was shown often enough, recently, to hide it."""
        impression = self.impressions.get(article_id)
        if impression is None or impression.impression_count < threshold:
            return False
        return now - impression.last_seen_at <= window

    @classmethod
    def from_records(
        cls,
        user_id: str | None,
        votes: Iterable[Vote] = (),
        saves: Iterable[Save] = (),
        impressions: Iterable[Impression] = (),
        weights: ScoringWeights | None = None,
        settings: UserAlgorithmSettings = DEFAULT_SETTINGS,
        seed: SeedInteraction | None = None,
        interacted_categories: Iterable[str] = (),
        source_preferences: Iterable[SourcePreference] = (),
    ) -> "UserSignals":
        """Build a snapshot from store records.

        Votes are folded in chronological order so the latest value per
        article wins.
        """
        latest: dict[str, int] = {}
        for vote in sorted(votes, key=lambda v: v.voted_at):
            latest[vote.article_id] = vote.value
        return cls(
            user_id=user_id,
            votes=latest,
            saved_ids=frozenset(s.article_id for s in saves),
            impressions={i.article_id: i for i in impressions},
            weights=weights or ScoringWeights(),
            settings=settings,
            seed=seed,
            interacted_categories=frozenset(interacted_categories),
            muted_source_ids=frozenset(
                p.source_id for p in source_preferences if not p.active
            ),
        )
