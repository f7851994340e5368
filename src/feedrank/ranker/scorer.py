"""Scoring engine: one pure scoring function per phase.

All variants start from a base score of 100 scaled by a recency factor
that never drops below the phase floor, and round to 2 decimals.

    logged out:  base * recency * breaking
    onboarding:  base * flat_recency * new_category * seed + content
    adoption:    base * recency * breaking * category_w * source_w
                 * tie_break + content
"""

import hashlib
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from feedrank.config.schemas import ScoringConfig
from feedrank.data_model import Article
from feedrank.feedback.models import SeedInteraction
from feedrank.feedback.settings import DEFAULT_SETTINGS, UserAlgorithmSettings
from feedrank.ranker.models import ScoredArticle
from feedrank.ranker.phase import FeedPhase
from feedrank.weights.models import ScoringWeights


_MAX_HASH = float(0xFFFFFFFF)


@dataclass(frozen=True)
class ScoringContext:
    """Inputs shared by every candidate of one ranking request.

    Attributes:
        now: Reference time for recency.
        config: Scoring configuration.
        settings: Sanitized user settings.
        weights: Interest weights (adoption only).
        content_scores: article_id -> content similarity term.
        interacted_categories: Categories the user already voted on or saved.
        seed: Seed interaction for onboarding boosts.
    """

    now: datetime
    config: ScoringConfig = field(default_factory=ScoringConfig)
    settings: UserAlgorithmSettings = DEFAULT_SETTINGS
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    content_scores: Mapping[str, float] = field(default_factory=dict)
    interacted_categories: frozenset[str] = frozenset()
    seed: SeedInteraction | None = None

    def content_score(self, article_id: str) -> float:
        """Content term for an article, 0.0 when unavailable."""
        return self.content_scores.get(article_id, 0.0)


def recency_factor(hours_old: float, decay_hours: float, floor: float) -> float:
    """Linear decay over decay_hours, clamped at floor."""
    return max(floor, 1.0 - hours_old / decay_hours)


def tie_break_factor(article: Article, config: ScoringConfig) -> float:
    """Deterministic multiplier that separates simultaneous articles.

    The publish minute maps linearly onto +-tie_break_minute_amplitude and
    the first 32 bits of sha256(article_id) onto +-tie_break_id_amplitude.

    Args:
        article: Article to perturb.
        config: Scoring configuration with the amplitudes.

    Returns:
        Factor in [1 - a_m, 1 + a_m] * [1 - a_i, 1 + a_i].
    """
    minute_position = article.published_at.minute / 59.0
    minute_factor = 1.0 + config.tie_break_minute_amplitude * (
        2.0 * minute_position - 1.0
    )

    digest = hashlib.sha256(article.article_id.encode("utf-8")).hexdigest()
    id_position = int(digest[:8], 16) / _MAX_HASH
    id_factor = 1.0 + config.tie_break_id_amplitude * (2.0 * id_position - 1.0)

    return minute_factor * id_factor


def is_breaking(article: Article, ctx: ScoringContext) -> bool:
    """Whether the article is young enough for a breaking-news boost."""
    return article.hours_old(ctx.now) < ctx.config.breaking_news_hours


def score_logged_out(article: Article, ctx: ScoringContext) -> float:
    """Score an article for an anonymous visitor."""
    config = ctx.config
    hours = article.hours_old(ctx.now)
    score = config.base_score * recency_factor(
        hours,
        ctx.settings.recency_decay_hours,
        config.logged_out_recency_floor,
    )
    if is_breaking(article, ctx):
        score *= config.logged_out_breaking_multiplier
    return round(score, 2)


def score_onboarding(article: Article, ctx: ScoringContext) -> float:
    """Score an article for a user still in onboarding.

    Interest weights are ignored. Categories the user has not interacted
    with get a discovery bonus, and the seed interaction boosts its
    category and source.
    """
    config = ctx.config
    hours = article.hours_old(ctx.now)
    score = config.base_score
    if hours >= config.onboarding_full_score_hours:
        score *= recency_factor(
            hours,
            config.onboarding_decay_hours,
            config.onboarding_recency_floor,
        )

    if article.category_id not in ctx.interacted_categories:
        score *= config.onboarding_new_category_multiplier

    seed = ctx.seed
    if seed is not None:
        if article.category_id == seed.category_id:
            score *= config.seed_category_multiplier
        if article.source_id == seed.source_id:
            score *= config.seed_source_multiplier

    return round(score + ctx.content_score(article.article_id), 2)


def score_adoption(article: Article, ctx: ScoringContext) -> float:
    """Score an article for a fully personalized feed."""
    config = ctx.config
    hours = article.hours_old(ctx.now)
    score = config.base_score * recency_factor(
        hours,
        ctx.settings.recency_decay_hours,
        config.adoption_recency_floor,
    )

    if is_breaking(article, ctx):
        if article.source_id in config.high_volume_source_ids:
            score *= config.high_volume_breaking_multiplier
        else:
            score *= config.adoption_breaking_multiplier

    score *= ctx.weights.category_weight(article.category_id)
    score *= ctx.weights.source_weight(article.source_id)
    score *= tie_break_factor(article, config)

    return round(score + ctx.content_score(article.article_id), 2)


_SCORERS: dict[FeedPhase, Callable[[Article, ScoringContext], float]] = {
    FeedPhase.LOGGED_OUT: score_logged_out,
    FeedPhase.ONBOARDING: score_onboarding,
    FeedPhase.ADOPTION: score_adoption,
}


def score_article(phase: FeedPhase, article: Article, ctx: ScoringContext) -> float:
    """Score one article with the variant for phase."""
    return _SCORERS[phase](article, ctx)


def score_articles(
    phase: FeedPhase,
    articles: Sequence[Article],
    ctx: ScoringContext,
    votes: Mapping[str, int] | None = None,
) -> list[ScoredArticle]:
    """Score candidates, preserving input order.

    Args:
        phase: Phase selecting the scoring variant.
        articles: Candidates that survived suppression.
        ctx: Shared scoring inputs.
        votes: article_id -> the user's current vote.

    Returns:
        ScoredArticle per candidate with raw_score set.
    """
    votes = votes or {}
    scorer = _SCORERS[phase]
    return [
        ScoredArticle(
            article=article,
            raw_score=scorer(article, ctx),
            user_vote=votes.get(article.article_id),
        )
        for article in articles
    ]
